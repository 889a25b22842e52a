"""Local randomness coordinator for development chains and simulations.

Behaves like a VRF coordinator mock: requests are queued with sequential ids
and only answered when someone calls ``fulfill_random_words``. The words are
derived from the request id, so runs are reproducible.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass

from raffle_engine.errors import InvalidRequest, NonexistentRequest
from raffle_engine.interfaces.coordinator import RandomnessConsumer
from raffle_engine.models.records import (
    FulfillmentResult,
    RandomWordsRequest,
    RandomWordsRequested,
)

log = logging.getLogger(__name__)

MAX_NUM_WORDS = 500
MIN_REQUEST_CONFIRMATIONS = 3
MAX_REQUEST_CONFIRMATIONS = 200
MAX_CALLBACK_GAS_LIMIT = 2_500_000


def derive_random_words(request_id: int, num_words: int) -> list[int]:
    """Expand a request id into ``num_words`` 256-bit integers."""
    words = []
    for i in range(num_words):
        digest = hashlib.sha256(f"{request_id}:{i}".encode("utf-8")).digest()
        words.append(int.from_bytes(digest, "big"))
    return words


@dataclass
class _PendingRequest:
    consumer: RandomnessConsumer
    request: RandomWordsRequest


class LocalVRFCoordinator:
    """In-process randomness coordinator."""

    def __init__(self, address: str) -> None:
        self._address = address
        self._next_request_id = 1
        self._pending: dict[int, _PendingRequest] = {}
        self.requests: list[RandomWordsRequested] = []
        self.fulfillments: list[FulfillmentResult] = []

    @property
    def address(self) -> str:
        return self._address

    @property
    def last_request_id(self) -> int | None:
        return self.requests[-1].request_id if self.requests else None

    @property
    def pending_requests(self) -> list[int]:
        return sorted(self._pending)

    def request_random_words(
        self, consumer: RandomnessConsumer, request: RandomWordsRequest
    ) -> int:
        if not 1 <= request.num_words <= MAX_NUM_WORDS:
            raise InvalidRequest(
                f"num_words must be between 1 and {MAX_NUM_WORDS} (got {request.num_words})"
            )
        if not MIN_REQUEST_CONFIRMATIONS <= request.request_confirmations <= MAX_REQUEST_CONFIRMATIONS:
            raise InvalidRequest(
                f"request_confirmations must be between {MIN_REQUEST_CONFIRMATIONS} "
                f"and {MAX_REQUEST_CONFIRMATIONS} (got {request.request_confirmations})"
            )
        if request.callback_gas_limit > MAX_CALLBACK_GAS_LIMIT:
            raise InvalidRequest(
                f"callback_gas_limit exceeds {MAX_CALLBACK_GAS_LIMIT} "
                f"(got {request.callback_gas_limit})"
            )

        request_id = self._next_request_id
        self._next_request_id += 1
        self._pending[request_id] = _PendingRequest(consumer=consumer, request=request)
        self.requests.append(RandomWordsRequested(
            request_id=request_id, consumer=consumer.address, request=request,
        ))
        log.info(
            "Randomness requested: id=%d consumer=%s words=%d",
            request_id, consumer.address, request.num_words,
        )
        return request_id

    def fulfill_random_words(
        self, request_id: int, words: list[int] | None = None
    ) -> FulfillmentResult:
        """Deliver words for a pending request.

        The request is consumed even if the consumer's callback fails, the
        same way an on-chain coordinator marks it fulfilled.
        """
        pending = self._pending.pop(request_id, None)
        if pending is None:
            raise NonexistentRequest(request_id)

        if words is None:
            words = derive_random_words(request_id, pending.request.num_words)
        elif len(words) != pending.request.num_words:
            self._pending[request_id] = pending
            raise InvalidRequest(
                f"expected {pending.request.num_words} words, got {len(words)}"
            )

        try:
            pending.consumer.raw_fulfill_random_words(self._address, request_id, words)
        except Exception as exc:
            log.error("Fulfillment of request %d failed: %s", request_id, exc)
            result = FulfillmentResult(
                request_id=request_id, success=False, random_words=words, error=str(exc),
            )
        else:
            log.info("Fulfilled request %d", request_id)
            result = FulfillmentResult(request_id=request_id, success=True, random_words=words)

        self.fulfillments.append(result)
        return result
