"""Configuration models for the raffle engine and its keeper."""

from __future__ import annotations

from dataclasses import dataclass, field

from raffle_engine.errors import ConfigError

WEI_PER_ETH = 10**18

# Gas lane of the reference VRF deployment (500 gwei key hash)
DEFAULT_KEY_HASH = "0x474e34a077df58807dbe9c96d3c009b23b3c6d0cce433e59bbf5b34f823bc56c"


@dataclass(frozen=True)
class RaffleConfig:
    """Immutable per-deployment raffle parameters."""

    entrance_fee: int = WEI_PER_ETH // 100  # 0.01 ETH
    interval: int = 30  # seconds between draws
    key_hash: str = DEFAULT_KEY_HASH
    subscription_id: int = 1
    callback_gas_limit: int = 500_000
    request_confirmations: int = 3
    num_words: int = 1

    def __post_init__(self) -> None:
        if self.entrance_fee <= 0:
            raise ConfigError(f"entrance_fee must be positive (got {self.entrance_fee})")
        if self.interval <= 0:
            raise ConfigError(f"interval must be positive (got {self.interval})")
        if self.callback_gas_limit <= 0:
            raise ConfigError("callback_gas_limit must be positive")
        if self.request_confirmations < 0:
            raise ConfigError("request_confirmations must be non-negative")
        if self.num_words != 1:
            raise ConfigError(f"num_words must be 1 (got {self.num_words})")


@dataclass
class KeeperConfig:
    """Automation keeper loop configuration."""

    check_interval: int = 5  # seconds between readiness checks
    error_backoff: int = 30  # seconds


@dataclass
class AccountsConfig:
    """Addresses the local chain is set up with."""

    owner: str = "0x" + "0" * 39 + "1"
    raffle: str = "0x" + "0" * 39 + "2"
    coordinator: str = "0x" + "0" * 39 + "3"


@dataclass
class EngineConfig:
    """Complete engine configuration."""

    raffle: RaffleConfig = field(default_factory=RaffleConfig)
    keeper: KeeperConfig = field(default_factory=KeeperConfig)
    accounts: AccountsConfig = field(default_factory=AccountsConfig)

    # Daemon
    log_level: str = "info"

    # Storage
    db_path: str = "~/.raffle_engine/history.db"
