"""API components - snapshot aggregation."""

from raffle_engine.api.data_api import DataAggregator, eth_str

__all__ = ["DataAggregator", "eth_str"]
