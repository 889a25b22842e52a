"""raffle_engine - time-triggered raffle with verifiable-randomness draws."""

__version__ = "0.1.0"
