"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from raffle_engine.errors import ConfigError
from raffle_engine.models.config import (
    AccountsConfig,
    EngineConfig,
    KeeperConfig,
    RaffleConfig,
)


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "RAFFLE_ENGINE_",
) -> EngineConfig:
    """Load engine configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (RAFFLE_ENGINE_ENTRANCE_FEE, etc.)
        2. TOML config file
        3. Defaults from EngineConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = EngineConfig()

    # ── Raffle section ─────────────────────────────────────
    # RaffleConfig is frozen and validates as a whole, so collect first.
    defaults = RaffleConfig()
    raffle = raw.get("raffle", {})
    params = dict(
        entrance_fee=_int(raffle.get("entrance_fee", defaults.entrance_fee), "entrance_fee"),
        interval=_int(raffle.get("interval", defaults.interval), "interval"),
        key_hash=str(raffle.get("key_hash", defaults.key_hash)),
        subscription_id=_int(
            raffle.get("subscription_id", defaults.subscription_id), "subscription_id"
        ),
        callback_gas_limit=_int(
            raffle.get("callback_gas_limit", defaults.callback_gas_limit), "callback_gas_limit"
        ),
        request_confirmations=_int(
            raffle.get("request_confirmations", defaults.request_confirmations),
            "request_confirmations",
        ),
    )

    # ── Keeper section ─────────────────────────────────────
    keeper = raw.get("keeper", {})
    cfg.keeper = KeeperConfig(
        check_interval=_int(keeper.get("check_interval", 5), "check_interval"),
        error_backoff=_int(keeper.get("error_backoff", 30), "error_backoff"),
    )

    # ── Accounts section ───────────────────────────────────
    accounts = raw.get("accounts", {})
    default_accounts = AccountsConfig()
    cfg.accounts = AccountsConfig(
        owner=str(accounts.get("owner", default_accounts.owner)),
        raffle=str(accounts.get("raffle", default_accounts.raffle)),
        coordinator=str(accounts.get("coordinator", default_accounts.coordinator)),
    )

    # ── Daemon & storage sections ──────────────────────────
    if v := raw.get("daemon", {}).get("log_level"):
        cfg.log_level = str(v)
    if v := raw.get("storage", {}).get("db_path"):
        cfg.db_path = str(v)

    # ── Environment variable overrides (highest priority) ──
    if fee := os.environ.get(f"{env_prefix}ENTRANCE_FEE"):
        params["entrance_fee"] = _int(fee, "entrance_fee")
    if interval := os.environ.get(f"{env_prefix}INTERVAL"):
        params["interval"] = _int(interval, "interval")
    if sub_id := os.environ.get(f"{env_prefix}SUBSCRIPTION_ID"):
        params["subscription_id"] = _int(sub_id, "subscription_id")
    if db_path := os.environ.get(f"{env_prefix}DB_PATH"):
        cfg.db_path = db_path
    if level := os.environ.get(f"{env_prefix}LOG_LEVEL"):
        cfg.log_level = level

    cfg.raffle = RaffleConfig(**params)

    # Expand ~ in paths
    if cfg.db_path != ":memory:":
        cfg.db_path = str(Path(cfg.db_path).expanduser())

    return cfg


def _int(value: object, name: str) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer (got {value!r})") from None
