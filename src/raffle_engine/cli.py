"""CLI entry point for the raffle engine."""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click

from raffle_engine.api.data_api import DataAggregator, eth_str
from raffle_engine.chain.ledger import new_address
from raffle_engine.chain.local import deploy_local
from raffle_engine.config import load_config
from raffle_engine.errors import ConfigError
from raffle_engine.keeper import KeeperDaemon, run_keeper
from raffle_engine.models.snapshots import to_dict
from raffle_engine.storage.sqlite import SQLiteStateStore


def _load(ctx: click.Context):
    """Load config or exit with the validation error."""
    try:
        return load_config(ctx.obj["config_path"])
    except ConfigError as exc:
        click.echo(f"Error: invalid configuration: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """raffle-engine - time-triggered raffle with verifiable-randomness draws."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Keeper ─────────────────────────────────────────────


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Start the keeper daemon on a local wall-clock chain."""
    cfg = _load(ctx)
    if not ctx.obj["verbose"]:
        logging.getLogger().setLevel(cfg.log_level.upper())

    click.echo(f"Starting raffle-engine keeper (interval: {cfg.raffle.interval}s)")
    asyncio.run(run_keeper(cfg))


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show raffle configuration."""
    cfg = _load(ctx)
    r = cfg.raffle
    click.echo(f"Entrance fee:   {r.entrance_fee} wei ({eth_str(r.entrance_fee)})")
    click.echo(f"Interval:       {r.interval}s")
    click.echo(f"Key hash:       {r.key_hash}")
    click.echo(f"Subscription:   {r.subscription_id}")
    click.echo(f"Callback gas:   {r.callback_gas_limit}")
    click.echo(f"Confirmations:  {r.request_confirmations}")
    click.echo(f"Owner:          {cfg.accounts.owner}")
    click.echo(f"Coordinator:    {cfg.accounts.coordinator}")
    click.echo(f"Check interval: {cfg.keeper.check_interval}s")
    click.echo(f"DB path:        {cfg.db_path}")


# ── Simulation ─────────────────────────────────────────


@cli.command()
@click.option("-p", "--players", type=click.IntRange(min=1), default=4, help="Entrants per round")
@click.option("-r", "--rounds", type=click.IntRange(min=1), default=3, help="Rounds to run")
@click.option("--db", "db_path", default=":memory:", help="Persist history to this SQLite file")
@click.option("--json", "as_json", is_flag=True, help="Print the final snapshot as JSON")
@click.pass_context
def simulate(ctx: click.Context, players: int, rounds: int, db_path: str, as_json: bool) -> None:
    """Run raffle rounds on an in-memory chain with a local coordinator."""
    cfg = _load(ctx)

    async def _simulate():
        deployment = deploy_local(cfg)
        raffle = deployment.raffle
        fee = raffle.entrance_fee

        store = SQLiteStateStore(db_path)
        await store.initialize()
        keeper = KeeperDaemon(
            raffle, store, cfg.keeper, local_coordinator=deployment.coordinator,
        )

        addresses = [new_address(f"player-{i}") for i in range(players)]
        for address in addresses:
            deployment.ledger.set_balance(address, fee * rounds)

        try:
            for n in range(1, rounds + 1):
                for address in addresses:
                    raffle.enter(address, fee)
                deployment.clock.advance(raffle.interval + 1)

                request_id = await keeper.run_once()
                if request_id is None:
                    click.echo(f"Round {n}: no draw performed", err=True)
                    continue
                winner = raffle.recent_winner
                click.echo(
                    f"Round {n}: request {request_id}, winner {winner} "
                    f"({eth_str(deployment.ledger.balance_of(winner))} balance)"
                )

            snapshot = await DataAggregator(raffle, store, keeper.session).get_snapshot(rounds)
            if as_json:
                click.echo(json.dumps(to_dict(snapshot), indent=2))
            else:
                click.echo(f"\nPaid out: {eth_str(snapshot.total_paid_out_wei)}")
                click.echo(f"State:    {snapshot.state}")
        finally:
            await store.close()

    asyncio.run(_simulate())


# ── History ────────────────────────────────────────────


@cli.command()
@click.option("-n", "--limit", type=int, default=10, help="Number of recent rounds to show")
@click.pass_context
def history(ctx: click.Context, limit: int) -> None:
    """Show recent draw rounds."""
    cfg = _load(ctx)

    async def _history():
        store = SQLiteStateStore(cfg.db_path)
        await store.initialize()
        try:
            rounds = await store.get_rounds(limit)
            if not rounds:
                click.echo("No rounds recorded.")
                return

            for r in rounds:
                prize = eth_str(r.prize) if r.prize is not None else "-"
                click.echo(
                    f"  request={r.request_id} [{r.status:11s}] players={r.participant_count} "
                    f"winner={r.winner or '-'} prize={prize}"
                )
        finally:
            await store.close()

    asyncio.run(_history())


@cli.command()
@click.option("-n", "--limit", type=int, default=20, help="Number of entries to show")
@click.pass_context
def activity(ctx: click.Context, limit: int) -> None:
    """Show the keeper activity log."""
    cfg = _load(ctx)

    async def _activity():
        store = SQLiteStateStore(cfg.db_path)
        await store.initialize()
        try:
            entries = await store.get_recent_activity(limit)
            if not entries:
                click.echo("No activity recorded.")
                return

            for a in entries:
                click.echo(f"  {a.created_at} [{a.event_type}] {a.message}")
        finally:
            await store.close()

    asyncio.run(_activity())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
