"""
sealbid CLI - Command Line Interface for the private auction engine

Main entry point for all CLI commands. Every command builds the app from
configuration, restores the persisted session, runs one operation and exits.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path

import click

from sealbid import __version__
from sealbid.core.app import App, build_app
from sealbid.core.auction import Auction, ManualClock, system_clock
from sealbid.core.config import load_config
from sealbid.core.errors import AuctionError
from sealbid.core.session import NetworkSwitch
from sealbid.utils.logger import setup_logging


def run_with_app(ctx, operation):
    """
    Start the app, await operation(app), and shut down.

    AuctionError is reported as a click error (exit code 1).
    """
    config = ctx.obj["config"]

    async def main():
        app = build_app(config)
        try:
            switch = await app.start()
            _echo_fallback(switch)
            return await operation(app)
        finally:
            app.close()

    try:
        return asyncio.run(main())
    except AuctionError as e:
        raise click.ClickException(str(e)) from e


def _echo_fallback(switch: NetworkSwitch):
    if switch.fell_back:
        click.echo(f"⚠️  {switch.requested.value} network unreachable, using {switch.network.value}: {switch.reason}")


def _fmt_time(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def _fmt_remaining(ms: int) -> str:
    minutes = ms // 60_000
    return f"{minutes // 60}h {minutes % 60:02d}m"


def _echo_auction(auction: Auction, now: int):
    if not auction.active:
        status = "closed"
    elif auction.has_ended(now):
        status = "ended"
    else:
        status = "active"
    click.echo(f"  #{auction.id}  {auction.item_name}  [{status}]")

    line = f"      min bid: {auction.minimum_bid:g}   ends: {_fmt_time(auction.ends_at)}"
    if status == "active":
        line += f" (in {_fmt_remaining(auction.time_remaining(now))})"
    click.echo(line)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--data-dir", default=None, help="Data directory (default ~/.sealbid)")
@click.option("--env-file", default=None, help="Path to a .env file")
@click.option("--memory", is_flag=True, help="Keep all state in memory")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, debug, data_dir, env_file, memory):
    """sealbid - Private sealed-bid auctions"""
    overrides = {}
    if data_dir:
        overrides["data_dir"] = Path(data_dir).expanduser()
    if memory:
        overrides["persist"] = False

    try:
        config = load_config(env_file=env_file, **overrides)
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    level = logging.DEBUG if debug else logging.WARNING
    setup_logging(level=level, log_dir=str(config.log_dir), log_to_file=config.log_to_file)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# =============================================================================
# Session Commands
# =============================================================================


@cli.group()
def session():
    """Wallet session commands"""
    pass


@session.command("status")
@click.pass_context
def session_status(ctx):
    """Show mode, network and connected address"""

    async def op(app: App):
        s = app.session.snapshot()
        click.echo(f"Mode:    {s.app_mode.value} ({s.wallet_mode.value} wallet)")
        click.echo(f"Network: {s.network.value}")
        click.echo(f"State:   {s.state.value}")
        address = app.session.current_address()
        if address:
            click.echo(f"Address: {address}")
        if s.connection_error:
            click.echo(f"Error:   {s.connection_error}")

    run_with_app(ctx, op)


@session.command("connect")
@click.option("--credentials", default=None, help="Demo credentials (stable address)")
@click.option("--provider", "provider_id", default=None, help="External wallet provider id")
@click.pass_context
def session_connect(ctx, credentials, provider_id):
    """Connect a wallet for the current mode"""

    async def op(app: App):
        address = await app.session.connect(credentials=credentials, provider_id=provider_id)
        click.echo(f"✓ Connected: {address}")

    run_with_app(ctx, op)


@session.command("disconnect")
@click.pass_context
def session_disconnect(ctx):
    """Log out of the current wallet"""

    async def op(app: App):
        await app.session.disconnect()
        click.echo("✓ Disconnected")

    run_with_app(ctx, op)


@session.command("mode")
@click.argument("app_mode", type=click.Choice(["demo", "real"]))
@click.pass_context
def session_mode(ctx, app_mode):
    """Switch between demo and real mode"""

    async def op(app: App):
        await app.session.switch_mode(app_mode)
        s = app.session.snapshot()
        click.echo(f"✓ Mode: {s.app_mode.value} ({s.wallet_mode.value} wallet)")

    run_with_app(ctx, op)


@session.command("network")
@click.argument("network", type=click.Choice(["local", "remote"]))
@click.pass_context
def session_network(ctx, network):
    """Switch between the local and remote network"""

    async def op(app: App):
        switch = await app.session.switch_network(network)
        _echo_fallback(switch)
        click.echo(f"✓ Network: {switch.network.value}")

    run_with_app(ctx, op)


# =============================================================================
# Auction Commands
# =============================================================================


@cli.group()
def auction():
    """Auction commands"""
    pass


@auction.command("create")
@click.option("--item", "item_name", required=True, help="Item name")
@click.option("--description", required=True, help="Item description")
@click.option("--hours", type=float, default=24.0, help="Duration in hours")
@click.option("--min-bid", type=float, required=True, help="Minimum bid")
@click.pass_context
def auction_create(ctx, item_name, description, hours, min_bid):
    """Create an auction as the connected wallet"""

    async def op(app: App):
        auction_id = await app.service.create_auction(item_name, description, hours, min_bid)
        click.echo(f"✓ Auction created: #{auction_id}")

    run_with_app(ctx, op)


@auction.command("list")
@click.option("--active", "active_only", is_flag=True, help="Only active auctions")
@click.pass_context
def auction_list(ctx, active_only):
    """List auctions"""

    async def op(app: App):
        auctions = await app.service.list_auctions(active_only=active_only)
        if not auctions:
            click.echo("No auctions found.")
            return
        now = system_clock()
        for a in auctions:
            _echo_auction(a, now)

    run_with_app(ctx, op)


@auction.command("show")
@click.argument("auction_id", type=int)
@click.pass_context
def auction_show(ctx, auction_id):
    """Show one auction"""

    async def op(app: App):
        a = await app.service.get_auction(auction_id)
        if a is None:
            raise click.ClickException(f"Auction {auction_id} not found")
        _echo_auction(a, system_clock())
        click.echo(f"      {a.description}")
        click.echo(f"      creator: {a.creator}")

    run_with_app(ctx, op)


@auction.command("bid")
@click.argument("auction_id", type=int)
@click.argument("amount", type=float)
@click.pass_context
def auction_bid(ctx, auction_id, amount):
    """Place a sealed bid"""

    async def op(app: App):
        bid_id = await app.service.place_bid(auction_id, amount)
        click.echo(f"✓ Sealed bid placed: {bid_id}")

    run_with_app(ctx, op)


@auction.command("finalize")
@click.argument("auction_id", type=int)
@click.pass_context
def auction_finalize(ctx, auction_id):
    """Close an ended auction and announce the winner"""

    async def op(app: App):
        outcome = await app.service.finalize(auction_id)
        if outcome.has_winner:
            click.echo(f"✓ Winner: {outcome.result.winner} ({outcome.result.winning_amount:g}, "
                       f"{outcome.result.bid_count} bids)")
        else:
            click.echo("✓ Auction closed with no winner")

    run_with_app(ctx, op)


@auction.command("winner")
@click.argument("auction_id", type=int)
@click.pass_context
def auction_winner(ctx, auction_id):
    """Show the winner of a finalized auction"""

    async def op(app: App):
        winner = await app.service.get_winner(auction_id)
        if winner is None:
            click.echo("No winner announced.")
            return
        click.echo(f"Winner: {winner.address} ({winner.winning_amount:g})")
        if await app.service.am_i_winner(auction_id):
            click.echo("🏆 You won this auction!")

    run_with_app(ctx, op)


@auction.command("clear")
@click.confirmation_option(prompt="Delete all local auction data?")
@click.pass_context
def auction_clear(ctx):
    """Delete all local auction data"""

    async def op(app: App):
        await app.service.clear_demo_data()
        click.echo("✓ Local auction data cleared")

    run_with_app(ctx, op)


# =============================================================================
# Demo Command
# =============================================================================


@cli.command("demo")
@click.pass_context
def demo(ctx):
    """Run an in-memory sealed-bid auction walkthrough"""
    config = load_config(persist=False, seed_demo_auctions=False, log_to_file=False)
    clock = ManualClock(system_clock())

    async def walkthrough():
        app = build_app(config, clock=clock)
        await app.start()
        session, service = app.session, app.service

        click.echo("=" * 60)
        click.echo("  SEALBID - PRIVATE AUCTION DEMO")
        click.echo("=" * 60)
        click.echo()

        click.echo("🏛️  Alice creates an auction...")
        alice = await session.connect(credentials="alice")
        auction_id = await service.create_auction("Vase", "Ming dynasty vase", 1, 100)
        click.echo(f"  ✓ Auction #{auction_id} by {alice[:12]}... (min bid 100, 1 hour)")
        click.echo()

        click.echo("🔒 Sealed bids...")
        for name, amount in (("bob", 120), ("carol", 150)):
            address = await session.connect(credentials=name)
            await service.place_bid(auction_id, amount)
            click.echo(f"  ✓ {name} ({address[:12]}...) placed a sealed bid")
        click.echo()

        click.echo("⏱️  One hour passes...")
        clock.advance_hours(1)
        click.echo()

        click.echo("⚖️  Finalizing...")
        outcome = await service.finalize(auction_id)
        click.echo(f"  ✓ Winner: {outcome.result.winner[:12]}... at {outcome.result.winning_amount:g}")
        click.echo(f"  ✓ Bids: {outcome.result.bid_count}")
        click.echo(f"  ✓ Carol won: {await service.am_i_winner(auction_id)}")
        click.echo()
        click.echo("✅ Demo complete!")

    try:
        asyncio.run(walkthrough())
    except AuctionError as e:
        raise click.ClickException(str(e)) from e


if __name__ == "__main__":
    cli()
