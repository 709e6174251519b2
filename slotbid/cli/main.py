"""
slotbid CLI - Command Line Interface for the auction engine

Main entry point for all CLI commands.
"""

import json
from typing import List, Tuple

import click

from slotbid.utils.logger import setup_logging


def parse_bid(raw: str) -> Tuple[str, int]:
    """
    Parse a `bidder:amount` pair.

    The amount is taken after the last colon so bidder names may contain colons.
    """
    bidder, sep, amount = raw.rpartition(":")
    if not sep or not bidder:
        raise click.BadParameter(f"expected bidder:amount, got {raw!r}")
    try:
        return bidder, int(amount)
    except ValueError:
        raise click.BadParameter(f"amount must be an integer in {raw!r}")


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--env-file", default=None, type=click.Path(dir_okay=False), help="Load SLOTBID_* settings from a .env file")
@click.option("--log-dir", default=None, help="Also write logs to this directory")
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx, debug, env_file, log_dir):
    """slotbid - work-session auctions with shared viewing windows"""
    import logging
    from slotbid.core.config import load_config

    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(env_file)
        # None defers to SLOTBID_LOG_LEVEL, which the .env file may have set
        setup_logging(
            level=logging.DEBUG if debug else None,
            log_dir=log_dir,
            log_to_file=log_dir is not None,
        )
    except ValueError as e:
        raise click.UsageError(str(e))


# =============================================================================
# Allocate Command
# =============================================================================


@cli.command("allocate")
@click.argument("bids", nargs=-1, required=True)
@click.option("--duration", default=None, type=click.IntRange(min=1), help="Artifact length in seconds")
@click.option("--max-winners", default=None, type=click.IntRange(min=1), help="Keep only the top N bids")
@click.option("--as-json", is_flag=True, help="Print the segments as JSON")
@click.pass_context
def allocate(ctx, bids, duration, max_winners, as_json):
    """Split an artifact among BIDS given as bidder:amount pairs"""
    from slotbid.core.auction import (
        Bid,
        AllocationInvariantViolation,
        allocate_segments,
        bid_share,
        rank_bids,
    )
    from slotbid.core.playback import format_duration

    config = ctx.obj["config"]
    if duration is None:
        duration = config.default_total_duration

    parsed: List[Bid] = []
    seen = set()
    for seq, raw in enumerate(bids):
        bidder, amount = parse_bid(raw)
        if amount < 1:
            raise click.BadParameter(f"amount must be positive in {raw!r}")
        if bidder in seen:
            raise click.BadParameter(f"bidder {bidder!r} listed twice")
        seen.add(bidder)
        parsed.append(Bid(bidder=bidder, amount=amount, seq=seq))

    if max_winners is None:
        max_winners = len(parsed)
    winning = rank_bids(parsed)[:max_winners]
    try:
        segments = allocate_segments(winning, duration)
    except AllocationInvariantViolation as e:
        raise click.ClickException(str(e))

    ordered = sorted(segments.values(), key=lambda s: s.start)
    if as_json:
        click.echo(json.dumps(
            [{"bidder": s.bidder, "start": s.start, "end": s.end} for s in ordered],
            indent=2,
        ))
        return

    amounts = {b.bidder: b for b in winning}
    for seg in ordered:
        share = bid_share(amounts[seg.bidder], winning)
        click.echo(f"  {seg.bidder}: {format_duration(seg.start)} - {format_duration(seg.end)} "
                   f"({seg.duration}s, {share:.1f}%)")
    assigned = sum(s.duration for s in ordered)
    if assigned < duration:
        click.echo(f"  unassigned tail: {duration - assigned}s")


# =============================================================================
# Demo Command
# =============================================================================


@cli.command("demo")
@click.option("--duration", default=3600, type=click.IntRange(min=1), help="Length of the recorded artifact")
@click.pass_context
def demo(ctx, duration):
    """Walk one multi-winner auction from listing to unlock"""
    from slotbid.core.engine import AuctionEngine
    from slotbid.core.playback import format_duration

    engine = AuctionEngine(config=ctx.obj["config"])

    click.echo("=" * 60)
    click.echo("  SLOTBID - DEMO")
    click.echo("=" * 60)
    click.echo()

    click.echo("📦 Listing a work session...")
    auction, err = engine.create_auction(
        creator="creator-a",
        title="Illustration session",
        starting_price=2500,
        max_winners=2,
    )
    if err is not None:
        raise click.ClickException(f"listing failed: {err.name}")
    auction_id = auction.auction_id
    click.echo(f"  ✓ Auction {auction_id[:8]} open at {auction.current_price}")
    click.echo()

    click.echo("💰 Bidding...")
    for bidder, amount in [("user-x", 2600), ("new-user", 2800), ("user-x", 3000), ("user-b", 2900)]:
        snapshot, err = engine.place_bid(auction_id, bidder, amount)
        status = "accepted" if err is None else f"rejected ({err.name})"
        click.echo(f"  {bidder} bids {amount}: {status}")
    click.echo()

    click.echo("⚖️  Settling...")
    engine.end_auction(auction_id)
    engine.start_work(auction_id, "creator-a")
    snapshot, err = engine.complete_work(auction_id, "creator-a", duration)
    if err is not None:
        raise click.ClickException(f"completion failed: {err.name}")
    engine.unlock_artifact(auction_id, "creator-a")
    click.echo(f"  ✓ Winners: {', '.join(snapshot.winners)}")
    click.echo()

    click.echo("🎬 Viewing windows:")
    for seg in sorted(snapshot.segments.values(), key=lambda s: s.start):
        click.echo(f"  {seg.bidder}: {format_duration(seg.start)} - {format_duration(seg.end)}")
    click.echo()
    click.echo("=" * 60)


if __name__ == "__main__":
    cli()
