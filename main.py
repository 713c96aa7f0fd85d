"""Command line entry point for the market cap feed."""
import asyncio
import functools
import sys
from typing import List, Sequence, Tuple

import click

from mcapfeed.aggregator import MarketCapAggregator
from mcapfeed.config import EXPORT_DIR, TOKENS_FILE
from mcapfeed.constants import PLATFORMS, TIME_RANGES
from mcapfeed.data.transformer import export_series_csv, format_market_cap
from mcapfeed.http_client import JsonClient
from mcapfeed.models import MarketCapSeries, Progress, Token, build_custom_token, default_tokens
from mcapfeed.storage import load_saved_tokens, merge_token_preferences, save_tokens
from mcapfeed.utils import setup_logger

logger = setup_logger(__name__)

RANGE_CHOICES = [label for label, _ in TIME_RANGES]
RANGE_DAYS = dict(TIME_RANGES)
PLATFORM_CHOICES = [pid for pid, _ in PLATFORMS]


def cli_error_handler(func):
    """Log expected CLI errors and exit non-zero instead of dumping a traceback."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (ValueError, TypeError) as e:
            logger.error(f"Error: {e}")
            sys.exit(1)
        except Exception as e:
            logger.error(f"An unexpected error occurred: {e}", exc_info=True)
            sys.exit(1)

    return wrapper


def load_tokens() -> List[Token]:
    """Default tokens with the saved ``enabled`` preferences applied."""
    return merge_token_preferences(default_tokens(), load_saved_tokens(TOKENS_FILE))


def parse_contract(value: str) -> Tuple[str, str]:
    if ":" not in value:
        raise ValueError(f"Expected PLATFORM:ADDRESS, got {value!r}")
    platform, contract = value.split(":", 1)
    platform = platform.strip().lower()
    if platform not in PLATFORM_CHOICES:
        raise ValueError(f"Unknown platform {platform!r} (choose from {', '.join(PLATFORM_CHOICES)})")
    return platform, contract.strip()


def print_progress(progress: Progress) -> None:
    click.echo(f"[{progress.current}/{progress.total}] {progress.token_symbol}")


def print_summary(results: Sequence[MarketCapSeries]) -> None:
    click.echo(f"\n{'SYMBOL':<10}{'SOURCE':<15}{'POINTS':>8}{'MARKET CAP':>16}")
    for series in results:
        mc = format_market_cap(series.current_market_cap) if not series.error else "N/A"
        click.echo(f"{series.symbol:<10}{series.source.value:<15}{len(series.points):>8}{mc:>16}")


async def _fetch(
    tokens: List[Token], contracts: Sequence[Tuple[str, str]], days
) -> List[MarketCapSeries]:
    async with JsonClient() as client:
        aggregator = MarketCapAggregator.with_client(client)

        for platform, contract in contracts:
            info = await aggregator.get_token_by_contract(platform, contract)
            if info is None:
                logger.warning(f"No token info for {platform}:{contract}, skipping")
                continue
            custom = build_custom_token(platform, contract, info)
            if any(t.id == custom.id for t in tokens):
                logger.warning(f"{custom.symbol} is already in the token list")
                continue
            tokens.append(custom)

        return await aggregator.fetch_all(tokens, days, on_progress=print_progress)


async def _lookup(platform: str, contract: str):
    async with JsonClient() as client:
        return await MarketCapAggregator.with_client(client).get_token_by_contract(platform, contract)


@click.group()
def cli():
    """Market cap time series for DEX tokens."""


@cli.command()
@click.option("--days", type=click.Choice(RANGE_CHOICES), default="30d", show_default=True)
@click.option("--token", "symbols", multiple=True, help="Only fetch these symbols (repeatable).")
@click.option("--contract", "contracts", multiple=True, help="Extra token as PLATFORM:ADDRESS (repeatable).")
@click.option("--export", is_flag=True, help="Write one CSV per token to the export directory.")
@cli_error_handler
def fetch(days: str, symbols: Tuple[str, ...], contracts: Tuple[str, ...], export: bool) -> None:
    """Fetch market cap series for the enabled tokens."""
    tokens = load_tokens()
    if symbols:
        wanted = {s.upper() for s in symbols}
        tokens = [t for t in tokens if t.symbol.upper() in wanted]
    else:
        tokens = [t for t in tokens if t.enabled]

    parsed = [parse_contract(c) for c in contracts]
    if not tokens and not parsed:
        logger.warning("No tokens selected.")
        return

    results = asyncio.run(_fetch(tokens, parsed, RANGE_DAYS[days]))
    print_summary(results)

    if export:
        paths = export_series_csv(results, EXPORT_DIR)
        click.echo(f"Exported {len(paths)} file(s) to {EXPORT_DIR}")


@cli.command()
@click.argument("platform", type=click.Choice(PLATFORM_CHOICES))
@click.argument("contract")
@cli_error_handler
def lookup(platform: str, contract: str) -> None:
    """Look up a token by contract address."""
    info = asyncio.run(_lookup(platform, contract))
    if info is None:
        click.echo("Token not found.")
        sys.exit(1)
    click.echo(f"{info.symbol} - {info.name}")
    click.echo(f"Price:      ${info.price:,.8f}")
    click.echo(f"Market cap: {format_market_cap(info.market_cap)}")


def _set_enabled(symbol: str, enabled: bool) -> None:
    tokens = load_tokens()
    matches = [t for t in tokens if t.symbol.upper() == symbol.upper()]
    if not matches:
        raise ValueError(f"Unknown token symbol {symbol!r}")

    updated = [t.with_enabled(enabled) if t in matches else t for t in tokens]
    if not save_tokens(updated, TOKENS_FILE):
        raise ValueError(f"Could not write {TOKENS_FILE}")
    click.echo(f"{symbol.upper()} {'enabled' if enabled else 'disabled'}")


@cli.command()
@click.argument("symbol")
@cli_error_handler
def enable(symbol: str) -> None:
    """Show a token in fetches by default."""
    _set_enabled(symbol, True)


@cli.command()
@click.argument("symbol")
@cli_error_handler
def disable(symbol: str) -> None:
    """Hide a token from fetches by default."""
    _set_enabled(symbol, False)


if __name__ == "__main__":
    cli()
