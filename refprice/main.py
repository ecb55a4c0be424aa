#!/usr/bin/env python3
"""Reference Price Converter.

Fetches an asset's price from several exchanges and aggregators at once,
averages the prices that came back, converts the average into a target
currency and then tells you how much of the asset an amount of that currency
buys.

The reference price is computed once at startup and reused for every amount.
"""

import argparse
import asyncio
import logging
import os
import sys

from .src.fetchers import DEFAULT_SOURCES, BaseFetcher, get_available_fetchers
from .src.Pair import Pair
from .src.PriceAggregator import AggregationError, PriceAggregator
from .src.RateConverter import ConversionError, RateConverter
from .src.ReferencePrice import (
    ConvertedPrice,
    build_default_fetchers,
    compute_converted_price,
    convert_amount,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def parse_sources(sources_str: str) -> list[str]:
    """Parse a comma-separated source list.

    :param sources_str: e.g. "coinbase, Kraken,bitstamp".
    :returns: Lowercase source names, empty entries dropped.
    """
    return [s.strip().lower() for s in sources_str.split(",") if s.strip()]


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser; defaults come from the environment."""
    available_sources = get_available_fetchers()

    parser = argparse.ArgumentParser(
        description="Reference Price Converter: multi-source price in another currency",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Available price sources:
  {', '.join(available_sources)}

Examples:
  # ETH/USD from all sources, converted to AUD, interactive
  python -m refprice.main

  # BTC priced in EUR from three sources, one conversion
  python -m refprice.main --pair btc/usd --target eur \\
      --sources coinbase,kraken,bitstamp --amount 250

Environment variables (CLI args take precedence):
  PAIR, TARGET_CURRENCY, SOURCES, FETCH_TIMEOUT, MIN_SOURCES
""",
    )

    parser.add_argument(
        "--pair",
        type=str,
        help="Asset and the currency sources quote it in (default: eth/usd)",
        default=os.environ.get("PAIR") or "eth/usd",
    )

    parser.add_argument(
        "--target",
        type=str,
        help="Currency to convert the price into (default: aud)",
        default=os.environ.get("TARGET_CURRENCY") or "aud",
    )

    parser.add_argument(
        "--sources",
        type=str,
        help=f"Comma-separated price sources. Available: {', '.join(available_sources)}",
        default=os.environ.get("SOURCES") or ",".join(DEFAULT_SOURCES),
    )

    parser.add_argument(
        "--fetch-timeout",
        dest="fetch_timeout",
        type=float,
        help="Timeout for each source request in seconds (default: 10.0)",
        default=float(os.environ.get("FETCH_TIMEOUT") or "10.0"),
    )

    parser.add_argument(
        "--min-sources",
        dest="min_sources",
        type=int,
        help="Minimum sources that must return a price (default: 1)",
        default=int(os.environ.get("MIN_SOURCES") or "1"),
    )

    parser.add_argument(
        "--amount",
        type=float,
        help="Amount of target currency to convert; prompts interactively if omitted",
        default=None,
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    return parser


async def run(
    pair: Pair,
    target: str,
    sources: list[str],
    fetch_timeout: float,
    min_sources: int,
) -> ConvertedPrice:
    """Compute the reference price once and release the HTTP client.

    :param pair: Asset and quote currency.
    :param target: Target currency.
    :param sources: Source names to query.
    :param fetch_timeout: Per-source timeout in seconds.
    :param min_sources: Minimum successful sources.
    :returns: ConvertedPrice in the target currency.
    """
    fetchers = build_default_fetchers(
        base=pair.base, quote=pair.quote, timeout=fetch_timeout, sources=sources
    )
    converter = RateConverter(base=pair.base, quote=pair.quote, target=target)
    try:
        return await compute_converted_price(
            fetchers, converter, PriceAggregator(min_sources=min_sources)
        )
    finally:
        await BaseFetcher.close_shared_client()


def prompt_loop(pair: Pair, target: str, reference_price: float) -> None:
    """Read amounts from stdin and print how much of the asset each buys.

    :param pair: Asset being bought.
    :param target: Currency the amounts are in.
    :param reference_price: Asset price in the target currency.
    """
    asset, currency = pair.base.upper(), target.upper()
    print(f"\n=== {asset} Price Converter ===")
    print(f"Enter the amount in {currency} (or 'q' to quit):")

    while True:
        try:
            line = input(f"{currency} amount: ").strip()
        except EOFError:
            break

        if line.lower() == "q":
            print("\nGoodbye!\n")
            break

        try:
            amount = float(line)
        except ValueError:
            print("Invalid input. Please enter a valid number or 'q' to quit.")
            continue

        try:
            units = convert_amount(amount, reference_price)
        except ValueError:
            print("Please enter a positive amount.")
            continue

        print(f"You can get {units:.8f} {asset} for {amount:.2f} {currency}")
        print("\nEnter another amount or 'q' to quit:")


def main() -> None:
    """Main entry point for the Reference Price Converter CLI."""
    parser = build_parser()
    args = parser.parse_args()

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Validate arguments
    try:
        pair = Pair.from_string(args.pair)
    except ValueError as e:
        parser.error(str(e))

    target = args.target.strip().lower()
    if not target:
        parser.error("--target must not be empty")
    if target == pair.quote:
        parser.error(f"--target must differ from the quote currency {pair.quote}")

    if args.fetch_timeout <= 0:
        parser.error("--fetch-timeout must be positive")

    if args.min_sources < 1:
        parser.error("--min-sources must be at least 1")

    if args.amount is not None and args.amount <= 0:
        parser.error("--amount must be positive")

    sources = parse_sources(args.sources)
    if not sources:
        parser.error("At least one source must be specified")

    available_sources = get_available_fetchers()
    invalid_sources = [s for s in sources if s not in available_sources]
    if invalid_sources:
        parser.error(
            f"Unknown sources: {invalid_sources}. "
            f"Available: {', '.join(available_sources)}"
        )

    logger.info(f"Pair:          {pair}")
    logger.info(f"Target:        {target}")
    logger.info(f"Sources:       {', '.join(sources)}")
    logger.info(f"Fetch Timeout: {args.fetch_timeout}s")

    try:
        result = asyncio.run(
            run(pair, target, sources, args.fetch_timeout, args.min_sources)
        )
    except (AggregationError, ConversionError) as e:
        logger.error(f"Could not compute reference price: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Shutting down...")
        return

    print(f"\nCurrent {pair.base.upper()} price in {target.upper()}: {result.price:.2f}")

    if args.amount is not None:
        units = convert_amount(args.amount, result.price)
        print(f"You can get {units:.8f} {pair.base.upper()} for "
              f"{args.amount:.2f} {target.upper()}")
        return

    prompt_loop(pair, target, result.price)


if __name__ == "__main__":
    main()
