"""Reference price pipeline: fetch, aggregate, convert.

Data flows strictly forward:

    fetchers --(FetchCoordinator)--> outcomes --(PriceAggregator)--> quote
             --(RateConverter)--> converted price

Per-source failures stop at the FetchCoordinator. NoValidPricesError and
ConversionError subclasses end the run and propagate to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .FetchCoordinator import FetchCoordinator
from .fetchers import DEFAULT_SOURCES, get_fetcher
from .PriceAggregator import AggregateQuote, PriceAggregator
from .RateConverter import ExchangeRate

if TYPE_CHECKING:
    from .fetchers import BaseFetcher
    from .RateConverter import RateConverter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConvertedPrice:
    """Final reference price in the target currency.

    :ivar price: Asset price in the target currency.
    :ivar quote: Aggregated quote the price was derived from.
    :ivar rate: Exchange rate applied to the quote.
    """

    price: float
    quote: AggregateQuote
    rate: ExchangeRate


def build_default_fetchers(
    base: str = "eth",
    quote: str = "usd",
    timeout: float | None = None,
    sources: list[str] | None = None,
) -> list[BaseFetcher]:
    """Create fetchers for the given sources at their public endpoints.

    :param base: Base currency symbol.
    :param quote: Quote currency symbol.
    :param timeout: Per-call timeout in seconds.
    :param sources: Source names (default: all five built-in sources).
    :returns: One fetcher per source.
    :raises ValueError: If a source name is unknown or the list is empty.
    """
    names = DEFAULT_SOURCES if sources is None else sources
    if not names:
        raise ValueError("At least one source must be specified")
    return [get_fetcher(name, base=base, quote=quote, timeout=timeout) for name in names]


async def compute_converted_price(
    fetchers: list[BaseFetcher],
    converter: RateConverter,
    aggregator: PriceAggregator | None = None,
) -> ConvertedPrice:
    """Compute the asset's reference price in the converter's target currency.

    :param fetchers: Price sources to query concurrently.
    :param converter: Exchange rate lookup for the final conversion.
    :param aggregator: Aggregator to use (default: mean over >= 1 source).
    :returns: ConvertedPrice with the final price and its inputs.
    :raises NoValidPricesError: If no source returned a price.
    :raises RateFetchError: If the exchange rate could not be fetched.
    :raises InvalidRateError: If the exchange rate is unusable.
    """
    aggregator = aggregator or PriceAggregator()

    outcomes = await FetchCoordinator(fetchers).fetch_all()
    quote = aggregator.aggregate(outcomes)
    logger.info(
        f"Mean {converter.quote.upper()} price: {quote.mean_price:.2f} "
        f"from {quote.success_count}/{quote.source_count} sources"
    )

    rate = await converter.fetch_rate()
    price = converter.scale(quote, rate)
    logger.info(
        f"Reference price: {price:.2f} {converter.target.upper()} "
        f"(ratio {rate.ratio:.6f})"
    )
    return ConvertedPrice(price=price, quote=quote, rate=rate)


def convert_amount(amount: float, reference_price: float) -> float:
    """Convert an amount of target currency into units of the asset.

    :param amount: Amount in the target currency (e.g., 100 AUD).
    :param reference_price: Asset price in the target currency.
    :returns: Asset units the amount buys.
    :raises ValueError: If amount or reference_price is not positive.
    """
    if not amount > 0:
        raise ValueError("Amount must be positive")
    if not reference_price > 0:
        raise ValueError("Reference price must be positive")
    return amount / reference_price
