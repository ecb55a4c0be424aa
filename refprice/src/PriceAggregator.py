"""PriceAggregator: Unweighted mean across all sources that returned a price.

Algorithm:
    1. Drop failed outcomes
    2. Fail if fewer than min_sources remain
    3. Return the arithmetic mean of the remaining prices

Every successful source carries the same weight and no outliers are removed.
The mean is computed with statistics.fmean, which is correctly rounded, so the
result does not depend on the order outcomes arrive in.

.. code-block:: python

    >>> aggregator = PriceAggregator()
    >>> quote = aggregator.aggregate([
    ...     PriceOutcome.ok("coinbase", 2990.0),
    ...     PriceOutcome.ok("kraken", 3010.0),
    ...     PriceOutcome.failed("bitstamp", FetcherHTTPError(503, "down")),
    ... ])
    >>> quote.mean_price
    3000.0
    >>> quote.failed
    {'bitstamp': 'HTTP 503: down'}
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from statistics import fmean

from .PriceOutcome import PriceOutcome


class AggregationError(Exception):
    """Base exception for aggregation failures."""

    pass


class PriceOverflowError(AggregationError):
    """Raised when the prices are too large to average as floats."""

    pass


class NoValidPricesError(AggregationError):
    """Raised when too few sources returned a price.

    :ivar available: Number of sources that returned a price.
    :ivar required: Number of sources needed.
    """

    def __init__(self, available: int, required: int = 1):
        self.available = available
        self.required = required
        if available == 0:
            message = "No valid prices found"
        else:
            message = f"Only {available} valid prices found, need {required}"
        super().__init__(message)


@dataclass(frozen=True)
class AggregateQuote:
    """Result of price aggregation.

    :ivar mean_price: Mean of all successful prices.
    :ivar success_count: Number of sources used.
    :ivar source_count: Number of sources queried.
    :ivar sources: Names of sources used in the mean.
    :ivar failed: Failed source names mapped to their error message.
    """

    mean_price: float
    success_count: int
    source_count: int
    sources: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not 1 <= self.success_count <= self.source_count:
            raise ValueError(
                f"Invalid counts: {self.success_count} of {self.source_count} sources"
            )
        if not self.mean_price > 0:
            raise ValueError(f"Invalid mean price: {self.mean_price}")


class PriceAggregator:
    """Reduces per-source outcomes to one reference price.

    :ivar min_sources: Minimum successful sources required.

    .. code-block:: python

        >>> agg = PriceAggregator(min_sources=2)
        >>> agg.aggregate([PriceOutcome.ok("a", 100.0)])
        Traceback (most recent call last):
        ...
        NoValidPricesError: Only 1 valid prices found, need 2
    """

    def __init__(self, min_sources: int = 1) -> None:
        """Initialize the aggregator.

        :param min_sources: Minimum number of successful sources (default: 1).
        :raises ValueError: If min_sources is less than 1.
        """
        if min_sources < 1:
            raise ValueError("min_sources must be at least 1")
        self.min_sources = min_sources

    def aggregate(self, outcomes: Iterable[PriceOutcome]) -> AggregateQuote:
        """Aggregate outcomes into a mean price.

        :param outcomes: One outcome per queried source, in any order.
        :returns: AggregateQuote with the mean and source bookkeeping.
        :raises NoValidPricesError: If fewer than min_sources succeeded.
        :raises PriceOverflowError: If the prices cannot be summed as floats.
        """
        outcomes = list(outcomes)
        valid = [o for o in outcomes if o.success]

        if len(valid) < self.min_sources:
            raise NoValidPricesError(len(valid), self.min_sources)

        try:
            mean_price = fmean(o.price for o in valid)
        except OverflowError as e:
            raise PriceOverflowError(
                f"Sum of {len(valid)} prices overflows: {[o.price for o in valid]}"
            ) from e

        return AggregateQuote(
            mean_price=mean_price,
            success_count=len(valid),
            source_count=len(outcomes),
            sources=[o.source for o in valid],
            failed={o.source: str(o.error) for o in outcomes if not o.success},
        )
