"""
Reference Price Converter - Multi-Source Aggregation Module

This module computes one asset's reference price from several off-chain
sources and converts it into a target currency:
- fetchers: Per-provider price fetchers
- FetchCoordinator: Concurrent fetching with per-source failure isolation
- PriceAggregator: Unweighted mean over successful sources
- RateConverter: Exchange rate lookup and rescaling
- ReferencePrice: The fetch -> aggregate -> convert pipeline
"""

from .FetchCoordinator import FetchCoordinator
from .Pair import Pair
from .PriceAggregator import (
    AggregateQuote,
    AggregationError,
    NoValidPricesError,
    PriceAggregator,
    PriceOverflowError,
)
from .PriceOutcome import PriceOutcome
from .RateConverter import (
    ConversionError,
    ExchangeRate,
    InvalidRateError,
    RateConverter,
    RateFetchError,
)
from .ReferencePrice import (
    ConvertedPrice,
    build_default_fetchers,
    compute_converted_price,
    convert_amount,
)

__all__ = [
    "AggregateQuote",
    "AggregationError",
    "ConversionError",
    "ConvertedPrice",
    "ExchangeRate",
    "FetchCoordinator",
    "InvalidRateError",
    "NoValidPricesError",
    "Pair",
    "PriceAggregator",
    "PriceOutcome",
    "PriceOverflowError",
    "RateConverter",
    "RateFetchError",
    "build_default_fetchers",
    "compute_converted_price",
    "convert_amount",
]
