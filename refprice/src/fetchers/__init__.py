"""
Price fetchers for multiple API sources.

Each fetcher knows one provider's endpoint and response shape and decodes it
into a single price. Failures are raised as FetcherError subclasses.

Usage:
    from refprice.src.fetchers import get_fetcher, get_available_fetchers

    # Get list of available fetchers
    available = get_available_fetchers()
    # ['bitfinex', 'bitstamp', 'coinbase', 'coingecko', 'kraken']

    # Create a fetcher instance for ETH/USD
    fetcher = get_fetcher("coinbase", base="eth", quote="usd")
    price = await fetcher.fetch_price()
"""

# Import base classes and utilities
from .base import (
    FETCHER_REGISTRY,
    BaseFetcher,
    FetcherDecodeError,
    FetcherError,
    FetcherHTTPError,
    FetcherInvalidPriceError,
    FetcherNetworkError,
    SourceDescriptor,
    get_available_fetchers,
    get_fetcher,
    register_fetcher,
)

# Import all fetcher implementations to trigger registration
from .bitfinex import BitfinexFetcher
from .bitstamp import BitstampFetcher
from .coinbase import CoinbaseFetcher
from .coingecko import CoinGeckoFetcher
from .kraken import KrakenFetcher

# Sources queried when none are configured
DEFAULT_SOURCES = ["coingecko", "coinbase", "bitstamp", "kraken", "bitfinex"]

__all__ = [
    # Base classes
    "BaseFetcher",
    "SourceDescriptor",
    "FetcherError",
    "FetcherNetworkError",
    "FetcherHTTPError",
    "FetcherDecodeError",
    "FetcherInvalidPriceError",
    # Registry functions
    "register_fetcher",
    "get_fetcher",
    "get_available_fetchers",
    "FETCHER_REGISTRY",
    "DEFAULT_SOURCES",
    # Fetcher implementations
    "BitfinexFetcher",
    "BitstampFetcher",
    "CoinbaseFetcher",
    "CoinGeckoFetcher",
    "KrakenFetcher",
]
