"""Base fetcher interface and shared HTTP client management.

All price fetchers inherit from BaseFetcher and implement parse_price().
A fetcher is built from a SourceDescriptor (name, endpoint, timeout), so two
fetchers of the same class can point at different endpoints.
A shared httpx.AsyncClient is used across all fetchers to avoid connection overhead.

.. code-block:: python

    @register_fetcher
    class MyFetcher(BaseFetcher):
        name = "myfetcher"

        @classmethod
        def default_endpoint(cls, base: str, quote: str) -> str:
            return f"https://api.example.com/{base}/{quote}"

        def parse_price(self, payload: Any) -> float:
            return float(payload["price"])
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

import httpx

logger = logging.getLogger(__name__)


class FetcherError(Exception):
    """Base exception for fetcher errors."""

    pass


class FetcherNetworkError(FetcherError):
    """Raised on connection failures and timeouts."""

    pass


class FetcherHTTPError(FetcherError):
    """Raised when the source answers with a non-2xx status.

    :ivar status_code: HTTP status code from the failed request.
    """

    def __init__(self, status_code: int, message: str):
        """Initialize the HTTP error.

        :param status_code: HTTP status code.
        :param message: Error message from response.
        """
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {message}")


class FetcherDecodeError(FetcherError):
    """Raised when the response body is malformed, truncated or has the wrong shape."""

    pass


class FetcherInvalidPriceError(FetcherError):
    """Raised when a decoded price is not a positive finite number.

    :ivar price: The rejected value.
    """

    def __init__(self, price: float):
        self.price = price
        super().__init__(f"Invalid price: {price}")


@dataclass(frozen=True)
class SourceDescriptor:
    """Static description of one price source.

    :ivar name: Source identifier (e.g., "coinbase").
    :ivar endpoint: Full request URL.
    :ivar timeout: Per-call timeout in seconds.
    :ivar base: Asset symbol the endpoint quotes (e.g., "eth").
    :ivar quote: Currency the price is expressed in (e.g., "usd").
    """

    name: str
    endpoint: str
    timeout: float = 10.0
    base: str = "eth"
    quote: str = "usd"

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Source name must not be empty")
        if not self.endpoint:
            raise ValueError(f"Source {self.name} has no endpoint")
        if self.timeout <= 0:
            raise ValueError(f"Source {self.name} timeout must be positive")
        object.__setattr__(self, "base", self.base.lower())
        object.__setattr__(self, "quote", self.quote.lower())


class BaseFetcher(ABC):
    """Abstract base class for price fetchers.

    Subclasses must implement:
        - name: Class variable identifying the source (e.g., "coinbase", "kraken")
        - default_endpoint(): URL for a base/quote pair
        - parse_price(): Decode the provider's JSON payload into a price

    Fetchers hold no state besides their descriptor and may be awaited
    concurrently.

    :cvar name: Unique identifier for this fetcher.
    :cvar DEFAULT_TIMEOUT: Default HTTP request timeout in seconds.
    :ivar descriptor: The source this fetcher talks to.
    """

    # Class-level shared HTTP client
    _shared_client: ClassVar[httpx.AsyncClient | None] = None

    # Fetcher identification
    name: ClassVar[str] = ""

    # Default timeout for HTTP requests (seconds)
    DEFAULT_TIMEOUT = 10.0

    def __init__(self, descriptor: SourceDescriptor):
        """Initialize the fetcher.

        :param descriptor: Source name, endpoint and timeout.
        """
        self.descriptor = descriptor

    @property
    def timeout(self) -> float:
        """Per-call timeout in seconds."""
        return self.descriptor.timeout

    def identify(self) -> str:
        """Return the source name this fetcher reports under."""
        return self.descriptor.name

    @staticmethod
    def decimal_string(value: Any, field: str) -> float:
        """Parse a price sent as a decimal string, e.g. "3000.5".

        :param value: Decoded JSON value.
        :param field: Field name used in the error message.
        :returns: Parsed value.
        :raises FetcherDecodeError: If the value is not a string.
        :raises ValueError: If the string is not a number.
        """
        if not isinstance(value, str):
            raise FetcherDecodeError(f"Expected {field} as a string, got {value!r}")
        return float(value)

    @classmethod
    @abstractmethod
    def default_endpoint(cls, base: str, quote: str) -> str:
        """Build the provider URL for a trading pair.

        :param base: Base currency symbol (e.g., "eth").
        :param quote: Quote currency symbol (e.g., "usd").
        :returns: Request URL.
        """
        pass

    @classmethod
    def from_defaults(
        cls,
        base: str = "eth",
        quote: str = "usd",
        timeout: float | None = None,
    ) -> BaseFetcher:
        """Create a fetcher pointed at the provider's public endpoint.

        :param base: Base currency symbol.
        :param quote: Quote currency symbol.
        :param timeout: Per-call timeout in seconds (default: 10).
        :returns: Fetcher instance.
        """
        descriptor = SourceDescriptor(
            name=cls.name,
            endpoint=cls.default_endpoint(base.lower(), quote.lower()),
            timeout=timeout or cls.DEFAULT_TIMEOUT,
            base=base,
            quote=quote,
        )
        return cls(descriptor)

    @classmethod
    def get_shared_client(cls) -> httpx.AsyncClient:
        """Get or create the shared HTTP client.

        The client is shared across all fetcher instances to reuse connections.

        :returns: Shared httpx.AsyncClient instance.
        """
        if (
            BaseFetcher._shared_client is None
            or BaseFetcher._shared_client.is_closed
        ):
            BaseFetcher._shared_client = httpx.AsyncClient(
                timeout=httpx.Timeout(30.0, connect=10.0),
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
                follow_redirects=True,
            )
        return BaseFetcher._shared_client

    @classmethod
    async def close_shared_client(cls) -> None:
        """Close the shared HTTP client."""
        client = BaseFetcher._shared_client
        if client is not None and not client.is_closed:
            await client.aclose()
        BaseFetcher._shared_client = None

    @abstractmethod
    def parse_price(self, payload: Any) -> float:
        """Extract the price from a decoded JSON payload.

        :param payload: Decoded JSON body.
        :returns: Price as float.
        :raises KeyError, IndexError, TypeError, ValueError: On unexpected shape;
            fetch_price() turns these into FetcherDecodeError.
        :raises FetcherDecodeError: On provider-reported errors.
        """
        pass

    async def fetch_price(self) -> float:
        """Fetch the current price from this source.

        :returns: Current price, always positive.
        :raises FetcherNetworkError: On transport errors or timeout.
        :raises FetcherHTTPError: On non-2xx response.
        :raises FetcherDecodeError: On malformed or short payload.
        :raises FetcherInvalidPriceError: If the decoded price is not positive.
        """
        response = await self._get(self.descriptor.endpoint)

        try:
            payload = response.json()
        except ValueError as e:
            raise FetcherDecodeError(f"Response is not valid JSON: {e}") from e

        try:
            price = float(self.parse_price(payload))
        except (KeyError, IndexError, TypeError, ValueError, AttributeError, OverflowError) as e:
            raise FetcherDecodeError(
                f"Unexpected response shape: {type(e).__name__}: {e}"
            ) from e

        if not math.isfinite(price) or price <= 0:
            raise FetcherInvalidPriceError(price)
        return price

    async def _get(
        self,
        url: str,
        *,
        params: dict | None = None,
        headers: dict | None = None,
    ) -> httpx.Response:
        """Make an HTTP GET request with this fetcher's timeout."""
        return await self.http_get(url, timeout=self.timeout, params=params, headers=headers)

    @classmethod
    async def http_get(
        cls,
        url: str,
        *,
        timeout: float,
        params: dict | None = None,
        headers: dict | None = None,
    ) -> httpx.Response:
        """Make an HTTP GET request using the shared client.

        :param url: Request URL.
        :param timeout: Request timeout in seconds.
        :param params: Optional query parameters.
        :param headers: Optional request headers.
        :returns: httpx.Response object.
        :raises FetcherHTTPError: On non-2xx response.
        :raises FetcherNetworkError: On network/timeout errors.
        """
        client = cls.get_shared_client()
        try:
            response = await client.get(
                url,
                params=params,
                headers=headers,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            raise FetcherNetworkError(f"Request timeout: {e}") from e
        except httpx.RequestError as e:
            raise FetcherNetworkError(f"Request failed: {e}") from e

        if not response.is_success:
            logger.debug(
                "HTTP GET %s failed with status %s: %s",
                url,
                response.status_code,
                response.text[:200],
            )
            raise FetcherHTTPError(response.status_code, response.text[:200])
        return response

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.descriptor.name!r}, {self.descriptor.endpoint!r})"


# Registry of available fetchers (populated by subclass imports)
FETCHER_REGISTRY: dict[str, type[BaseFetcher]] = {}


def register_fetcher(cls: type[BaseFetcher]) -> type[BaseFetcher]:
    """Decorator to register a fetcher class in the global registry.

    :param cls: Fetcher class to register.
    :returns: The registered class (unchanged).
    :raises ValueError: If fetcher has no name defined.

    .. code-block:: python

        @register_fetcher
        class CoinbaseFetcher(BaseFetcher):
            name = "coinbase"
            ...
    """
    if not cls.name:
        raise ValueError(f"Fetcher {cls.__name__} must define a 'name' class variable")
    FETCHER_REGISTRY[cls.name] = cls
    return cls


def get_fetcher(
    name: str,
    base: str = "eth",
    quote: str = "usd",
    timeout: float | None = None,
) -> BaseFetcher:
    """Get a fetcher instance by name, pointed at its default endpoint.

    :param name: Fetcher name (e.g., "coinbase", "kraken").
    :param base: Base currency symbol.
    :param quote: Quote currency symbol.
    :param timeout: Optional per-call timeout in seconds.
    :returns: Fetcher instance.
    :raises ValueError: If fetcher name is unknown.
    """
    if name not in FETCHER_REGISTRY:
        available = ", ".join(sorted(FETCHER_REGISTRY.keys()))
        raise ValueError(f"Unknown fetcher '{name}'. Available: {available}")
    return FETCHER_REGISTRY[name].from_defaults(base, quote, timeout)


def get_available_fetchers() -> list[str]:
    """Get list of available fetcher names.

    :returns: Sorted list of registered fetcher names.
    """
    return sorted(FETCHER_REGISTRY.keys())
