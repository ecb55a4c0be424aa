"""RateConverter: Rescale an aggregated quote into another currency.

The exchange rate is derived from one reference lookup that prices the same
asset in both currencies:

    ratio = price(asset, target) / price(asset, quote)

With the default CoinGecko endpoint this is a single call to
/simple/price?ids=ethereum&vs_currencies=usd,aud. The rate is fetched fresh
on every call and never cached.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .fetchers import BaseFetcher, FetcherError
from .fetchers.coingecko import coin_id_for

if TYPE_CHECKING:
    from .PriceAggregator import AggregateQuote

logger = logging.getLogger(__name__)


class ConversionError(Exception):
    """Base exception for exchange rate errors."""

    pass


class RateFetchError(ConversionError):
    """Raised when the exchange rate could not be fetched or decoded."""

    pass


class InvalidRateError(ConversionError):
    """Raised when a rate is missing, zero or negative."""

    pass


@dataclass(frozen=True)
class ExchangeRate:
    """Reference prices of one asset in two currencies.

    :ivar quote_currency: Currency the aggregated price is in (e.g., "usd").
    :ivar target_currency: Currency to convert into (e.g., "aud").
    :ivar quote_rate: Asset price in the quote currency.
    :ivar target_rate: Asset price in the target currency.
    """

    quote_currency: str
    target_currency: str
    quote_rate: float
    target_rate: float

    @property
    def ratio(self) -> float:
        """Units of target currency per unit of quote currency."""
        return self.target_rate / self.quote_rate


class RateConverter:
    """Converts an AggregateQuote from its quote currency into a target currency.

    :ivar base: Asset used as the common reference (e.g., "eth").
    :ivar quote: Currency of the incoming quote (e.g., "usd").
    :ivar target: Currency to convert into (e.g., "aud").
    :ivar endpoint: Exchange rate URL.
    :ivar timeout: Request timeout in seconds.

    .. code-block:: python

        >>> converter = RateConverter(base="eth", quote="usd", target="aud")
        >>> await converter.convert(quote)
        4500.0
    """

    BASE_URL = "https://api.coingecko.com/api/v3"
    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        base: str = "eth",
        quote: str = "usd",
        target: str = "aud",
        endpoint: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the converter.

        :param base: Asset symbol or CoinGecko ID shared by both rates.
        :param quote: Currency the aggregated price is expressed in.
        :param target: Currency to convert into.
        :param endpoint: Override for the exchange rate URL.
        :param timeout: Request timeout in seconds (default: 10).
        :raises ValueError: If quote and target are the same currency.
        """
        self.base = base.lower()
        self.quote = quote.lower()
        self.target = target.lower()
        if self.quote == self.target:
            raise ValueError(f"Quote and target currency are both {self.quote}")

        self.coin_id = coin_id_for(self.base)
        self.endpoint = endpoint or (
            f"{self.BASE_URL}/simple/price"
            f"?ids={self.coin_id}&vs_currencies={self.quote},{self.target}"
        )
        self.timeout = timeout or self.DEFAULT_TIMEOUT

    async def fetch_rate(self) -> ExchangeRate:
        """Fetch the current exchange rate.

        :returns: ExchangeRate between quote and target currency.
        :raises RateFetchError: On network errors, non-2xx status or malformed JSON.
        :raises InvalidRateError: If either rate is missing, zero, negative or too large.
        """
        try:
            response = await BaseFetcher.http_get(self.endpoint, timeout=self.timeout)
        except FetcherError as e:
            raise RateFetchError(str(e)) from e

        try:
            data = response.json()
        except ValueError as e:
            raise RateFetchError(f"Failed to decode exchange rates: {e}") from e

        rates = data.get(self.coin_id) if isinstance(data, dict) else None
        if not isinstance(rates, dict):
            raise RateFetchError(f"No rates for {self.coin_id} in response")

        rate = ExchangeRate(
            quote_currency=self.quote,
            target_currency=self.target,
            quote_rate=self._read_rate(rates, self.quote),
            target_rate=self._read_rate(rates, self.target),
        )
        logger.debug(
            f"{self.coin_id}: {rate.quote_rate} {self.quote}, "
            f"{rate.target_rate} {self.target} (ratio {rate.ratio:.6f})"
        )
        return rate

    @staticmethod
    def _read_rate(rates: dict[str, Any], currency: str) -> float:
        value = rates.get(currency)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidRateError(f"Missing {currency} rate: {value!r}")
        try:
            rate = float(value)
        except OverflowError as e:
            raise InvalidRateError(f"Invalid {currency} rate: too large") from e
        if not math.isfinite(rate) or rate <= 0:
            raise InvalidRateError(f"Invalid {currency} rate: {value}")
        return rate

    @staticmethod
    def scale(quote: AggregateQuote, rate: ExchangeRate) -> float:
        """Rescale a quote by an exchange rate.

        :param quote: Aggregated quote in the rate's quote currency.
        :param rate: Exchange rate to apply.
        :returns: Price in the rate's target currency.
        """
        return quote.mean_price * rate.ratio

    async def convert(self, quote: AggregateQuote) -> float:
        """Fetch the current rate and convert a quote with it.

        :param quote: Aggregated quote in the quote currency.
        :returns: Price in the target currency.
        :raises RateFetchError: If the rate could not be fetched.
        :raises InvalidRateError: If the rate is unusable.
        """
        rate = await self.fetch_rate()
        return self.scale(quote, rate)
