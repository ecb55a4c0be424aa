"""Bitfinex fetcher.

Endpoint: https://api-pub.bitfinex.com/v2/ticker/t{BASE}{QUOTE}
Response: flat array
    [BID, BID_SIZE, ASK, ASK_SIZE, DAILY_CHANGE, DAILY_CHANGE_RELATIVE,
     LAST_PRICE, VOLUME, HIGH, LOW]
"""

from typing import Any

from .base import BaseFetcher, FetcherDecodeError, register_fetcher


@register_fetcher
class BitfinexFetcher(BaseFetcher):
    """Fetcher for the Bitfinex v2 public ticker.

    No API key required.
    """

    name = "bitfinex"
    BASE_URL = "https://api-pub.bitfinex.com/v2"

    LAST_PRICE_INDEX = 6

    @classmethod
    def default_endpoint(cls, base: str, quote: str) -> str:
        return f"{cls.BASE_URL}/ticker/t{base.upper()}{quote.upper()}"

    def parse_price(self, payload: Any) -> float:
        if not isinstance(payload, list):
            raise FetcherDecodeError(f"Expected a list, got {type(payload).__name__}")
        if len(payload) <= self.LAST_PRICE_INDEX:
            raise FetcherDecodeError(
                f"Ticker has {len(payload)} fields, need at least {self.LAST_PRICE_INDEX + 1}"
            )

        price = payload[self.LAST_PRICE_INDEX]
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            raise FetcherDecodeError(f"Non-numeric last price: {price!r}")
        return float(price)
