"""Bitstamp fetcher.

Endpoint: https://www.bitstamp.net/api/v2/ticker/{base}{quote}/
Response: flat object of string-typed fields, e.g. {"last": "3000.5", "bid": "2999.9", ...}
"""

from typing import Any

from .base import BaseFetcher, FetcherDecodeError, register_fetcher


@register_fetcher
class BitstampFetcher(BaseFetcher):
    """Fetcher for the Bitstamp public ticker.

    Reads the "last" field. No API key required.
    """

    name = "bitstamp"
    BASE_URL = "https://www.bitstamp.net/api/v2"

    @classmethod
    def default_endpoint(cls, base: str, quote: str) -> str:
        return f"{cls.BASE_URL}/ticker/{base.lower()}{quote.lower()}/"

    def parse_price(self, payload: Any) -> float:
        if "last" not in payload:
            raise FetcherDecodeError("No 'last' price in response")
        return self.decimal_string(payload["last"], "last")
