"""Kraken fetcher.

Endpoint: https://api.kraken.com/0/public/Ticker?pair={BASE}{QUOTE}
Response: {"error": [], "result": {"XETHZUSD": {"c": ["3000.5", "0.25"], ...}}}
"""

from typing import Any

from .base import BaseFetcher, FetcherDecodeError, register_fetcher


@register_fetcher
class KrakenFetcher(BaseFetcher):
    """Fetcher for the Kraken public ticker.

    Kraken keys the result by its own pair name (e.g. "XETHZUSD"), which does
    not match the requested symbol, so the single entry is read whatever its key.
    No API key required.
    """

    name = "kraken"
    BASE_URL = "https://api.kraken.com/0/public"

    # Kraken uses non-standard ticker symbols
    SYMBOL_MAP = {
        "btc": "XBT",  # Kraken uses XBT instead of BTC
    }

    @classmethod
    def default_endpoint(cls, base: str, quote: str) -> str:
        kraken_base = cls.SYMBOL_MAP.get(base.lower(), base.upper())
        return f"{cls.BASE_URL}/Ticker?pair={kraken_base}{quote.upper()}"

    def parse_price(self, payload: Any) -> float:
        errors = payload.get("error")
        if errors:
            raise FetcherDecodeError(f"API error: {errors}")

        result = payload.get("result")
        if not result:
            raise FetcherDecodeError("No result in response")

        pair_data = next(iter(result.values()))

        # 'c' is the last trade closed array: [price, lot volume]
        return self.decimal_string(pair_data["c"][0], "last trade price")
