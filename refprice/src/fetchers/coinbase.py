"""Coinbase fetcher.

Endpoint: https://api.coinbase.com/v2/prices/{BASE}-{QUOTE}/spot
Response: {"data": {"amount": "3000.5", "base": "ETH", "currency": "USD"}}
"""

from typing import Any

from .base import BaseFetcher, register_fetcher


@register_fetcher
class CoinbaseFetcher(BaseFetcher):
    """Fetcher for the Coinbase spot price API.

    The amount is a decimal string nested under "data".
    No API key required.
    """

    name = "coinbase"
    BASE_URL = "https://api.coinbase.com/v2"

    @classmethod
    def default_endpoint(cls, base: str, quote: str) -> str:
        return f"{cls.BASE_URL}/prices/{base.upper()}-{quote.upper()}/spot"

    def parse_price(self, payload: Any) -> float:
        return self.decimal_string(payload["data"]["amount"], "amount")
