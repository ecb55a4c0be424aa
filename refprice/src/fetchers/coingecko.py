"""CoinGecko fetcher.

Endpoint: https://api.coingecko.com/api/v3/simple/price?ids={id}&vs_currencies={quote}
Response: {"ethereum": {"usd": 3000.5}}
"""

from typing import Any

from .base import BaseFetcher, FetcherDecodeError, register_fetcher


# Map common symbols to CoinGecko IDs
COIN_IDS = {
    "btc": "bitcoin",
    "eth": "ethereum",
    "usdt": "tether",
    "usdc": "usd-coin",
    "sol": "solana",
    "avax": "avalanche-2",
    "dot": "polkadot",
    "atom": "cosmos",
    "link": "chainlink",
    "uni": "uniswap",
    "aave": "aave",
}


def coin_id_for(symbol: str) -> str:
    """Translate a ticker symbol into a CoinGecko coin ID.

    Unknown symbols are passed through unchanged, so callers may use
    CoinGecko IDs directly (e.g., "oasis-network").
    """
    return COIN_IDS.get(symbol.lower(), symbol.lower())


@register_fetcher
class CoinGeckoFetcher(BaseFetcher):
    """Fetcher for the CoinGecko simple price API.

    The payload maps coin ID to a mapping of currency code to price;
    the price is read at [coin_id][quote].
    """

    name = "coingecko"
    BASE_URL = "https://api.coingecko.com/api/v3"

    @classmethod
    def default_endpoint(cls, base: str, quote: str) -> str:
        return f"{cls.BASE_URL}/simple/price?ids={coin_id_for(base)}&vs_currencies={quote}"

    def parse_price(self, payload: Any) -> float:
        coin_id = coin_id_for(self.descriptor.base)
        quote = self.descriptor.quote

        if coin_id not in payload:
            raise FetcherDecodeError(f"Coin {coin_id} not in response")
        if quote not in payload[coin_id]:
            raise FetcherDecodeError(f"Quote {quote} not available for {coin_id}")

        price = payload[coin_id][quote]
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            raise FetcherDecodeError(f"Non-numeric price for {coin_id}: {price!r}")
        return float(price)
