"""Unit tests for RateConverter."""

import httpx
import pytest

from refprice.src.fetchers import FetcherHTTPError
from refprice.src.PriceAggregator import AggregateQuote
from refprice.src.RateConverter import (
    ConversionError,
    ExchangeRate,
    InvalidRateError,
    RateConverter,
    RateFetchError,
)


def make_quote(mean_price: float) -> AggregateQuote:
    return AggregateQuote(mean_price=mean_price, success_count=1, source_count=1)


class TestRateConverterInit:
    """Test RateConverter configuration."""

    def test_default_endpoint(self) -> None:
        """The default lookup prices ETH in USD and AUD in one call."""
        converter = RateConverter()
        assert converter.endpoint == (
            "https://api.coingecko.com/api/v3/simple/price?ids=ethereum&vs_currencies=usd,aud"
        )
        assert converter.timeout == 10.0

    def test_symbols_normalized(self) -> None:
        """Currencies should be lowercased and symbols mapped to CoinGecko IDs."""
        converter = RateConverter(base="BTC", quote="USD", target="EUR")
        assert converter.coin_id == "bitcoin"
        assert converter.endpoint.endswith("ids=bitcoin&vs_currencies=usd,eur")

    def test_custom_endpoint(self) -> None:
        """An explicit endpoint should be used as is."""
        converter = RateConverter(endpoint="https://rates.test/eth", timeout=3.0)
        assert converter.endpoint == "https://rates.test/eth"
        assert converter.timeout == 3.0

    def test_same_currency(self) -> None:
        """Converting a currency into itself is rejected."""
        with pytest.raises(ValueError, match="both usd"):
            RateConverter(quote="usd", target="USD")


class TestExchangeRate:
    """Test ExchangeRate arithmetic."""

    def test_ratio(self) -> None:
        rate = ExchangeRate("usd", "aud", quote_rate=3000.0, target_rate=4500.0)
        assert rate.ratio == 1.5

    def test_scale(self) -> None:
        """scale() multiplies the mean by the ratio."""
        rate = ExchangeRate("usd", "aud", quote_rate=3000.0, target_rate=4500.0)
        assert RateConverter.scale(make_quote(3000.0), rate) == 4500.0


class TestFetchRate:
    """Test exchange rate lookups."""

    @pytest.mark.asyncio
    async def test_fetch_and_convert(self, mock_http, respond_json) -> None:
        """quote 3000 / target 4500 gives ratio 1.5 and scales 3000 to 4500."""
        requests = mock_http(respond_json({"ethereum": {"usd": 3000, "aud": 4500}}))
        converter = RateConverter()

        rate = await converter.fetch_rate()
        assert rate.quote_currency == "usd"
        assert rate.target_currency == "aud"
        assert rate.ratio == 1.5

        assert await converter.convert(make_quote(3000.0)) == 4500.0
        assert len(requests) == 2
        assert requests[0].url == httpx.URL(converter.endpoint)

    @pytest.mark.asyncio
    async def test_not_cached(self, mock_http) -> None:
        """Every call should hit the endpoint again."""
        rates = iter([{"ethereum": {"usd": 2000, "aud": 3000}}, {"ethereum": {"usd": 2000, "aud": 4000}}])
        mock_http(lambda request: httpx.Response(200, json=next(rates)))
        converter = RateConverter()

        assert (await converter.fetch_rate()).ratio == 1.5
        assert (await converter.fetch_rate()).ratio == 2.0

    @pytest.mark.asyncio
    async def test_zero_target_rate(self, mock_http, respond_json) -> None:
        """A zero target rate is invalid."""
        mock_http(respond_json({"ethereum": {"usd": 3000, "aud": 0}}))
        with pytest.raises(InvalidRateError, match="aud"):
            await RateConverter().fetch_rate()

    @pytest.mark.asyncio
    async def test_zero_quote_rate(self, mock_http, respond_json) -> None:
        """A zero quote rate is invalid, never a division by zero."""
        mock_http(respond_json({"ethereum": {"usd": 0, "aud": 4500}}))
        with pytest.raises(InvalidRateError, match="usd"):
            await RateConverter().fetch_rate()

    @pytest.mark.asyncio
    async def test_missing_rate(self, mock_http, respond_json) -> None:
        """A missing currency is invalid."""
        mock_http(respond_json({"ethereum": {"usd": 3000}}))
        with pytest.raises(InvalidRateError, match="Missing aud"):
            await RateConverter().fetch_rate()

    @pytest.mark.asyncio
    async def test_negative_rate(self, mock_http, respond_json) -> None:
        mock_http(respond_json({"ethereum": {"usd": 3000, "aud": -1}}))
        with pytest.raises(InvalidRateError):
            await RateConverter().fetch_rate()

    @pytest.mark.asyncio
    async def test_oversized_rate(self, mock_http, respond_json) -> None:
        """An integer too large for a float is an invalid rate, not a crash."""
        mock_http(respond_json({"ethereum": {"usd": 3000, "aud": 10**400}}))
        with pytest.raises(InvalidRateError, match="aud"):
            await RateConverter().fetch_rate()

    @pytest.mark.asyncio
    async def test_missing_coin(self, mock_http, respond_json) -> None:
        """A response without the coin cannot be decoded."""
        mock_http(respond_json({"bitcoin": {"usd": 1, "aud": 2}}))
        with pytest.raises(RateFetchError, match="No rates for ethereum"):
            await RateConverter().fetch_rate()

    @pytest.mark.asyncio
    async def test_wrong_shape(self, mock_http, respond_json) -> None:
        mock_http(respond_json([1, 2, 3]))
        with pytest.raises(RateFetchError):
            await RateConverter().fetch_rate()

    @pytest.mark.asyncio
    async def test_malformed_json(self, mock_http) -> None:
        mock_http(lambda request: httpx.Response(200, text="not json"))
        with pytest.raises(RateFetchError, match="decode"):
            await RateConverter().fetch_rate()

    @pytest.mark.asyncio
    async def test_http_error(self, mock_http, respond_json) -> None:
        mock_http(respond_json({"status": {"error_code": 429}}, status_code=429))
        with pytest.raises(RateFetchError, match="HTTP 429") as exc_info:
            await RateConverter().fetch_rate()
        # Same request path as the price fetchers
        assert isinstance(exc_info.value.__cause__, FetcherHTTPError)
        assert exc_info.value.__cause__.status_code == 429

    @pytest.mark.asyncio
    async def test_network_error(self, mock_http) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        mock_http(refuse)
        with pytest.raises(RateFetchError, match="Request failed"):
            await RateConverter().fetch_rate()

    @pytest.mark.asyncio
    async def test_timeout(self, mock_http) -> None:
        def stall(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        mock_http(stall)
        with pytest.raises(RateFetchError, match="timeout"):
            await RateConverter().fetch_rate()

    @pytest.mark.asyncio
    async def test_errors_share_base_class(self, mock_http, respond_json) -> None:
        """Callers can catch every conversion failure at once."""
        mock_http(respond_json({"ethereum": {"usd": 3000, "aud": 0}}))
        with pytest.raises(ConversionError):
            await RateConverter().convert(make_quote(3000.0))
