"""
Tests for the Trading 212 client with mocked HTTP responses.
"""

import base64
import logging
from pathlib import Path

import httpx
import pytest
import respx
from httpx import Response
from pydantic import SecretStr

from portfolio_engine.logging import get_logger
from portfolio_engine.upstream.errors import ConfigurationMissing, NetworkError, UpstreamError
from portfolio_engine.upstream.trading212 import Trading212Client
from tests.api_fixtures import TestSettings

BASE_URL = "https://live.trading212.com/api/v0"

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def t212_settings(tmp_path: Path) -> TestSettings:
    return TestSettings(static_dir=tmp_path)


@pytest.fixture
def t212_client(t212_settings: TestSettings) -> Trading212Client:
    """Create Trading 212 client for testing."""
    return Trading212Client(t212_settings, get_logger("test"))


def mock_instruments_response() -> list[dict]:
    return [
        {
            "ticker": "BARC_EQ",
            "name": "Barclays",
            "shortName": "BARC",
            "isin": "GB0031348658",
            "type": "STOCK",
            "currencyCode": "GBX",
            "maxOpenQuantity": 10000,
        },
        {"ticker": "AAPL_US_EQ", "currencyCode": "USD", "type": "STOCK"},
    ]


# =============================================================================
# Tests
# =============================================================================


class TestTrading212Auth:
    """Tests for credential handling."""

    def test_basic_auth_header(self, t212_client: Trading212Client) -> None:
        """Header is Basic base64(key:secret)."""
        expected = base64.b64encode(b"test-key:test-secret").decode()
        assert t212_client.auth_header() == f"Basic {expected}"

    @respx.mock
    @pytest.mark.asyncio
    async def test_auth_header_sent(self, t212_client: Trading212Client) -> None:
        route = respx.get(f"{BASE_URL}/equity/account/cash").mock(
            return_value=Response(200, json={"free": 10.5})
        )

        await t212_client.get_cash()

        sent = route.calls.last.request
        assert sent.headers["Authorization"] == t212_client.auth_header()

    @respx.mock(assert_all_called=False)
    @pytest.mark.asyncio
    async def test_missing_credentials_no_network_call(self, tmp_path: Path) -> None:
        """Missing key/secret fails before any request is made."""
        route = respx.get(f"{BASE_URL}/equity/portfolio").mock(
            return_value=Response(200, json=[])
        )
        settings = TestSettings(static_dir=tmp_path, t212_api_key=None, t212_api_secret=None)
        client = Trading212Client(settings, get_logger("test"))

        assert client.is_configured is False
        with pytest.raises(ConfigurationMissing, match="T212_API_KEY or T212_API_SECRET"):
            await client.get_portfolio()

        assert not route.called
        assert client.metrics["total_requests"] == 0

    @respx.mock(assert_all_called=False)
    @pytest.mark.asyncio
    async def test_blank_credentials_no_network_call(self, tmp_path: Path) -> None:
        """Blank key and secret are treated as missing."""
        route = respx.get(f"{BASE_URL}/equity/portfolio").mock(
            return_value=Response(200, json=[])
        )
        settings = TestSettings(
            static_dir=tmp_path, t212_api_key=SecretStr(""), t212_api_secret=SecretStr("")
        )
        client = Trading212Client(settings, get_logger("test"))

        assert client.is_configured is False
        with pytest.raises(ConfigurationMissing, match="T212_API_KEY or T212_API_SECRET"):
            await client.get_portfolio()

        assert route.call_count == 0

    def test_missing_secret_only(self, tmp_path: Path) -> None:
        settings = TestSettings(static_dir=tmp_path, t212_api_secret=None)
        client = Trading212Client(settings, get_logger("test"))

        with pytest.raises(ConfigurationMissing) as exc_info:
            client.auth_header()

        assert exc_info.value.missing == ["T212_API_SECRET"]
        assert exc_info.value.service == "Trading 212"


class TestTrading212Endpoints:
    """Tests for the data endpoints."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_get_portfolio(self, t212_client: Trading212Client) -> None:
        respx.get(f"{BASE_URL}/equity/portfolio").mock(
            return_value=Response(
                200,
                json=[
                    {
                        "ticker": "BARC_EQ",
                        "quantity": 10,
                        "currentPrice": 182.5,
                        "averagePrice": 170,
                        "frontend": "API",
                    }
                ],
            )
        )

        (position,) = await t212_client.get_portfolio()

        assert position.ticker == "BARC_EQ"
        assert position.current_price == 182.5
        assert position.average_price == 170
        assert position.model_extra == {"frontend": "API"}

    @respx.mock
    @pytest.mark.asyncio
    async def test_get_instruments(self, t212_client: Trading212Client) -> None:
        respx.get(f"{BASE_URL}/equity/metadata/instruments").mock(
            return_value=Response(200, json=mock_instruments_response())
        )

        instruments = await t212_client.get_instruments()

        assert [i.ticker for i in instruments] == ["BARC_EQ", "AAPL_US_EQ"]
        assert instruments[0].currency_code == "GBX"
        assert instruments[0].short_name == "BARC"
        assert instruments[0].base_ticker == "BARC"

    @respx.mock
    @pytest.mark.asyncio
    async def test_list_instruments_raw_untouched(self, t212_client: Trading212Client) -> None:
        respx.get(f"{BASE_URL}/equity/metadata/instruments").mock(
            return_value=Response(200, json=mock_instruments_response())
        )

        assert await t212_client.list_instruments_raw() == mock_instruments_response()

    @respx.mock
    @pytest.mark.asyncio
    async def test_get_cash(self, t212_client: Trading212Client) -> None:
        cash = {"free": 250.75, "total": 10250.75, "invested": 10000, "ppl": 312.4}
        respx.get(f"{BASE_URL}/equity/account/cash").mock(
            return_value=Response(200, json=cash)
        )

        assert await t212_client.get_cash() == cash


class TestTrading212Errors:
    """Tests for failure mapping."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_error_status_raises_upstream_error(
        self, t212_client: Trading212Client
    ) -> None:
        """Non-2xx keeps the status and raw body."""
        respx.get(f"{BASE_URL}/equity/portfolio").mock(
            return_value=Response(401, text="Bad API key")
        )

        with pytest.raises(UpstreamError) as exc_info:
            await t212_client.get_portfolio()

        assert exc_info.value.status_code == 401
        assert exc_info.value.body == "Bad API key"
        assert t212_client.metrics["failed_requests"] == 1

    @respx.mock
    @pytest.mark.asyncio
    async def test_error_body_redacted_in_log(
        self, t212_client: Trading212Client, caplog: pytest.LogCaptureFixture
    ) -> None:
        """The caller gets the body verbatim; the log line does not leak secrets."""
        body = '{"code": "BadRequest", "token": "leaked-token"}'
        respx.get(f"{BASE_URL}/equity/portfolio").mock(return_value=Response(400, text=body))

        with caplog.at_level(logging.ERROR, logger="test"):
            with pytest.raises(UpstreamError) as exc_info:
                await t212_client.get_portfolio()

        assert exc_info.value.body == body
        assert "BadRequest" in caplog.text
        assert "leaked-token" not in caplog.text

    @respx.mock
    @pytest.mark.asyncio
    async def test_no_retry_on_rate_limit(self, t212_client: Trading212Client) -> None:
        """A 429 is surfaced after a single attempt."""
        route = respx.get(f"{BASE_URL}/equity/metadata/instruments").mock(
            return_value=Response(429, text="Too Many Requests")
        )

        with pytest.raises(UpstreamError):
            await t212_client.get_instruments()

        assert route.call_count == 1

    @respx.mock
    @pytest.mark.asyncio
    async def test_transport_error_raises_network_error(
        self, t212_client: Trading212Client
    ) -> None:
        respx.get(f"{BASE_URL}/equity/portfolio").mock(
            side_effect=httpx.ConnectError("Connection refused")
        )

        with pytest.raises(NetworkError, match="Trading 212 unreachable"):
            await t212_client.get_portfolio()

        assert t212_client.metrics["total_requests"] == 1
        assert t212_client.metrics["failed_requests"] == 1


class TestTrading212Settings:
    def test_update_settings_changes_base_url(
        self, t212_client: Trading212Client, tmp_path: Path
    ) -> None:
        """Singleton clients pick up rebuilt settings."""
        new_settings = TestSettings(
            static_dir=tmp_path, t212_base_url="https://demo.trading212.com/api/v0/"
        )

        t212_client.update_settings(new_settings)

        assert t212_client.settings is new_settings
        assert t212_client._base_url == "https://demo.trading212.com/api/v0"

    @respx.mock
    @pytest.mark.asyncio
    async def test_update_settings_applies_new_timeout(
        self, t212_client: Trading212Client, tmp_path: Path
    ) -> None:
        """An open HTTP client is replaced when the timeout setting changes."""
        respx.get(f"{BASE_URL}/equity/account/cash").mock(
            return_value=Response(200, json={"free": 1.0})
        )

        await t212_client.get_cash()
        old_http = t212_client._client
        assert old_http is not None
        assert old_http.timeout == httpx.Timeout(None)

        t212_client.update_settings(TestSettings(static_dir=tmp_path, upstream_timeout_s=5.0))
        await t212_client.get_cash()

        assert old_http.is_closed
        assert t212_client._client is not old_http
        assert t212_client._client.timeout == httpx.Timeout(5.0)
        await t212_client.close()

    @respx.mock
    @pytest.mark.asyncio
    async def test_same_timeout_keeps_client(
        self, t212_client: Trading212Client, tmp_path: Path
    ) -> None:
        respx.get(f"{BASE_URL}/equity/account/cash").mock(
            return_value=Response(200, json={"free": 1.0})
        )

        await t212_client.get_cash()
        old_http = t212_client._client
        t212_client.update_settings(TestSettings(static_dir=tmp_path))
        await t212_client.get_cash()

        assert t212_client._client is old_http
        await t212_client.close()
