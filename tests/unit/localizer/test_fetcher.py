"""Tests for stylesheet retrieval."""

import httpx
import pytest

from fontlocal.localizer.fetcher import fetch_stylesheet, fetch_stylesheets
from fontlocal.localizer.models import FetchError
from tests.unit.localizer.fakes import INTER_CSS, INTER_CSS_URL, FakeFontHost


class TestFetchStylesheet:
    """Test fetch_stylesheet function."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_returns_body(self):
        """Test fetching returns the response text."""
        host = FakeFontHost({INTER_CSS_URL: INTER_CSS})
        async with host.client() as client:
            text = await fetch_stylesheet(client, INTER_CSS_URL)

        assert text == INTER_CSS
        assert host.calls == [INTER_CSS_URL]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sends_user_agent(self):
        """Test that a given user agent is sent with the request."""
        host = FakeFontHost({INTER_CSS_URL: INTER_CSS})
        async with host.client() as client:
            await fetch_stylesheet(client, INTER_CSS_URL, user_agent="Browser/1.0")

        assert host.headers[0]["user-agent"] == "Browser/1.0"

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [404, 500])
    async def test_error_status_raises(self, status):
        """Test that an unsuccessful response raises FetchError."""
        host = FakeFontHost({INTER_CSS_URL: status})
        async with host.client() as client:
            with pytest.raises(FetchError, match=f"HTTP {status}"):
                await fetch_stylesheet(client, INTER_CSS_URL)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        """Test that connection failures raise FetchError."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = httpx.MockTransport(refuse)
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(
                FetchError, match="Could not fetch the following stylesheet URL"
            ) as exc_info:
                await fetch_stylesheet(client, INTER_CSS_URL)

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


class TestFetchStylesheets:
    """Test fetch_stylesheets function."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_joins_in_given_order(self):
        """Test texts are joined in the order of the URLs."""
        host = FakeFontHost({"https://a/1.css": "a {}", "https://b/2.css": "b {}"})
        async with host.client() as client:
            text = await fetch_stylesheets(
                client, ["https://b/2.css", "https://a/1.css"]
            )

        assert text == "b {}\na {}"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_one_failure_fails_all(self):
        """Test that a single missing stylesheet raises FetchError."""
        host = FakeFontHost({"https://a/1.css": "a {}"})
        async with host.client() as client:
            with pytest.raises(FetchError, match="https://a/missing.css"):
                await fetch_stylesheets(
                    client, ["https://a/1.css", "https://a/missing.css"]
                )
