"""
Tests for HttpClient.

One attempt per call, no raise on HTTP status, and shared pooling per base URL.
"""

import pytest
from unittest.mock import AsyncMock, Mock, patch
import httpx

from webtools.utils.http_client import HttpClient

from tests._helpers import BackendStub


class TestHttpClient:
    """Test suite for HttpClient request handling."""

    @pytest.fixture
    def http_client(self):
        """Create a HttpClient instance for testing."""
        return HttpClient(base_url="https://example.com", timeout=30.0)

    @pytest.mark.asyncio
    async def test_post_request_success(self, http_client):
        """POST forwards the JSON payload and hands back the response."""
        with patch.object(http_client, '_client', new_callable=AsyncMock) as mock_client:
            mock_response = Mock()
            mock_response.status_code = 201
            mock_response.json.return_value = {"id": "123", "status": "created"}
            mock_client.request.return_value = mock_response

            response = await http_client.post("/api", json={"name": "test"})

            assert response.json() == {"id": "123", "status": "created"}
            mock_client.request.assert_called_once()
            args, kwargs = mock_client.request.call_args
            assert args == ("POST", "/api")
            assert kwargs["json"] == {"name": "test"}
            assert kwargs["timeout"] == http_client.timeout

    @pytest.mark.asyncio
    async def test_network_error_is_not_retried(self, http_client):
        """A transport failure propagates after a single attempt."""
        with patch.object(http_client, '_client', new_callable=AsyncMock) as mock_client:
            mock_client.request.side_effect = httpx.ConnectError("Connection refused")

            with pytest.raises(httpx.ConnectError):
                await http_client.post("/api", json={"test": "data"})

            assert mock_client.request.call_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [404, 429, 500, 503])
    async def test_error_status_is_returned_not_raised(self, status_code):
        stub = BackendStub().add("GET", "/thing", json={"detail": "nope"}, status_code=status_code)
        http_client = HttpClient(base_url="http://backend.test", transport=stub.transport)

        response = await http_client.get("/thing")

        assert response.status_code == status_code
        assert len(stub.requests) == 1
        await http_client.close()

    @pytest.mark.asyncio
    async def test_explicit_timeout_wins(self, http_client):
        with patch.object(http_client, '_client', new_callable=AsyncMock) as mock_client:
            await http_client.get("/api", timeout=1.0)

            assert mock_client.request.call_args.kwargs["timeout"] == 1.0

    def test_float_timeout_is_wrapped(self):
        http_client = HttpClient(base_url="https://example.org", timeout=12.5)
        assert http_client.timeout == httpx.Timeout(12.5)


class TestClientSharing:
    @pytest.mark.asyncio
    async def test_clients_are_shared_per_base_url(self):
        first = HttpClient(base_url="http://shared.test")
        second = HttpClient(base_url="http://shared.test")
        other = HttpClient(base_url="http://other.test")

        assert first._client is second._client
        assert first._client is not other._client

        await HttpClient.close_all()
        assert first._client.is_closed
        assert other._client.is_closed

    @pytest.mark.asyncio
    async def test_closed_shared_client_is_rebuilt(self):
        first = HttpClient(base_url="http://rebuild.test")
        await first.close()

        second = HttpClient(base_url="http://rebuild.test")

        assert second._client is not first._client
        assert not second._client.is_closed
        await HttpClient.close_all()

    @pytest.mark.asyncio
    async def test_injected_transport_is_never_shared(self):
        stub = BackendStub()
        first = HttpClient(base_url="http://private.test", transport=stub.transport)
        second = HttpClient(base_url="http://private.test", transport=stub.transport)

        assert first._client is not second._client
        assert "http://private.test" not in HttpClient._shared_clients
        await first.close()
        await second.close()

    @pytest.mark.asyncio
    async def test_shared_client_stays_open_until_last_user_closes(self):
        first = HttpClient(base_url="http://refcount.test")
        second = HttpClient(base_url="http://refcount.test")

        await first.close()
        assert not second._client.is_closed
        assert HttpClient._shared_clients["http://refcount.test"] is second._client

        await second.close()
        assert second._client.is_closed
        assert "http://refcount.test" not in HttpClient._shared_clients

    @pytest.mark.asyncio
    async def test_double_close_does_not_release_other_users(self):
        first = HttpClient(base_url="http://double.test")
        second = HttpClient(base_url="http://double.test")

        await first.close()
        await first.close()

        assert not second._client.is_closed
        await HttpClient.close_all()
