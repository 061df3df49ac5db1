from __future__ import annotations
import logging
from threading import Lock
from typing import Dict, Optional

import httpx

logger = logging.getLogger("webtools.http")

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=5.0)


class HttpClient:
    """
    Thin wrapper around a pooled httpx.AsyncClient.

    One request per call: no retries, no backoff, and no raise on HTTP status,
    callers inspect ``response.status_code`` themselves. Clients are shared per
    base URL unless a custom transport is injected; a shared client is closed
    when its last user closes it, or by ``close_all``.
    """

    _shared_clients: Dict[str, httpx.AsyncClient] = {}
    _users: Dict[str, int] = {}
    _lock = Lock()

    def __init__(
        self,
        timeout: httpx.Timeout | float = DEFAULT_TIMEOUT,
        follow_redirects: bool = True,
        base_url: Optional[str] = None,
        headers: Optional[dict] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not isinstance(timeout, httpx.Timeout):
            timeout = httpx.Timeout(timeout)
        self.timeout = timeout
        self.follow_redirects = follow_redirects
        self.base_url = base_url or ""
        self._shared = transport is None
        self._key = f"{base_url}"
        self._closed = False

        if not self._shared:
            self._client = self._build(headers, transport)
            return

        with HttpClient._lock:
            existing = HttpClient._shared_clients.get(self._key)
            if existing is None or existing.is_closed:
                self._client = self._build(headers, None)
                HttpClient._shared_clients[self._key] = self._client
                HttpClient._users[self._key] = 0
            else:
                self._client = existing
            HttpClient._users[self._key] += 1

    def _build(self, headers: Optional[dict], transport: Optional[httpx.AsyncBaseTransport]) -> httpx.AsyncClient:
        kwargs = dict(
            timeout=self.timeout,
            follow_redirects=self.follow_redirects,
            base_url=self.base_url,
            headers=headers or {},
        )
        if transport is not None:
            return httpx.AsyncClient(transport=transport, **kwargs)
        return httpx.AsyncClient(http2=True, **kwargs)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if not self._shared:
            await self._client.aclose()
            return

        with HttpClient._lock:
            if HttpClient._shared_clients.get(self._key) is not self._client:
                # already released by close_all or replaced after a close
                return
            HttpClient._users[self._key] -= 1
            if HttpClient._users[self._key] > 0:
                return
            HttpClient._shared_clients.pop(self._key, None)
            HttpClient._users.pop(self._key, None)
        await self._client.aclose()

    @classmethod
    async def close_all(cls) -> None:
        with cls._lock:
            clients = list(cls._shared_clients.values())
            cls._shared_clients.clear()
            cls._users.clear()
        for shared in clients:
            await shared.aclose()

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        if "timeout" not in kwargs:
            kwargs["timeout"] = self.timeout
        logger.debug("%s %s%s", method.upper(), self.base_url, url)
        return await self._client.request(method, url, **kwargs)

    async def get(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("POST", url, **kwargs)


__all__ = ["HttpClient", "DEFAULT_TIMEOUT"]
