from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..schemas.tools import AgentListResponse
from ..utils.http import extract_http_error
from ..utils.http_client import HttpClient

logger = logging.getLogger("webtools.backend")


def backend_unreachable_message(base_url: str) -> str:
    return (
        f"Backend connection error: could not connect to the backend at {base_url}. "
        "Please ensure the backend server is running."
    )


class BackendError(Exception):
    """The backend answered, but not with something usable."""

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BackendUnavailableError(BackendError):
    """The backend could not be reached at all."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=500)


class BackendClient:
    """Outbound calls to the remote tool backend."""

    def __init__(
        self,
        base_url: str,
        api_prefix: str = "/api/v1",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_prefix = api_prefix.rstrip("/")
        self._client = HttpClient(base_url=self.base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "BackendClient":
        return cls(
            settings.backend_base,
            api_prefix=settings.api_prefix,
            timeout=settings.request_timeout,
            transport=transport,
        )

    @property
    def unreachable_message(self) -> str:
        return backend_unreachable_message(self.base_url)

    def list_path(self) -> str:
        return f"{self.api_prefix}/agents/list"

    def process_path(self, slug: str) -> str:
        return f"{self.api_prefix}/agents/process/{quote(slug, safe='')}"

    async def list_agents(self) -> httpx.Response:
        return await self._client.get(self.list_path(), headers={"Accept": "application/json"})

    async def process(self, slug: str, payload: Dict[str, Any]) -> httpx.Response:
        return await self._client.post(self.process_path(slug), json=payload)

    async def process_file(
        self,
        slug: str,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> httpx.Response:
        files = {"file": (filename, content, content_type or "application/octet-stream")}
        return await self._client.post(self.process_path(slug), files=files)

    async def fetch_agents(self) -> AgentListResponse:
        """Fetch and validate the agent list.

        Raises BackendUnavailableError when the backend cannot be reached and
        BackendError for non-2xx answers or bodies that are not an agent list.
        """
        try:
            response = await self.list_agents()
        except httpx.TransportError as exc:
            logger.warning("Agent list fetch failed, backend unreachable: %s", exc)
            raise BackendUnavailableError(self.unreachable_message) from exc
        except httpx.HTTPError as exc:
            logger.warning("Agent list fetch failed: %s", exc)
            raise BackendError("Invalid agent list received from backend") from exc

        if not response.is_success:
            message = extract_http_error(response, default_message=f"Failed to fetch agents: {response.status_code}")
            raise BackendError(message, status_code=response.status_code)

        try:
            return AgentListResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise BackendError("Invalid agent list received from backend") from exc

    async def close(self) -> None:
        await self._client.close()
