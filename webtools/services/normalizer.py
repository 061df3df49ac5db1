"""Outbound tool calls and response reconciliation.

A call is addressed either to the relay (``/api/tools/{slug}``, which answers
with ``{success, content, agentId, error}``) or straight to the backend
(``/api/v1/agents/process/{slug}``, which answers with
``{status, content, agent_id, usage}``). The caller picks the route by
injecting an execution context; both answers normalize to the same
``AgentCallResult``.

Every failure (unreachable backend, non-2xx status, unparsable body) is turned
into a result with ``success=False`` and an ``error`` message. Nothing is
raised to the caller for those.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Tuple, Union
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..schemas.tools import AgentCallResult, AgentSettings, FileCallResult
from ..utils.errors import describe_validation_error
from ..utils.http import extract_http_error
from ..utils.http_client import HttpClient
from .backend import backend_unreachable_message

logger = logging.getLogger("webtools.normalizer")

GENERIC_FAILURE_MESSAGE = "Tool processing failed"
GENERIC_FILE_FAILURE_MESSAGE = "File processing failed"
INVALID_RESPONSE_MESSAGE = "Invalid response from backend"

SettingsInput = Union[AgentSettings, Mapping[str, Any], None]


class ExecutionContext(ABC):
    """Where a tool call is sent. Subclasses only decide the endpoint path."""

    name = "base"

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client = HttpClient(base_url=self.base_url, timeout=timeout, transport=transport)

    @abstractmethod
    def process_path(self, slug: str) -> str:
        """Endpoint path for ``slug`` relative to ``base_url``."""

    async def close(self) -> None:
        await self.client.close()


class RelayContext(ExecutionContext):
    """Calls go through the same-origin relay."""

    name = "relay"

    def process_path(self, slug: str) -> str:
        return f"/api/tools/{quote(slug, safe='')}"

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "RelayContext":
        return cls(settings.relay_base, timeout=settings.request_timeout, transport=transport)


class DirectContext(ExecutionContext):
    """Calls go straight to the backend."""

    name = "direct"

    def __init__(
        self,
        base_url: str,
        api_prefix: str = "/api/v1",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, transport=transport)
        self.api_prefix = api_prefix.rstrip("/")

    def process_path(self, slug: str) -> str:
        return f"{self.api_prefix}/agents/process/{quote(slug, safe='')}"

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "DirectContext":
        return cls(
            settings.backend_base,
            api_prefix=settings.api_prefix,
            timeout=settings.request_timeout,
            transport=transport,
        )


def resolve_settings(settings: SettingsInput = None) -> Dict[str, Any]:
    """Apply the generation defaults field by field."""
    if settings is None:
        return AgentSettings().with_defaults()
    if not isinstance(settings, AgentSettings):
        settings = AgentSettings.model_validate(dict(settings))
    return settings.with_defaults()


def build_payload(
    prompt: str,
    settings: SettingsInput = None,
    user_context: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    return {
        "prompt": prompt,
        "settings": resolve_settings(settings),
        "user_context": dict(user_context or {}),
    }


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _is_success(data: Mapping[str, Any]) -> bool:
    return data.get("success") is True or data.get("status") == "success"


def normalize_agent_response(data: Mapping[str, Any]) -> AgentCallResult:
    """Reconcile a relay (``success``/``agentId``) or backend (``status``/``agent_id``) body."""
    success = _is_success(data)
    error = _text(data.get("error")) if "success" in data else None
    if not success and not error:
        error = GENERIC_FAILURE_MESSAGE
    usage = data.get("usage")
    return AgentCallResult(
        success=success,
        content=_text(data.get("content")),
        agent_id=_text(data.get("agentId") or data.get("agent_id")),
        usage=usage if isinstance(usage, dict) else None,
        error=None if success else error,
    )


def normalize_file_response(data: Mapping[str, Any]) -> FileCallResult:
    """Reconcile a file-processing body; a success may carry neither content nor download URL."""
    if "status" in data:
        success = _is_success(data)
    else:
        success = data.get("success") is not False
    content = data.get("content") or data.get("result") or data.get("response")
    error = _text(data.get("error")) or (None if success else GENERIC_FILE_FAILURE_MESSAGE)
    return FileCallResult(
        success=success,
        content=_text(content),
        download_url=_text(data.get("download_url") or data.get("downloadUrl")),
        agent_id=_text(data.get("agentId") or data.get("agent_id")),
        error=None if success else error,
    )


class ToolCaller:
    def __init__(self, context: ExecutionContext) -> None:
        self.context = context

    async def _post(self, slug: str, **kwargs: Any) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
        endpoint = self.context.process_path(slug)
        logger.info("Processing request for %s via %s endpoint %s", slug, self.context.name, endpoint)
        try:
            response = await self.context.client.post(endpoint, **kwargs)
        except httpx.TransportError as exc:
            logger.error("Backend unreachable for %s: %s", slug, exc)
            return None, backend_unreachable_message(self.context.base_url)
        except httpx.HTTPError as exc:
            # redirect loops, undecodable bodies
            logger.error("Request for %s failed: %s", slug, exc)
            return None, INVALID_RESPONSE_MESSAGE

        if not response.is_success:
            message = extract_http_error(response)
            logger.warning("Request for %s failed with status %s: %s", slug, response.status_code, message)
            return None, message

        try:
            data = response.json()
        except ValueError:
            logger.warning("Request for %s returned a non-JSON body", slug)
            return None, INVALID_RESPONSE_MESSAGE
        if not isinstance(data, dict):
            return None, INVALID_RESPONSE_MESSAGE
        return data, None

    async def call_tool(
        self,
        slug: str,
        prompt: str,
        settings: SettingsInput = None,
        user_context: Optional[Mapping[str, Any]] = None,
    ) -> AgentCallResult:
        try:
            payload = build_payload(prompt, settings, user_context)
        except ValidationError as exc:
            return AgentCallResult(success=False, error=f"Invalid settings: {describe_validation_error(exc)}")
        except TypeError:
            return AgentCallResult(success=False, error="Invalid settings: expected a mapping")
        data, error = await self._post(slug, json=payload)
        if data is None:
            return AgentCallResult(success=False, error=error)
        result = normalize_agent_response(data)
        logger.info("Response for %s received: %s", slug, "success" if result.success else "failed")
        return result

    async def call_file_tool(
        self,
        slug: str,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> FileCallResult:
        files = {"file": (filename, content, content_type or "application/octet-stream")}
        data, error = await self._post(slug, files=files)
        if data is None:
            return FileCallResult(success=False, error=error)
        return normalize_file_response(data)

    async def close(self) -> None:
        await self.context.close()
