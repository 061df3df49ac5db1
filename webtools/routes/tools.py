"""Relay between the UI and the backend processing endpoint.

JSON bodies (``{prompt, settings, user_context}``) are forwarded with default
generation settings filled in; ``multipart/form-data`` bodies are forwarded as
a single ``file`` field. Backend answers (``status``/``agent_id``) are
translated into the relay shape (``success``/``agentId``).
"""

from __future__ import annotations

import logging
from typing import Any, Dict

import httpx
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.datastructures import UploadFile

from ..dependencies import get_backend
from ..schemas.tools import ToolInfoResponse, ToolProcessRequest
from ..services.backend import BackendClient
from ..services.normalizer import build_payload, normalize_agent_response, normalize_file_response
from ..utils.errors import describe_validation_error
from ..utils.http import error_message_from_body

router = APIRouter(prefix="/tools", tags=["tools"])

logger = logging.getLogger("webtools.relay.tools")


def _failure(error: str, status_code: int, **extra: Any) -> JSONResponse:
    return JSONResponse(content={"success": False, "error": error, **extra}, status_code=status_code)


def _connection_failure(backend: BackendClient, exc: Exception) -> JSONResponse:
    logger.error("Error connecting to backend: %s", exc)
    return _failure(
        backend.unreachable_message,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        details=str(exc) or exc.__class__.__name__,
    )


def _bad_upstream(exc: Exception) -> JSONResponse:
    logger.error("Unusable backend response: %s", exc)
    return _failure("Invalid response from backend", status.HTTP_502_BAD_GATEWAY)


def _decode(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _upstream_failure(response: httpx.Response, data: Any) -> JSONResponse:
    message = error_message_from_body(data) or f"Backend error: {response.status_code}"
    logger.warning("Backend responded with status %s: %s", response.status_code, message)
    return _failure(message, response.status_code)


async def _relay_json(slug: str, request: Request, backend: BackendClient) -> JSONResponse:
    try:
        body = await request.json()
    except ValueError:
        return _failure("Request body must be valid JSON", status.HTTP_422_UNPROCESSABLE_ENTITY)

    try:
        payload = ToolProcessRequest.model_validate(body)
    except ValidationError as exc:
        logger.info("Rejected request for %s: %s", slug, exc.errors())
        return _failure(f"Invalid request: {describe_validation_error(exc)}", status.HTTP_422_UNPROCESSABLE_ENTITY)

    backend_payload = build_payload(payload.prompt, payload.settings, payload.user_context)
    logger.info("Forwarding request to agent: %s", slug)
    logger.debug("Payload: %s", backend_payload)

    try:
        response = await backend.process(slug, backend_payload)
    except httpx.TransportError as exc:
        return _connection_failure(backend, exc)
    except httpx.HTTPError as exc:
        return _bad_upstream(exc)

    data = _decode(response)
    logger.info("Backend response status: %s", response.status_code)
    if not response.is_success:
        return _upstream_failure(response, data)
    if not isinstance(data, dict):
        return _failure("Invalid response from backend", status.HTTP_502_BAD_GATEWAY)

    result = normalize_agent_response(data)
    content: Dict[str, Any] = {
        "success": result.success,
        "content": result.content,
        "agentId": result.agent_id,
        "usage": result.usage,
    }
    if result.error:
        content["error"] = result.error
    return JSONResponse(content=content, status_code=status.HTTP_200_OK)


async def _relay_file(slug: str, request: Request, backend: BackendClient) -> JSONResponse:
    form = await request.form()
    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        return _failure("A file field is required", status.HTTP_422_UNPROCESSABLE_ENTITY)

    logger.info("Handling file upload for agent: %s", slug)
    file_bytes = await upload.read()

    try:
        response = await backend.process_file(slug, upload.filename or "upload", file_bytes, upload.content_type)
    except httpx.TransportError as exc:
        return _connection_failure(backend, exc)
    except httpx.HTTPError as exc:
        return _bad_upstream(exc)

    data = _decode(response)
    logger.info("File upload response status: %s", response.status_code)
    if not response.is_success:
        return _upstream_failure(response, data)
    if not isinstance(data, dict):
        return _failure("Invalid response from backend", status.HTTP_502_BAD_GATEWAY)

    result = normalize_file_response(data)
    content: Dict[str, Any] = {
        "success": result.success,
        "content": result.content,
        "result": data.get("result"),
        "downloadUrl": result.download_url,
        "agentId": result.agent_id,
    }
    if result.error:
        content["error"] = result.error
    return JSONResponse(content=content, status_code=status.HTTP_200_OK)


@router.post("/{slug}")
async def process_tool(slug: str, request: Request, backend: BackendClient = Depends(get_backend)):
    content_type = request.headers.get("content-type", "")
    if "multipart/form-data" in content_type:
        return await _relay_file(slug, request, backend)
    return await _relay_json(slug, request, backend)


@router.get("/{slug}")
async def tool_info(slug: str, backend: BackendClient = Depends(get_backend)):
    """Report whether the backend knows ``slug``."""
    try:
        response = await backend.list_agents()
    except httpx.TransportError as exc:
        logger.error("Error fetching agents: %s", exc)
        return JSONResponse(
            content={"error": "Failed to connect to backend"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    except httpx.HTTPError as exc:
        logger.error("Error fetching agents: %s", exc)
        return JSONResponse(
            content={"error": "Failed to fetch agents list"},
            status_code=status.HTTP_502_BAD_GATEWAY,
        )

    if not response.is_success:
        return JSONResponse(content={"error": "Failed to fetch agents list"}, status_code=response.status_code)

    data = _decode(response)
    if not isinstance(data, dict):
        return JSONResponse(
            content={"error": "Failed to fetch agents list"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    def _ids(key: str) -> list:
        value = data.get(key)
        return value if isinstance(value, list) else []

    exists = slug in _ids("all") or slug in _ids("agents") or slug in _ids("tools")
    return ToolInfoResponse(slug=slug, exists=exists, available_agents=_ids("all"))
