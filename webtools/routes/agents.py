from __future__ import annotations

import logging
from typing import Any, Dict

import httpx
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..dependencies import get_backend
from ..services.backend import BackendClient

router = APIRouter(prefix="/agents", tags=["agents"])

logger = logging.getLogger("webtools.relay.agents")


def _empty_agent_list(error: str) -> Dict[str, Any]:
    return {"error": error, "agents": [], "tools": [], "all": []}


@router.get("/list")
async def list_agents(backend: BackendClient = Depends(get_backend)):
    """Pass the backend agent list through unchanged."""
    logger.info("Fetching agents list from backend")
    try:
        response = await backend.list_agents()
    except httpx.TransportError as exc:
        logger.error("Error fetching agents list: %s", exc)
        return JSONResponse(
            content=_empty_agent_list(backend.unreachable_message),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    except httpx.HTTPError as exc:
        logger.error("Unusable agents list response: %s", exc)
        return JSONResponse(
            content=_empty_agent_list("Invalid agent list received from backend"),
            status_code=status.HTTP_502_BAD_GATEWAY,
        )

    if not response.is_success:
        logger.error("Backend returned error: %s", response.status_code)
        return JSONResponse(
            content=_empty_agent_list(f"Failed to fetch agents: {response.status_code}"),
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except ValueError:
        logger.error("Backend returned a non-JSON agent list")
        return JSONResponse(
            content=_empty_agent_list("Invalid agent list received from backend"),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    all_ids = data.get("all") if isinstance(data, dict) else None
    logger.info("Fetched %d agents", len(all_ids) if isinstance(all_ids, list) else 0)
    return JSONResponse(content=data, status_code=status.HTTP_200_OK)
