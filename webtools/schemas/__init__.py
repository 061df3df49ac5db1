"""Pydantic schema exports."""

from .tools import (
    AgentCallResult,
    AgentListResponse,
    AgentSettings,
    CatalogResponse,
    FileCallResult,
    Tool,
    ToolArchetype,
    ToolCategory,
    ToolInfoResponse,
    ToolProcessRequest,
)

__all__ = [
    "AgentCallResult",
    "AgentListResponse",
    "AgentSettings",
    "CatalogResponse",
    "FileCallResult",
    "Tool",
    "ToolArchetype",
    "ToolCategory",
    "ToolInfoResponse",
    "ToolProcessRequest",
]
