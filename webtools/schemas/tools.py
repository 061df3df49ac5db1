from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TEMPERATURE = 0.9
DEFAULT_TOP_P = 0.9
DEFAULT_MAX_TOKENS = 1000


class ToolCategory(str, Enum):
    AI = "AI"
    SEO = "SEO"
    DEV = "Dev"
    IMAGE = "Image"
    CONVERTER = "Converter"
    WRITING = "Writing"
    GENERAL = "General"


class ToolArchetype(str, Enum):
    TEXT = "text"
    FILE = "file"
    FORM = "form"


class Tool(BaseModel):
    """A catalog entry. ``slug`` is the routing key and equals ``id``."""

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    id: str = Field(..., min_length=1)
    title: str
    slug: str = Field(..., min_length=1)
    description: str
    category: ToolCategory
    archetype: ToolArchetype
    featured: bool = False
    tags: List[str] = Field(default_factory=list)


class AgentSettings(BaseModel):
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None

    def with_defaults(self) -> Dict[str, Any]:
        return {
            "temperature": DEFAULT_TEMPERATURE if self.temperature is None else self.temperature,
            "top_p": DEFAULT_TOP_P if self.top_p is None else self.top_p,
            "max_tokens": DEFAULT_MAX_TOKENS if self.max_tokens is None else self.max_tokens,
        }


class ToolProcessRequest(BaseModel):
    prompt: str
    settings: Optional[AgentSettings] = None
    user_context: Optional[Dict[str, Any]] = None


class AgentListResponse(BaseModel):
    agents: List[str] = Field(default_factory=list)
    tools: List[str] = Field(default_factory=list)
    all: List[str] = Field(default_factory=list)


class AgentCallResult(BaseModel):
    """Normalized result of one processing call."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    content: Optional[str] = None
    agent_id: Optional[str] = Field(default=None, alias="agentId")
    usage: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class FileCallResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    content: Optional[str] = None
    download_url: Optional[str] = Field(default=None, alias="downloadUrl")
    agent_id: Optional[str] = Field(default=None, alias="agentId")
    error: Optional[str] = None


class ToolInfoResponse(BaseModel):
    slug: str
    exists: bool
    available_agents: List[str]


class CatalogResponse(BaseModel):
    data: List[Tool]
    total: int
