from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from ..config import CATALOG_MODES, Settings
from ..schemas.tools import Tool, ToolArchetype, ToolCategory
from .backend import BackendClient, BackendError
from .classifier import classify, format_title, split_tags

logger = logging.getLogger("webtools.catalog")


STATIC_TOOLS: tuple[Tool, ...] = (
    Tool(
        id="ai-story-generator",
        title="AI Story Generator",
        slug="ai-story-generator",
        description="Generate creative stories using AI with customizable themes and styles",
        category=ToolCategory.AI,
        archetype=ToolArchetype.TEXT,
        featured=True,
        tags=["ai", "creative", "writing"],
    ),
    Tool(
        id="ai-content-improver",
        title="AI Content Improver",
        slug="ai-content-improver",
        description="Enhance your content with AI-powered suggestions and improvements",
        category=ToolCategory.AI,
        archetype=ToolArchetype.TEXT,
        featured=True,
        tags=["ai", "content", "optimization"],
    ),
    Tool(
        id="plagiarism-checker",
        title="Plagiarism Checker",
        slug="plagiarism-checker",
        description="Check your content for plagiarism and get originality scores",
        category=ToolCategory.AI,
        archetype=ToolArchetype.TEXT,
        tags=["ai", "plagiarism", "analysis"],
    ),
    Tool(
        id="meta-tag-generator",
        title="Meta Tag Generator",
        slug="meta-tag-generator",
        description="Generate SEO-optimized meta tags for your website",
        category=ToolCategory.SEO,
        archetype=ToolArchetype.FORM,
        featured=True,
        tags=["seo", "meta", "optimization"],
    ),
    Tool(
        id="domain-checker",
        title="Domain Availability Checker",
        slug="domain-checker",
        description="Check domain availability across multiple TLDs instantly",
        category=ToolCategory.SEO,
        archetype=ToolArchetype.FORM,
        tags=["seo", "domain", "availability"],
    ),
    Tool(
        id="code-beautifier",
        title="Code Beautifier",
        slug="code-beautifier",
        description="Format and beautify your code with syntax highlighting",
        category=ToolCategory.DEV,
        archetype=ToolArchetype.TEXT,
        featured=True,
        tags=["dev", "code", "formatting"],
    ),
    Tool(
        id="hex-to-rgb",
        title="Hex to RGB Converter",
        slug="hex-to-rgb",
        description="Convert colors between Hex, RGB, and HSL formats",
        category=ToolCategory.DEV,
        archetype=ToolArchetype.FORM,
        tags=["dev", "color", "converter"],
    ),
    Tool(
        id="image-compressor",
        title="Image Compressor",
        slug="image-compressor",
        description="Compress images without losing quality",
        category=ToolCategory.IMAGE,
        archetype=ToolArchetype.FILE,
        featured=True,
        tags=["image", "compression", "optimization"],
    ),
    Tool(
        id="image-resizer",
        title="Image Resizer",
        slug="image-resizer",
        description="Resize images to specific dimensions or percentages",
        category=ToolCategory.IMAGE,
        archetype=ToolArchetype.FILE,
        tags=["image", "resize", "dimensions"],
    ),
    Tool(
        id="pdf-converter",
        title="PDF Converter",
        slug="pdf-converter",
        description="Convert files to and from PDF format",
        category=ToolCategory.CONVERTER,
        archetype=ToolArchetype.FILE,
        tags=["converter", "pdf", "document"],
    ),
)


def build_tool(slug: str, featured_ids: Optional[Iterable[str]] = None) -> Tool:
    """Turn a bare backend identifier into a full catalog record."""
    metadata = classify(slug, featured_ids)
    return Tool(
        id=slug,
        title=format_title(slug),
        slug=slug,
        description=metadata.description,
        category=metadata.category,
        archetype=metadata.archetype,
        featured=metadata.featured,
        tags=split_tags(slug),
    )


def build_tools(slugs: Iterable[str], featured_ids: Optional[Iterable[str]] = None) -> List[Tool]:
    featured = list(featured_ids) if featured_ids is not None else None
    tools: List[Tool] = []
    for slug in slugs:
        if not isinstance(slug, str) or not slug.strip():
            logger.debug("Skipping unusable tool id %r", slug)
            continue
        tools.append(build_tool(slug.strip(), featured))
    return tools


def merge(static_tools: Sequence[Tool], dynamic_tools: Sequence[Tool]) -> List[Tool]:
    """Combine both lists keyed by slug.

    Static order comes first; a dynamic tool with a known slug replaces the
    static entry in place, new slugs are appended in dynamic order. Never
    sorts and never raises.
    """
    merged: Dict[str, Tool] = {}
    for tool in static_tools:
        merged[tool.slug] = tool
    for tool in dynamic_tools:
        merged[tool.slug] = tool
    return list(merged.values())


class ToolCatalog:
    """Immutable view over an ordered list of tools. Replace it, don't mutate it."""

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        self._tools: tuple[Tool, ...] = tuple(tools)
        self._by_slug: Dict[str, Tool] = {tool.slug: tool for tool in self._tools}

    def __iter__(self):
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, slug: object) -> bool:
        return slug in self._by_slug

    @property
    def tools(self) -> List[Tool]:
        return list(self._tools)

    def get(self, slug: str) -> Optional[Tool]:
        return self._by_slug.get(slug)

    def by_category(self, category: ToolCategory) -> List[Tool]:
        return [tool for tool in self._tools if tool.category == category]

    def by_archetype(self, archetype: ToolArchetype) -> List[Tool]:
        return [tool for tool in self._tools if tool.archetype == archetype]

    def featured(self) -> List[Tool]:
        return [tool for tool in self._tools if tool.featured]

    def categories(self) -> List[ToolCategory]:
        seen: Dict[ToolCategory, None] = {}
        for tool in self._tools:
            seen.setdefault(tool.category, None)
        return list(seen)

    def search(self, query: str) -> List[Tool]:
        needle = query.strip().lower()
        if not needle:
            return list(self._tools)
        return [
            tool
            for tool in self._tools
            if needle in tool.title.lower()
            or needle in tool.description.lower()
            or any(needle in tag.lower() for tag in tool.tags)
        ]

    def filter(
        self,
        category: Optional[ToolCategory] = None,
        archetype: Optional[ToolArchetype] = None,
        featured: Optional[bool] = None,
        query: Optional[str] = None,
    ) -> List[Tool]:
        tools = self.search(query) if query else list(self._tools)
        if category is not None:
            tools = [tool for tool in tools if tool.category == category]
        if archetype is not None:
            tools = [tool for tool in tools if tool.archetype == archetype]
        if featured is not None:
            tools = [tool for tool in tools if tool.featured == featured]
        return tools


class CatalogLoader:
    """Owns the current catalog and rebuilds it from the backend agent list."""

    def __init__(
        self,
        backend: BackendClient,
        static_tools: Sequence[Tool] = STATIC_TOOLS,
        featured_ids: Optional[Iterable[str]] = None,
        mode: str = "merge",
    ) -> None:
        if mode not in CATALOG_MODES:
            raise ValueError(f"Unknown catalog mode: {mode}")
        self._backend = backend
        self._static_tools = tuple(static_tools)
        self._featured_ids = list(featured_ids) if featured_ids is not None else None
        self._mode = mode
        self._catalog = ToolCatalog(self._static_tools)
        self._last_dynamic_count = 0
        self._refresh_task: asyncio.Task | None = None
        self._refresh_interval: float = 60.0

    @classmethod
    def from_settings(cls, settings: Settings, backend: BackendClient) -> "CatalogLoader":
        return cls(backend, featured_ids=settings.featured_ids, mode=settings.catalog_mode)

    @property
    def catalog(self) -> ToolCatalog:
        return self._catalog

    @property
    def last_dynamic_count(self) -> int:
        return self._last_dynamic_count

    async def fetch_dynamic_tools(self) -> List[Tool]:
        """Fetch backend ids as tools; any failure yields an empty list."""
        try:
            agents = await self._backend.fetch_agents()
        except BackendError as exc:
            logger.warning("Failed to load tools from backend: %s", exc.message)
            return []
        tools = build_tools(agents.all, self._featured_ids)
        logger.info("Loaded %d tools from backend", len(tools))
        return tools

    def combine(self, dynamic_tools: Sequence[Tool]) -> ToolCatalog:
        if self._mode == "dynamic" and dynamic_tools:
            return ToolCatalog(merge([], dynamic_tools))
        return ToolCatalog(merge(self._static_tools, dynamic_tools))

    async def refresh(self) -> ToolCatalog:
        dynamic_tools = await self.fetch_dynamic_tools()
        self._last_dynamic_count = len(dynamic_tools)
        self._catalog = self.combine(dynamic_tools)
        return self._catalog

    async def _refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self._refresh_interval)
            try:
                await self.refresh()
                logger.debug("Tool catalog refreshed successfully")
            except Exception as exc:
                logger.exception("Failed to refresh tool catalog: %s", exc)

    def start_periodic_refresh(self, interval_seconds: float = 60.0) -> None:
        """Start background task to refresh the catalog on the given interval."""
        self._refresh_interval = max(5.0, float(interval_seconds))
        if self._refresh_task and not self._refresh_task.done():
            return
        loop = asyncio.get_running_loop()
        self._refresh_task = loop.create_task(self._refresh_loop())
        logger.info("Started tool catalog periodic refresh every %.0f seconds", self._refresh_interval)

    async def stop_periodic_refresh(self) -> None:
        """Cancel the background refresh task if running."""
        if not self._refresh_task:
            return
        task = self._refresh_task
        self._refresh_task = None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Stopped tool catalog periodic refresh")
