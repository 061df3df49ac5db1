from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..dependencies import get_catalog_loader
from ..schemas.tools import CatalogResponse, Tool, ToolArchetype, ToolCategory
from ..services.catalog import CatalogLoader
from ..utils.errors import api_error

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("", response_model=CatalogResponse)
async def list_catalog(
    category: Optional[ToolCategory] = Query(None, description="Only tools of this category"),
    archetype: Optional[ToolArchetype] = Query(None, description="Only tools rendered with this archetype"),
    featured: Optional[bool] = Query(None, description="Filter on the featured flag"),
    q: Optional[str] = Query(None, description="Search title, description and tags"),
    loader: CatalogLoader = Depends(get_catalog_loader),
):
    tools = loader.catalog.filter(category=category, archetype=archetype, featured=featured, query=q)
    return {"data": tools, "total": len(tools)}


@router.get("/categories")
async def list_categories(loader: CatalogLoader = Depends(get_catalog_loader)) -> dict[str, object]:
    return {"data": [category.value for category in loader.catalog.categories()]}


@router.post("/refresh")
async def refresh_catalog(loader: CatalogLoader = Depends(get_catalog_loader)) -> dict[str, object]:
    """Rebuild the catalog from the backend agent list. Falls back to the static tools."""
    catalog = await loader.refresh()
    return {"total": len(catalog), "dynamic": loader.last_dynamic_count}


@router.get("/{slug}", response_model=Tool)
async def get_tool(slug: str, loader: CatalogLoader = Depends(get_catalog_loader)):
    tool = loader.catalog.get(slug)
    if tool is None:
        raise api_error(f"Tool '{slug}' not found", status_code=404, code="tool_not_found")
    return tool
