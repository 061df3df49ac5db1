from __future__ import annotations

from fastapi import Request

from .services.backend import BackendClient
from .services.catalog import CatalogLoader


def get_backend(request: Request) -> BackendClient:
    return request.app.state.backend


def get_catalog_loader(request: Request) -> CatalogLoader:
    return request.app.state.catalog_loader
