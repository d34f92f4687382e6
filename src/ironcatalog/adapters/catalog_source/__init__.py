"""Catalog payload retrieval adapters."""

from __future__ import annotations

from .client import CatalogDocument, CatalogDocumentClient, CatalogDocumentError
from .sources import (
    EmbeddedCatalogSource,
    HttpCatalogSource,
    build_default_sources,
    load_starter_records,
)

__all__ = [
    "CatalogDocument",
    "CatalogDocumentClient",
    "CatalogDocumentError",
    "EmbeddedCatalogSource",
    "HttpCatalogSource",
    "build_default_sources",
    "load_starter_records",
]
