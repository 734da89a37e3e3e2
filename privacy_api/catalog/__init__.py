"""Purpose and document catalog."""

from privacy_api.catalog.loader import Catalog, CatalogError, get_catalog, load_catalog

__all__ = ["Catalog", "CatalogError", "get_catalog", "load_catalog"]
