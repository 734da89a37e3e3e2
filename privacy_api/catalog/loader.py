"""YAML loader for the purpose and document catalog."""

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from privacy_api.models.privacy import ConsentDisplayType, ConsentStatus

# Catalog bundled with the package
DEFAULT_CATALOG_PATH = Path(__file__).parent / "catalog.yaml"


class CatalogError(Exception):
    """Raised when a catalog file is missing or malformed."""

    pass


@dataclass
class Catalog:
    """Static purposes known to the basic endpoints.

    Attributes:
        documents: Document-type purposes (terms of service, privacy policy)
        purposes: Data-usage purposes
    """

    documents: list[dict[str, Any]] = field(default_factory=list)
    purposes: list[dict[str, Any]] = field(default_factory=list)

    def find_document(self, purpose_id: str | None) -> dict[str, Any] | None:
        """Return the document entry for a purpose, if it is a document."""
        if not purpose_id:
            return None
        for document in self.documents:
            if document["purposeId"] == purpose_id:
                return document
        return None

    def find_purpose(self, purpose_id: str | None) -> dict[str, Any] | None:
        """Return the data-usage purpose entry for a purpose id."""
        if not purpose_id:
            return None
        for purpose in self.purposes:
            if purpose["purposeId"] == purpose_id:
                return purpose
        return None


def _validate_entries(entries: Any, section: str) -> list[dict[str, Any]]:
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise CatalogError(f"Catalog section '{section}' must be a list")

    for index, entry in enumerate(entries):
        if not isinstance(entry, dict) or not entry.get("purposeId"):
            raise CatalogError(f"Catalog {section}[{index}] is missing purposeId")
        # Reject values outside the known enumerations early
        if "consentType" in entry:
            ConsentDisplayType(entry["consentType"])
        if "status" in entry:
            ConsentStatus(entry["status"])

    return entries


def load_catalog(path: Path | None = None) -> Catalog:
    """Load and validate a catalog YAML file.

    Args:
        path: Catalog file (defaults to the bundled catalog.yaml)

    Returns:
        Parsed Catalog

    Raises:
        CatalogError: If the file is missing or malformed
    """
    filepath = path or DEFAULT_CATALOG_PATH

    if not filepath.exists():
        raise CatalogError(f"Catalog not found: {filepath}")

    try:
        content = yaml.safe_load(filepath.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise CatalogError(f"Invalid catalog YAML in {filepath}: {exc}") from exc

    if not isinstance(content, dict):
        raise CatalogError(f"Catalog {filepath} must be a mapping")

    try:
        return Catalog(
            documents=_validate_entries(content.get("documents"), "documents"),
            purposes=_validate_entries(content.get("purposes"), "purposes"),
        )
    except ValueError as exc:
        raise CatalogError(f"Invalid catalog value in {filepath}: {exc}") from exc


@lru_cache
def get_catalog(path: str | None = None) -> Catalog:
    """Get the cached catalog for a path (bundled catalog when None)."""
    return load_catalog(Path(path) if path else None)
