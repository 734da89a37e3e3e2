"""Tests for the purpose catalog loader."""

from pathlib import Path

import pytest

from privacy_api.catalog.loader import CatalogError, get_catalog, load_catalog


class TestBundledCatalog:
    """Tests for the catalog shipped with the package."""

    def test_documents_and_purposes(self) -> None:
        catalog = load_catalog()

        assert [d["purposeId"] for d in catalog.documents] == [
            "terms-of-service",
            "privacy-policy",
        ]
        assert [p["purposeId"] for p in catalog.purposes] == ["marketing", "analytics"]

    def test_find_document(self) -> None:
        catalog = load_catalog()

        assert catalog.find_document("privacy-policy")["consentType"] == "transparent"
        assert catalog.find_document("marketing") is None
        assert catalog.find_document(None) is None

    def test_find_purpose(self) -> None:
        catalog = load_catalog()

        assert catalog.find_purpose("analytics")["accessTypeId"] == "collect"
        assert catalog.find_purpose("terms-of-service") is None

    def test_get_catalog_is_cached(self) -> None:
        assert get_catalog() is get_catalog()


class TestCatalogErrors:
    """Tests for rejecting broken catalog files."""

    def _write(self, tmp_path: Path, content: str) -> Path:
        path = tmp_path / "catalog.yaml"
        path.write_text(content, encoding="utf-8")
        return path

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(CatalogError, match="not found"):
            load_catalog(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = self._write(tmp_path, "documents: [unclosed\n")

        with pytest.raises(CatalogError, match="Invalid catalog YAML"):
            load_catalog(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = self._write(tmp_path, "- just\n- a list\n")

        with pytest.raises(CatalogError, match="must be a mapping"):
            load_catalog(path)

    def test_entry_without_purpose_id(self, tmp_path: Path) -> None:
        path = self._write(tmp_path, "purposes:\n  - purposeName: Nameless\n")

        with pytest.raises(CatalogError, match="missing purposeId"):
            load_catalog(path)

    def test_unknown_consent_type(self, tmp_path: Path) -> None:
        path = self._write(
            tmp_path, "purposes:\n  - purposeId: p1\n    consentType: sometimes\n"
        )

        with pytest.raises(CatalogError, match="Invalid catalog value"):
            load_catalog(path)

    def test_empty_file_is_empty_catalog(self, tmp_path: Path) -> None:
        catalog = load_catalog(self._write(tmp_path, ""))

        assert catalog.documents == []
        assert catalog.purposes == []
