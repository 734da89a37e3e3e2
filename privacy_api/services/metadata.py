"""Page metadata assembly for basic mode."""

from collections.abc import Sequence
from typing import Any

from privacy_api.catalog.loader import Catalog
from privacy_api.schemas.privacy import MetadataResponse, PageMetadata, PrivacyItem
from privacy_api.services.store import ConsentStore

# Catalog purpose fields copied onto default entries. Refinement fields
# (access type, attribute) and the catalog status are left out so an entry
# only names the key its consent was looked up under.
PURPOSE_DISPLAY_FIELDS = (
    "purposeName",
    "purposeDescription",
    "defaultConsentDuration",
    "assentUIDefault",
    "consentType",
)


def _purpose_display(catalog: Catalog, purpose_id: str | None) -> dict[str, Any]:
    purpose = catalog.find_purpose(purpose_id) or {}
    return {name: purpose[name] for name in PURPOSE_DISPLAY_FIELDS if name in purpose}


def build_page_metadata(
    store: ConsentStore,
    catalog: Catalog,
    subject_id: str,
    items: Sequence[PrivacyItem],
) -> MetadataResponse:
    """Join catalog entries with the subject's stored consents.

    Items naming a document purpose become ``document`` entries built from
    the catalog document. Documents are consented to as a whole, so their
    consent is looked up by purpose alone. Every other item is echoed back
    as a ``default`` entry with the catalog purpose's display fields and the
    consent stored under the item's full key.

    Args:
        store: Consent store to read from
        catalog: Static purpose catalog
        subject_id: Data subject the page is rendered for
        items: Requested items, in request order

    Returns:
        MetadataResponse with document and default entries
    """
    documents: list[dict[str, Any]] = []
    defaults: list[dict[str, Any]] = []

    for item in items:
        document = catalog.find_document(item.purpose_id)
        if document is not None:
            record = store.get(subject_id, item.purpose_id)
            documents.append(
                {
                    **document,
                    "consent": record.overlay() if record else None,
                }
            )
            continue

        record = None
        if item.purpose_id:
            record = store.get(
                subject_id,
                item.purpose_id,
                item.access_type_id,
                item.attribute_id,
                item.attribute_value,
            )

        defaults.append(
            {
                **_purpose_display(catalog, item.purpose_id),
                **item.model_dump(by_alias=True, exclude_unset=True),
                "consent": record.overlay() if record else None,
            }
        )

    return MetadataResponse(
        metadata=PageMetadata(document=documents, default=defaults),
        unhandled=[],
    )
