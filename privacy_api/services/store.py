"""In-memory consent store.

Holds every consent record keyed by its composite key. The store is owned
by the application (see ``privacy_api.main``) and handed to the services
that need it; there is no module-level instance.

Writes replace the whole entry for a key, so concurrent writers to the same
key resolve as last-write-wins without any locking.
"""

import logging

from privacy_api.models.consent import ConsentRecord, consent_key

logger = logging.getLogger(__name__)


class ConsentStore:
    """In-memory consent storage for a single process."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, str, str, str, str], ConsentRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def get(
        self,
        subject_id: str,
        purpose_id: str | None,
        access_type_id: str | None = None,
        attribute_id: str | None = None,
        attribute_value: str | None = None,
    ) -> ConsentRecord | None:
        """Fetch the record stored under a composite key, if any."""
        key = consent_key(
            subject_id, purpose_id, access_type_id, attribute_id, attribute_value
        )
        return self._records.get(key)

    def put(self, record: ConsentRecord) -> ConsentRecord | None:
        """Store a record, replacing any record with the same key.

        Returns:
            The record that was replaced, or None
        """
        previous = self._records.get(record.key)
        self._records[record.key] = record

        if previous is not None:
            logger.debug(f"Replaced consent {previous.id} with {record.id}")

        return previous

    def get_by_id(self, consent_id: str) -> ConsentRecord | None:
        """Find a record by its identifier."""
        for record in self._records.values():
            if record.id == consent_id:
                return record
        return None

    def list_for_subject(self, subject_id: str) -> list[ConsentRecord]:
        """List all records belonging to a subject."""
        return [
            record
            for record in self._records.values()
            if record.subject_id == subject_id
        ]

    def clear(self) -> None:
        """Remove all records."""
        self._records.clear()
