"""Local persistence for the image gallery.

The gallery is one ordered list of ``GalleryRecord`` objects, newest first,
serialized as JSON into a single file (the ``pika-gallery`` slot) inside the
configured data directory. Every mutation rewrites the whole file; there is no
partial-write or transactional guarantee, the last write wins.

A file that cannot be parsed is treated as empty and removed, so a corrupt
value never causes the same failure on every start.
"""

from __future__ import annotations

import json
import logging
import os
from typing import List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from library.models import GalleryRecord

logger = logging.getLogger(__name__)

GALLERY_KEY = "pika-gallery"

_records_adapter = TypeAdapter(List[GalleryRecord])


def _ensure_dir(path: str) -> None:
    """Create the directory if it does not exist."""
    os.makedirs(path, exist_ok=True)


class GalleryStore:
    """Reads and writes the gallery file.

    Args:
        data_dir: Directory holding the gallery file.
        key: Base name of the file (without extension).
    """

    def __init__(self, data_dir: str, key: str = GALLERY_KEY):
        self.data_dir = data_dir
        self.path = os.path.join(data_dir, f"{key}.json")

    def load(self) -> List[GalleryRecord]:
        """Return the saved collection, or an empty list.

        Missing files yield an empty list. Unparseable content is discarded
        and the file removed.
        """
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = f.read()
            return _records_adapter.validate_json(raw)
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"[gallery] Failed to parse {self.path}, resetting: {e}")
            self._discard()
            return []

    def save(self, records: Sequence[GalleryRecord]) -> None:
        """Persist the full ordered collection, replacing any prior value."""
        _ensure_dir(self.data_dir)
        payload = [record.model_dump(mode="json") for record in records]
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(payload, f)

    def delete(self, record_id: str) -> None:
        """Remove the record with ``record_id``; absent ids are ignored."""
        records = self.load()
        remaining = [record for record in records if record.id != record_id]
        if len(remaining) != len(records):
            self.save(remaining)
            logger.info(f"[gallery] Deleted {record_id}")

    def prepend(self, record: GalleryRecord) -> List[GalleryRecord]:
        """Insert ``record`` at the front of the gallery and persist it."""
        records = [record, *self.load()]
        self.save(records)
        return records

    def get(self, record_id: str) -> Optional[GalleryRecord]:
        for record in self.load():
            if record.id == record_id:
                return record
        return None

    def clear(self) -> None:
        """Reset the gallery to an empty collection."""
        self.save([])

    def _discard(self) -> None:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
