"""Catalog of confirmed items, persisted as a single JSON document.

Records are created when a user confirms a detection result and adds a
category and description. Search is a case-insensitive substring match on
the item label.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from pydantic import TypeAdapter, ValidationError

if TYPE_CHECKING:
    from itemsight.vision.models import DetectionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogRecord:
    """A stored item. ``color_name`` is free text because users may edit it."""

    id: str
    item_label: str
    color_name: str
    category: str
    description: str
    date_added: datetime


_RECORDS = TypeAdapter(list[CatalogRecord])


class CatalogStore(Protocol):
    """Protocol for catalog persistence backends."""

    def add(self, result: DetectionResult, category: str = "", description: str = "") -> CatalogRecord: ...

    def add_record(
        self, item_label: str, color_name: str, category: str = "", description: str = ""
    ) -> CatalogRecord: ...

    def list_all(self) -> list[CatalogRecord]: ...

    def search(self, query: str) -> list[CatalogRecord]: ...

    def get(self, record_id: str) -> CatalogRecord: ...

    def delete(self, record_id: str) -> None: ...

    def clear(self) -> None: ...

    def seed_sample_data(self) -> int: ...


def _sample(record_id: str, label: str, color: str, category: str, description: str, day: int) -> CatalogRecord:
    return CatalogRecord(
        id=record_id,
        item_label=label,
        color_name=color,
        category=category,
        description=description,
        date_added=datetime(2025, 10, day, tzinfo=UTC),
    )


SAMPLE_RECORDS: tuple[CatalogRecord, ...] = (
    _sample("1", "Cup", "Green", "Kitchen", "Green ceramic cup for coffee", 20),
    _sample("2", "Cup", "Blue", "Kitchen", "Blue glass cup for water", 21),
    _sample("3", "Bottle", "Red", "Kitchen", "Red water bottle", 22),
    _sample("4", "Book", "Brown", "Study", "Programming textbook", 19),
    _sample("5", "Cell Phone", "Black", "Electronics", "Smartphone for daily use", 18),
    _sample("6", "Laptop", "Silver", "Electronics", "Work laptop", 17),
    _sample("7", "Chair", "Brown", "Furniture", "Wooden office chair", 16),
    _sample("8", "Bottle", "Green", "Kitchen", "Green reusable water bottle", 15),
)


def matches(record: CatalogRecord, query: str) -> bool:
    return query.strip().lower() in record.item_label.lower()


class JsonCatalogStore:
    """Catalog backed by one JSON file, rewritten in full on every change."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def add(self, result: DetectionResult, category: str = "", description: str = "") -> CatalogRecord:
        """Store a confirmed detection result."""
        return self.add_record(result.item_label, result.color_name.value, category, description)

    def add_record(
        self, item_label: str, color_name: str, category: str = "", description: str = ""
    ) -> CatalogRecord:
        if not item_label.strip():
            raise ValueError("Item label is required")

        record = CatalogRecord(
            id=uuid.uuid4().hex,
            item_label=item_label.strip(),
            color_name=color_name,
            category=category,
            description=description,
            date_added=datetime.now(UTC),
        )
        with self._lock:
            records = self._load()
            records.append(record)
            self._save(records)
        logger.info("Saved catalog item %s (%s)", record.item_label, record.id)
        return record

    def list_all(self) -> list[CatalogRecord]:
        with self._lock:
            return self._load()

    def search(self, query: str) -> list[CatalogRecord]:
        """Records whose label contains ``query``, ignoring case and surrounding spaces."""
        return [record for record in self.list_all() if matches(record, query)]

    def get(self, record_id: str) -> CatalogRecord:
        for record in self.list_all():
            if record.id == record_id:
                return record
        raise KeyError(f"Unknown catalog item: {record_id}")

    def delete(self, record_id: str) -> None:
        """Remove a record.

        Raises:
            KeyError: If no record has ``record_id``.
        """
        with self._lock:
            records = self._load()
            remaining = [record for record in records if record.id != record_id]
            if len(remaining) == len(records):
                raise KeyError(f"Unknown catalog item: {record_id}")
            self._save(remaining)
        logger.info("Deleted catalog item %s", record_id)

    def clear(self) -> None:
        with self._lock:
            self._path.unlink(missing_ok=True)
        logger.info("Cleared catalog %s", self._path)

    def seed_sample_data(self) -> int:
        """Populate an empty catalog with the demo items; returns how many were added."""
        with self._lock:
            if self._load():
                return 0
            self._save(list(SAMPLE_RECORDS))
        logger.info("Seeded catalog with %d sample items", len(SAMPLE_RECORDS))
        return len(SAMPLE_RECORDS)

    def _load(self) -> list[CatalogRecord]:
        if not self._path.exists():
            return []
        try:
            return _RECORDS.validate_json(self._path.read_bytes())
        except ValidationError as exc:
            raise RuntimeError(f"Catalog file {self._path} is corrupt") from exc

    def _save(self, records: list[CatalogRecord]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_bytes(_RECORDS.dump_json(records, indent=2))
        tmp_path.replace(self._path)
