"""Gallery metadata storage for Galleria.

This module isolates the gallery JSON persistence logic from the request layer
so route handlers can focus on HTTP concerns while the metadata store remains
testable as a small unit.

The gallery index is intentionally simple:

- metadata lives in a single ``gallery.json`` file holding a JSON array
- list order is reverse-chronological (newest first)
- every save rewrites the whole document, pretty-printed

Reading is fail-soft.  A missing, unreadable, or malformed document yields an
empty gallery instead of an exception, so callers never have to tell "empty"
apart from "unreadable".  Code that *does* care (tests, diagnostics) can call
:meth:`MetadataStore.read`, which reports why the result is empty through
:class:`LoadStatus`.

There is no locking here.  Two writers that interleave their
load-modify-save sequences lose one update; serialising writers is the
gallery service's job.
"""

from __future__ import annotations

import copy
import json
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from galleria.core.records import ImageRecord

logger = logging.getLogger(__name__)

class LoadStatus(str, Enum):
    """Why a :class:`LoadResult` holds the records it holds."""

    OK = "ok"
    MISSING = "missing"
    CORRUPT = "corrupt"

@dataclass
class LoadResult:
    """Outcome of reading the gallery document.

    Attributes:
        records: Surviving records in persisted order.
        status: ``OK`` for a readable document, ``MISSING`` when the document
            did not exist yet, ``CORRUPT`` when it could not be parsed.
        skipped: Number of array entries left out because they were not valid
            records.  They stay in the document.
    """

    records: list[ImageRecord] = field(default_factory=list)
    status: LoadStatus = LoadStatus.OK
    skipped: int = 0

class MetadataStore(ABC):
    """Whole-document read and overwrite of the gallery index."""

    def initialize(self) -> bool:
        """Prepare backing storage. Returns ``True`` if anything was created."""
        return False

    @abstractmethod
    def read(self) -> LoadResult:
        """Read the index, reporting how the read went. Never raises."""

    @abstractmethod
    def save(self, records: list[ImageRecord]) -> bool:
        """Overwrite the index with *records*. Returns ``False`` on failure."""

    def load(self) -> list[ImageRecord]:
        """Return the current index, or an empty list if it cannot be read."""
        return self.read().records

class JsonMetadataStore(MetadataStore):
    """Gallery index persisted as one pretty-printed JSON array on disk.

    Args:
        path: Path to ``gallery.json``.  Its parent directory is created on
            first use.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def initialize(self) -> bool:
        """Create the document as an empty array if it does not exist yet.

        Returns:
            ``True`` if the document was created by this call.
        """
        if self.path.exists():
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        created = self.save([])
        if created:
            logger.info("Initialised empty gallery document at %s", self.path)
        return created

    def _read_raw(self) -> tuple[list | None, LoadStatus]:
        """Return the document's JSON array, or ``None`` with the reason."""
        if not self.path.exists():
            return None, LoadStatus.MISSING

        try:
            with open(self.path, encoding="utf-8") as handle:
                raw_entries = json.load(handle)
        except (OSError, ValueError) as exc:
            logger.error("Error reading gallery data from %s: %s", self.path, exc)
            return None, LoadStatus.CORRUPT

        if not isinstance(raw_entries, list):
            logger.error(
                "Gallery document %s holds %s, expected a JSON array",
                self.path,
                type(raw_entries).__name__,
            )
            return None, LoadStatus.CORRUPT

        return raw_entries, LoadStatus.OK

    def read(self) -> LoadResult:
        """Load the gallery document.

        The rule is intentionally conservative:

        - if the file is missing, initialise it and return an empty gallery
        - if the file is unreadable, not JSON, or not an array, return an
          empty gallery marked ``CORRUPT``
        - if an entry is not a valid record, leave it out of the result but
          keep it in the document (see :meth:`save`)

        Returns:
            :class:`LoadResult` with the parsed records.
        """
        raw_entries, status = self._read_raw()
        if raw_entries is None:
            if status is LoadStatus.MISSING:
                self.initialize()
            return LoadResult(status=status)

        parsed = _ParsedDocument.from_entries(raw_entries)
        if parsed.unparsed:
            logger.warning(
                "Kept %d unrecognised gallery entries in %s",
                len(parsed.unparsed),
                self.path,
            )

        return LoadResult(
            records=parsed.records, status=LoadStatus.OK, skipped=len(parsed.unparsed)
        )

    def save(self, records: list[ImageRecord]) -> bool:
        """Persist the gallery index to disk with 2-space indentation.

        Entries of the current document that :meth:`read` could not parse are
        written back unchanged, at the position of the record that followed
        them (or at the end).  Records that are unchanged since the last read
        are written back as their original JSON, so unknown keys and key
        order survive.

        Args:
            records: Full, ordered gallery index.

        Returns:
            ``True`` on success, ``False`` if the document could not be written.
        """
        raw_entries, _ = self._read_raw()
        previous = _ParsedDocument.from_entries(raw_entries) if raw_entries is not None else None
        payload = _merge_entries(records, previous)
        try:
            with open(self.path, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Error writing gallery data to %s: %s", self.path, exc)
            return False
        return True

@dataclass
class _ParsedDocument:
    """A gallery document split into records and entries that are not records.

    Attributes:
        records: Parsed records in document order.
        raw_by_id: Original JSON entry and parsed record, per record id.
        unparsed: ``(anchor, entry)`` pairs for entries that did not parse (or
            repeat an earlier id).  ``anchor`` is the id of the next parsed
            record, ``None`` for entries after the last one.
    """

    records: list[ImageRecord] = field(default_factory=list)
    raw_by_id: dict[str, tuple[ImageRecord, Any]] = field(default_factory=dict)
    unparsed: list[tuple[str | None, Any]] = field(default_factory=list)

    @classmethod
    def from_entries(cls, raw_entries: list) -> _ParsedDocument:
        parsed = cls()
        pending: list[Any] = []
        for entry in raw_entries:
            try:
                record = ImageRecord.model_validate(entry)
            except ValidationError:
                record = None

            if record is None or record.id in parsed.raw_by_id:
                pending.append(entry)
                continue

            parsed.records.append(record)
            parsed.raw_by_id[record.id] = (record, entry)
            parsed.unparsed.extend((record.id, item) for item in pending)
            pending = []

        parsed.unparsed.extend((None, item) for item in pending)
        return parsed

def _merge_entries(records: list[ImageRecord], previous: _ParsedDocument | None) -> list:
    """Build the JSON payload for *records*, keeping what *previous* could not parse."""
    if previous is None:
        return [record.to_json() for record in records]

    kept_ids = {record.id for record in records}
    old_ids = [record.id for record in previous.records]

    def resolve(anchor: str | None) -> str | None:
        # An entry whose anchor record was removed moves to the next survivor.
        if anchor is None or anchor in kept_ids:
            return anchor
        later = old_ids[old_ids.index(anchor) + 1 :]
        return next((record_id for record_id in later if record_id in kept_ids), None)

    by_anchor: dict[str | None, list[Any]] = defaultdict(list)
    for anchor, entry in previous.unparsed:
        by_anchor[resolve(anchor)].append(entry)

    payload: list[Any] = []
    for record in records:
        payload.extend(by_anchor.pop(record.id, []))
        original = previous.raw_by_id.get(record.id)
        if original is not None and original[0] == record:
            payload.append(original[1])
        else:
            payload.append(record.to_json())
    payload.extend(by_anchor.pop(None, []))
    return payload


class InMemoryMetadataStore(MetadataStore):
    """Gallery index held in process memory.

    Useful for tests and for embedding the gallery service without a data
    directory.  Lists are copied on the way in and out so callers never share
    list identity with the store.
    """

    def __init__(self, records: list[ImageRecord] | None = None) -> None:
        self._records: list[ImageRecord] = list(records or [])
        self.save_count = 0

    def read(self) -> LoadResult:
        return LoadResult(records=copy.copy(self._records))

    def save(self, records: list[ImageRecord]) -> bool:
        self._records = list(records)
        self.save_count += 1
        return True
