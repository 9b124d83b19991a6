"""The gallery record model and its identifier helpers.

An :class:`ImageRecord` is immutable once created.  Its JSON form uses the
camel-case ``createdAt`` key that the gallery document has always used, while
Python code reads and writes ``created_at``.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def new_image_id() -> str:
    """Return a fresh, collision-resistant record identifier."""
    return str(uuid.uuid4())


def utc_timestamp(now: datetime | None = None) -> str:
    """Format *now* (default: current time) as ISO-8601 UTC with milliseconds.

    >>> utc_timestamp(datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc))
    '2026-01-02T03:04:05.678Z'
    """
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + (
        f"{now.microsecond // 1000:03d}Z"
    )


class ImageRecord(BaseModel):
    """One gallery entry.

    Attributes:
        id: Unique record identifier, the sole lookup key for deletion.
        src: Public URL path of the stored blob.
        alt: Free-text description.
        category: Free-text classification tag used for filtering.
        created_at: ISO-8601 creation timestamp (``createdAt`` in JSON).

    Unknown keys are kept as extra fields and written back on save.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    id: str = Field(..., min_length=1, description="Unique record identifier.")
    src: str = Field(..., min_length=1, description="Public path of the stored image.")
    alt: str = Field(..., description="Free-text image description.")
    category: str = Field(..., description="Classification tag used for filtering.")
    created_at: str = Field(
        ...,
        alias="createdAt",
        description="ISO-8601 creation timestamp.",
    )

    @classmethod
    def create(cls, *, src: str, alt: str, category: str) -> ImageRecord:
        """Build a new record with a generated id and the current timestamp."""
        return cls(
            id=new_image_id(),
            src=src,
            alt=alt,
            category=category,
            created_at=utc_timestamp(),
        )

    def to_json(self) -> dict:
        """Return the record as stored in the gallery document."""
        return self.model_dump(by_alias=True)
