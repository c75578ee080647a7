"""Schema metadata stamped onto persisted documents and JSON output."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from nftsig import __version__


class SchemaValidationError(ValueError):
    """Raised when a persisted document carries an unexpected schema."""


@dataclass(frozen=True, slots=True)
class SchemaStamp:
    """Schema metadata applied to persisted records."""

    schema_id: str
    schema_version: int
    producer: str
    produced_at: str

    def apply(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Return a copy of ``payload`` augmented with schema metadata."""

        stamped = dict(payload)
        stamped["schema_id"] = self.schema_id
        stamped["schema_version"] = self.schema_version
        stamped["producer"] = self.producer
        stamped["produced_at"] = self.produced_at
        return stamped


def build_schema_stamp(
    *,
    schema_id: str,
    schema_version: int,
    producer: str | None = None,
    produced_at: str | None = None,
) -> SchemaStamp:
    """Construct a :class:`SchemaStamp` for reuse across writers."""

    return SchemaStamp(
        schema_id=schema_id,
        schema_version=schema_version,
        producer=producer or f"nftsig-{__version__}",
        produced_at=produced_at or datetime.now(UTC).isoformat(),
    )


def require_schema(record: Mapping[str, Any], schema_id: str, schema_version: int) -> None:
    """Raise :class:`SchemaValidationError` unless ``record`` matches the schema."""

    found_id = record.get("schema_id")
    found_version = record.get("schema_version")
    if found_id != schema_id or found_version != schema_version:
        raise SchemaValidationError(
            f"Expected schema {schema_id}@{schema_version}, found {found_id}@{found_version}"
        )
