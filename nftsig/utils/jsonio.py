"""Atomic JSON document persistence for registry and consent state."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from nftsig.utils.schema import build_schema_stamp, require_schema


def atomic_write_json(
    path: Path,
    payload: dict[str, Any],
    *,
    schema_id: str,
    schema_version: int,
) -> None:
    """Write ``payload`` to ``path`` atomically with schema metadata.

    The document is written to a temporary sibling, fsynced, then moved over
    the destination with ``os.replace``.
    """
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)

    stamped = build_schema_stamp(schema_id=schema_id, schema_version=schema_version).apply(payload)

    fd: int | None = None
    tmp_path: str | None = None

    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=str(destination.parent),
            prefix=destination.name,
            suffix=".tmp",
            text=True,
        )

        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            fd = None  # Ownership transferred to file object
            json.dump(stamped, handle, indent=2, sort_keys=True)
            handle.write("\n")
            handle.flush()
            os.fsync(handle.fileno())

        os.replace(tmp_path, destination)
        tmp_path = None
    finally:
        if fd is not None:
            os.close(fd)
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass


def read_json(path: Path, *, schema_id: str, schema_version: int) -> dict[str, Any] | None:
    """Load a document written by :func:`atomic_write_json`.

    Returns ``None`` when the file does not exist.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path}")

    require_schema(data, schema_id, schema_version)
    return data
