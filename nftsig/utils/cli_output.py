"""Schema-wrapped JSON output for CLI commands."""

from __future__ import annotations

import json
from typing import Any

from nftsig.utils.schema import build_schema_stamp


def json_response(
    schema_id: str,
    schema_version: int,
    **data: Any,
) -> str:
    """Create schema-wrapped JSON response for CLI output.

    Args:
        schema_id: Identifier for the output type (e.g., "signature_check").
        schema_version: Integer version for backward compatibility.
        **data: Payload data to include in the response.

    Returns:
        JSON string with schema metadata and payload.

    Example:
        >>> json_response("signature_check", 1, token_id=1, valid=True)
        {
          "schema_id": "signature_check",
          "schema_version": 1,
          "producer": "nftsig-0.1.0",
          "produced_at": "2026-10-18T10:30:00+00:00",
          "token_id": 1,
          "valid": true
        }
    """
    stamp = build_schema_stamp(schema_id=schema_id, schema_version=schema_version)
    wrapped = stamp.apply(dict(data))
    return json.dumps(wrapped, indent=2, default=str)
