"""Utility modules for common operations."""

from nftsig.utils.hashing import (
    consent_digest,
    format_message_hash,
    keccak_digest,
    keccak_file,
    parse_message_hash,
)
from nftsig.utils.jsonio import atomic_write_json, read_json
from nftsig.utils.schema import SchemaStamp, SchemaValidationError, build_schema_stamp
from nftsig.utils.validation import normalize_address, parse_token_id, require_token_id

__all__ = [
    "atomic_write_json",
    "build_schema_stamp",
    "consent_digest",
    "format_message_hash",
    "keccak_digest",
    "keccak_file",
    "normalize_address",
    "parse_message_hash",
    "parse_token_id",
    "read_json",
    "require_token_id",
    "SchemaStamp",
    "SchemaValidationError",
]
