"""Keccak-256 digests for message hashes and consent payloads."""

from pathlib import Path

from eth_abi import encode
from eth_hash.auto import keccak as keccak256
from eth_utils import keccak

from nftsig.utils.validation import require_token_id

HASH_LENGTH = 32


def keccak_digest(content: bytes) -> bytes:
    """Compute the 32-byte keccak-256 digest of ``content``.

    Args:
        content: Bytes to hash

    Returns:
        Raw digest bytes
    """
    return keccak(primitive=content)


def keccak_file(file_path: Path, chunk_size: int = 65536) -> bytes:
    """Compute the keccak-256 digest of a file, streaming in chunks.

    Args:
        file_path: Path to file
        chunk_size: Size of chunks to read (default 64KB)

    Returns:
        Raw digest bytes

    Raises:
        FileNotFoundError: If file does not exist
    """
    hasher = keccak256.new(b"")
    with open(file_path, "rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            hasher.update(chunk)

    return hasher.digest()


def parse_message_hash(value: bytes | str) -> bytes:
    """Normalize a message hash given as raw bytes or hex text.

    Raises:
        ValueError: If the value is not exactly 32 bytes
    """
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, str):
        text = value.strip()
        if text[:2].lower() == "0x":
            text = text[2:]
        if len(text) != HASH_LENGTH * 2:
            raise ValueError(
                f"Message hash must be {HASH_LENGTH * 2} hex characters, got {len(text)}"
            )
        try:
            raw = bytes.fromhex(text)
        except ValueError as exc:
            raise ValueError(f"Message hash is not valid hex: {value!r}") from exc
    else:
        raise ValueError(f"Unsupported message hash type: {type(value).__name__}")

    if len(raw) != HASH_LENGTH:
        raise ValueError(f"Message hash must be {HASH_LENGTH} bytes, got {len(raw)}")
    return raw


def format_message_hash(message_hash: bytes) -> str:
    """Render a 32-byte hash as lowercase ``0x`` hex."""
    return "0x" + parse_message_hash(message_hash).hex()


def consent_digest(
    token_id: int, message_hash: bytes | str, namespace: str, epoch: int = 0
) -> bytes:
    """Digest an owner signs off-chain to authorize consent for a hash.

    keccak-256 over
    ``abi.encode(string namespace, uint256 tokenId, bytes32 hash, uint256 epoch)``.
    The namespace binds the authorization to one registry. ``epoch`` counts
    revocations of the pair, so a signature stops working once consent it
    granted has been withdrawn.
    """
    if epoch < 0:
        raise ValueError(f"Consent epoch must be non-negative, got {epoch}")
    return keccak_digest(
        encode(
            ["string", "uint256", "bytes32", "uint256"],
            [namespace, require_token_id(token_id), parse_message_hash(message_hash), epoch],
        )
    )
