"""Content digest of finalized package bytes."""

from __future__ import annotations

import hashlib
import hmac
from pathlib import Path

DIGEST_SIZE = 64
_CHUNK_SIZE = 64 * 1024


def compute_digest(data: bytes) -> bytes:
    """Return the SHA3-512 digest of a finalized archive buffer."""

    return hashlib.sha3_512(data).digest()


def digest_file(path: Path) -> bytes:
    """Re-hash an archive already written to disk."""

    hasher = hashlib.sha3_512()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.digest()


def verify_digest(path: Path, expected: bytes) -> bool:
    """Check that the file at ``path`` still hashes to ``expected``."""

    return hmac.compare_digest(digest_file(path), expected)


def parse_hex_digest(value: str) -> bytes:
    """Decode a hex digest given by an operator, e.g. on the command line."""

    normalized = value.strip().lower()
    try:
        raw = bytes.fromhex(normalized)
    except ValueError as error:
        raise ValueError(f"Digest is not valid hex: {value!r}") from error
    if len(raw) != DIGEST_SIZE:
        raise ValueError(f"Digest must be {DIGEST_SIZE} bytes, got {len(raw)}")
    return raw
