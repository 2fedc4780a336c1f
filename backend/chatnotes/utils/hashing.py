"""Content addressing for imported archives."""

import hashlib


def digest(content: bytes) -> str:
    """Return the SHA-256 hex digest of an archive's raw bytes."""
    return hashlib.sha256(content).hexdigest()
