"""
Checksum helpers for release archives.
"""

from pathlib import Path
from typing import BinaryIO

from cryptography.hazmat.primitives import hashes

from .exceptions import ChecksumError

_CHUNK_SIZE = 64 * 1024


def sha256_stream(stream: BinaryIO) -> str:
    """Returns the lowercase hex SHA-256 digest of everything left in `stream`."""
    digest = hashes.Hash(hashes.SHA256())
    for chunk in iter(lambda: stream.read(_CHUNK_SIZE), b""):
        digest.update(chunk)
    return digest.finalize().hex()


def sha256_file(path: Path) -> str:
    try:
        with path.open("rb") as f:
            return sha256_stream(f)
    except OSError as e:
        raise ChecksumError(f"Failed to calculate SHA256 for {path}: {e}") from e
