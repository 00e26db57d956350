"""SHA-256 content fingerprints for files submitted to MetaDefender."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from metadefender_scan.exceptions import FileErrorKind, FileReadError

logger = logging.getLogger("metadefender_scan.digest")

CHUNK_SIZE = 64 * 1024


def compute_digest(path: str | Path) -> str:
    """Compute the lowercase hex SHA-256 of a file.

    The file is streamed in fixed-size chunks. Any failure while opening or
    reading raises FileReadError; no digest is returned for partial content.
    """
    file_path = Path(path)
    hasher = hashlib.sha256()
    try:
        with file_path.open("rb") as fh:
            for chunk in iter(lambda: fh.read(CHUNK_SIZE), b""):
                hasher.update(chunk)
    except FileNotFoundError as e:
        raise FileReadError(
            f"File not found: {file_path}", kind=FileErrorKind.NOT_FOUND
        ) from e
    except PermissionError as e:
        raise FileReadError(
            f"Permission denied: {file_path}", kind=FileErrorKind.PERMISSION_DENIED
        ) from e
    except OSError as e:
        raise FileReadError(
            f"I/O error reading {file_path}: {e}", kind=FileErrorKind.READ_FAILED
        ) from e

    digest = hasher.hexdigest()
    logger.debug("SHA-256 of %s: %s", file_path.name, digest[:16])
    return digest


def digest_bytes(data: bytes) -> str:
    """Compute the SHA-256 of in-memory content."""
    return hashlib.sha256(data).hexdigest()
