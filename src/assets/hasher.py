# src/assets/hasher.py - v1
"""Content keys: deterministic identifiers derived from file bytes.

A key is the BLAKE3 digest of the base64 text of the content followed by
the file extension, truncated to CONTENT_KEY_LENGTH hex characters. The
extension is part of the input, so byte-identical files with different
extensions get different keys; stores that already hold keys computed this
way depend on that.
"""

from __future__ import annotations

import base64
from pathlib import Path, PurePosixPath

from blake3 import blake3

from pagesync.core.errors import FileTooLargeError, NotFoundError

CONTENT_KEY_LENGTH = 32


def compute_content_key(content: bytes, extension: str) -> str:
    """Compute the content key for ``content`` with file ``extension``.

    Args:
        content: Raw file bytes.
        extension: Extension without the leading dot ("" when none).

    Returns:
        Lowercase hex string of CONTENT_KEY_LENGTH characters.
    """
    encoded = base64.b64encode(content).decode("ascii")
    digest = blake3((encoded + extension).encode("utf-8")).hexdigest()
    return digest[:CONTENT_KEY_LENGTH]


def extension_of(path: str | Path) -> str:
    """Last suffix of ``path`` without the dot; dotfiles have none."""
    return PurePosixPath(str(path).replace("\\", "/")).suffix[1:]


def read_file_bytes(path: Path, max_bytes: int | None = None) -> bytes:
    """Read a whole file, refusing files larger than ``max_bytes``.

    The size is checked from stat() before any bytes are read.

    Raises:
        NotFoundError: If the file vanished since the scan.
        FileTooLargeError: If the file exceeds ``max_bytes``.
    """
    try:
        size = path.stat().st_size
    except FileNotFoundError as e:
        raise NotFoundError(f"File does not exist: {path}") from e

    if max_bytes is not None and size > max_bytes:
        raise FileTooLargeError(str(path), size, max_bytes)

    return path.read_bytes()
