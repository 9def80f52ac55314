from __future__ import annotations

import hashlib
from pathlib import Path


def sha1_file(path: Path, *, chunk_size: int | None = None) -> tuple[str, int]:
    """Compute the SHA-1 content hash of a file.

    Args:
        path: File path to hash
        chunk_size: Chunk size in bytes. If None, picked from the file size:
            - >8MB: 1MB chunks
            - Otherwise: 64KB chunks (GIF attachments are usually small)

    Returns:
        Tuple of (hex digest, file size in bytes)

    Raises:
        OSError: if the file cannot be opened or read.
    """
    if chunk_size is None:
        try:
            file_size = path.stat().st_size
        except OSError:
            file_size = 0
        chunk_size = 1024 * 1024 if file_size > 8 * 1024 * 1024 else 64 * 1024

    h = hashlib.sha1()
    size = 0
    with path.open("rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            size += len(chunk)
            h.update(chunk)
    return h.hexdigest(), size
