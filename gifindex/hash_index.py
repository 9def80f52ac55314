from __future__ import annotations

import os
from pathlib import Path

from . import media
from .hashing import sha1_file


def list_archive(archive_dir: Path) -> list[str]:
    """Sorted names of every entry in the archive directory."""
    return sorted(os.listdir(archive_dir))


def build_hash_index(archive_dir: Path, *, logger=None) -> set[str]:
    """
    Hash every archive original (derivatives excluded) and return the set of digests.

    Any list/read error propagates: a partial index could let a duplicate back in.
    """
    found: set[str] = set()
    for name in list_archive(archive_dir):
        if not media.is_archive_original(name):
            continue
        digest, _ = sha1_file(archive_dir / name)
        if logger:
            logger.debug(f"indexed {name} - {digest}")
        found.add(digest)
    return found
