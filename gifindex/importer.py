from __future__ import annotations

import secrets
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .naming import RandomSource, new_archive_name


class CopyError(RuntimeError):
    pass


@dataclass(frozen=True)
class ImportedFile:
    source: Path
    dest: Path


def copy_file(src: Path, dst: Path) -> None:
    """
    Stream `src` into a new file `dst`. An existing `dst` is never overwritten.
    File attributes are not copied. A failed copy may leave a partial `dst` behind.
    """
    try:
        with src.open("rb") as fin, dst.open("xb") as fout:
            shutil.copyfileobj(fin, fout)
    except FileExistsError as e:
        raise CopyError(
            f"Refusing to overwrite existing archive file {dst}\n"
            f"  Another file was given the same identifier; re-run to pick a new one.\n"
            f"  Original error: {e}"
        ) from e
    except OSError as e:
        raise CopyError(
            f"Failed to copy {src} to {dst}\n"
            f"  Try: Check read access to the source and free space / write access in {dst.parent}.\n"
            f"  Original error: {e}"
        ) from e


def import_candidates(
    candidates: Iterable[Path],
    archive_dir: Path,
    *,
    logger,
    random_source: RandomSource = secrets.token_bytes,
) -> list[ImportedFile]:
    """
    Copy each candidate into `archive_dir` under a fresh identifier, strictly in
    the order they are delivered. The first failure aborts the import.
    """
    imported: list[ImportedFile] = []
    for src in candidates:
        try:
            name = new_archive_name(src, random_source=random_source)
        except OSError as e:
            raise CopyError(
                f"Cannot stat candidate {src}\n"
                f"  The file may have been removed while the search was running.\n"
                f"  Original error: {e}"
            ) from e
        dst = archive_dir / name
        logger.info(f"copying {src} to {dst}")
        copy_file(src, dst)
        imported.append(ImportedFile(source=src, dest=dst))
    return imported
