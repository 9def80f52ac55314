from __future__ import annotations

import errno
import secrets
from dataclasses import dataclass, field
from pathlib import Path

from . import media
from .config import Config
from .discovery import Discoverer
from .gallery import build_gallery
from .hash_index import build_hash_index, list_archive
from .importer import ImportedFile, import_candidates
from .naming import RandomSource
from .optimizer import optimize_missing


class PipelineError(RuntimeError):
    pass


@dataclass(frozen=True)
class RunResult:
    imported: list[ImportedFile] = field(default_factory=list)
    optimized: list[Path] = field(default_factory=list)
    pages: list[Path] = field(default_factory=list)


def _archive_error(archive_dir: Path, action: str, e: OSError) -> PipelineError:
    error_code = getattr(e, "errno", None)
    if error_code == errno.ENOENT:
        return PipelineError(
            f"Archive directory not found while {action}: {archive_dir}\n"
            f"  Try: Create it first, or pass the right path with --dir."
        )
    if error_code in (errno.EACCES, errno.EIO, errno.EPERM):
        return PipelineError(
            f"Archive is not accessible while {action}: {archive_dir}\n"
            f"  Error: {e}\n"
            f"  Try: Check permissions on the directory and the files in it."
        )
    return PipelineError(
        f"Archive error while {action}: {archive_dir}\n"
        f"  Error: {e}"
    )


def _list(archive_dir: Path, action: str) -> list[str]:
    try:
        return list_archive(archive_dir)
    except OSError as e:
        raise _archive_error(archive_dir, action, e) from e


def run_pipeline(
    *,
    cfg: Config,
    logger,
    random_source: RandomSource = secrets.token_bytes,
) -> RunResult:
    """
    Index the archive, import new candidates from the search roots, create
    missing derivatives and rebuild the gallery.
    """
    archive_dir = cfg.archive_dir
    if not archive_dir.is_dir():
        raise PipelineError(
            f"Archive directory does not exist or is not a directory: {archive_dir}\n"
            f"  Try: Create it first, or pass the right path with --dir."
        )

    try:
        existing = build_hash_index(archive_dir, logger=logger)
    except OSError as e:
        raise _archive_error(archive_dir, "hashing existing files", e) from e
    logger.info(f"{len(existing)} existing *{media.ARCHIVE_EXT} files in {archive_dir}")

    with Discoverer(cfg.search_roots, existing, logger=logger) as candidates:
        imported = import_candidates(
            candidates, archive_dir, logger=logger, random_source=random_source
        )
    logger.info(f"found {len(imported)} new files")

    names = _list(archive_dir, "listing files to optimize")
    optimized = optimize_missing(
        archive_dir, names, logger=logger, binary=cfg.gifsicle_bin, lossy=cfg.lossy
    )

    names = _list(archive_dir, "listing files for the gallery")
    for name in names:
        if media.is_archive_original(name) and not media.is_identifier_name(name):
            logger.warning(f"Ignoring {name}: not an archive identifier")
    try:
        pages = build_gallery(archive_dir, names, logger=logger)
    except OSError as e:
        raise _archive_error(archive_dir, "writing gallery pages", e) from e

    return RunResult(imported=imported, optimized=optimized, pages=pages)
