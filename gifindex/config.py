from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


DEFAULT_LOSSY = 30
DEFAULT_GIFSICLE = "gifsicle"
SYSTEM_TEMP_ROOT = Path("/private/var/folders")

_TRUTHY = ("true", "1", "yes", "on")


class ConfigError(RuntimeError):
    pass


def _split_paths(s: str) -> list[Path]:
    parts = [p.strip() for p in s.split(",") if p.strip()]
    return [Path(os.path.expanduser(p)).resolve() for p in parts]


def _parse_bool(s: str) -> bool:
    return s.strip().lower() in _TRUTHY


def default_search_roots() -> list[Path]:
    """
    The per-user messages attachment directory plus the system temp-folder root.
    """
    try:
        home = Path.home()
    except (KeyError, RuntimeError) as e:
        raise ConfigError(
            f"Cannot resolve the current user's home directory: {e}\n"
            f"  Try: set HOME, or set GIFINDEX_SEARCH_ROOTS to explicit paths."
        ) from e
    return [home / "Library" / "Messages" / "Attachments", SYSTEM_TEMP_ROOT]


@dataclass(frozen=True)
class Config:
    archive_dir: Path
    search_roots: list[Path]

    gifsicle_bin: str
    lossy: int

    verbose: bool
    log_file: Path | None


def load_config(
    *,
    archive_dir: str | None = None,
    search_roots: str | None = None,
    gifsicle_bin: str | None = None,
    lossy: int | None = None,
    verbose: bool | None = None,
    log_file: str | None = None,
) -> Config:
    env = os.environ

    archive_dir = archive_dir or env.get("GIFINDEX_ARCHIVE_DIR", ".")

    search_roots = search_roots or env.get("GIFINDEX_SEARCH_ROOTS", "")
    if search_roots.strip():
        roots = _split_paths(search_roots)
    else:
        roots = default_search_roots()

    gifsicle_bin = gifsicle_bin or env.get("GIFINDEX_GIFSICLE", DEFAULT_GIFSICLE)

    lossy_raw = lossy if lossy is not None else env.get("GIFINDEX_LOSSY", str(DEFAULT_LOSSY))
    try:
        lossy = int(lossy_raw)
    except ValueError as e:
        raise ConfigError(f"Invalid GIFINDEX_LOSSY value {lossy_raw!r} (expected an integer)") from e

    if verbose is None:
        verbose_env = env.get("GIFINDEX_VERBOSE", "").strip()
        verbose = _parse_bool(verbose_env) if verbose_env else True

    log_file = log_file or env.get("GIFINDEX_LOG_FILE", "")

    return Config(
        archive_dir=Path(os.path.expanduser(archive_dir)).resolve(),
        search_roots=roots,
        gifsicle_bin=gifsicle_bin,
        lossy=lossy,
        verbose=bool(verbose),
        log_file=Path(os.path.expanduser(log_file)).resolve() if log_file else None,
    )
