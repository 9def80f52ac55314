from __future__ import annotations

import platform
import shutil
import subprocess
from pathlib import Path

from . import media


class OptimizerError(RuntimeError):
    pass


def _get_gifsicle_install_hint() -> str:
    """Get platform-specific gifsicle installation hint."""
    system = platform.system().lower()
    if system == "darwin":
        return "Install with: brew install gifsicle (or see https://www.lcdf.org/gifsicle/)"
    elif system == "linux":
        return "Install with: sudo apt-get install gifsicle (or see https://www.lcdf.org/gifsicle/)"
    else:
        return "See https://www.lcdf.org/gifsicle/ for installation instructions"


def ensure_gifsicle(binary: str = "gifsicle") -> None:
    if shutil.which(binary) is None:
        hint = _get_gifsicle_install_hint()
        raise OptimizerError(
            f"{binary} not found on PATH.\n"
            f"{hint}\n"
            f"After installation, verify with: gifsicle --version"
        )


def gifsicle_command(src: Path, dst: Path, *, binary: str = "gifsicle", lossy: int = 30) -> list[str]:
    return [binary, "-O3", f"--lossy={lossy}", "-o", str(dst), str(src)]


def optimize_file(src: Path, dst: Path, *, binary: str = "gifsicle", lossy: int = 30) -> None:
    """
    Write a lossy-optimized copy of `src` to `dst`. Tool output is discarded;
    only the exit status counts.
    """
    cmd = gifsicle_command(src, dst, binary=binary, lossy=lossy)
    try:
        p = subprocess.run(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except OSError as e:
        raise OptimizerError(f"Failed to launch {binary}: {e}\n{_get_gifsicle_install_hint()}") from e
    if p.returncode != 0:
        raise OptimizerError(
            f"Command failed ({p.returncode}): {' '.join(cmd)}\n"
            f"  Try: Run the command by hand to see gifsicle's diagnostics."
        )


def pending_optimizations(names: list[str]) -> list[tuple[str, str]]:
    """(original, derivative) name pairs for originals without a derivative."""
    present = set(names)
    out: list[tuple[str, str]] = []
    for name in sorted(names):
        if not media.is_archive_original(name):
            continue
        small = media.derivative_name(name)
        if small in present:
            continue
        out.append((name, small))
    return out


def optimize_missing(
    archive_dir: Path,
    names: list[str],
    *,
    logger,
    binary: str = "gifsicle",
    lossy: int = 30,
) -> list[Path]:
    """Create every missing derivative in `archive_dir`; returns the new paths."""
    todo = pending_optimizations(names)
    if not todo:
        return []
    ensure_gifsicle(binary)

    created: list[Path] = []
    for name, small in todo:
        logger.info(f"optimizing {name}")
        dst = archive_dir / small
        optimize_file(archive_dir / name, dst, binary=binary, lossy=lossy)
        created.append(dst)
    return created
