from __future__ import annotations

import logging
import os
import stat
import textwrap
from pathlib import Path

import pytest

from gifindex.optimizer import (
    OptimizerError,
    ensure_gifsicle,
    gifsicle_command,
    optimize_file,
    optimize_missing,
    pending_optimizations,
)


LOGGER = logging.getLogger("optimizer-test")


def _write_fake_gifsicle(bin_dir: Path, *, fail: bool = False) -> Path:
    tool = bin_dir / "gifsicle"
    if fail:
        script = "#!/usr/bin/env bash\necho 'gifsicle: broken' >&2\nexit 1\n"
    else:
        # gifsicle -O3 --lossy=N -o DST SRC
        script = textwrap.dedent(
            """\
            #!/usr/bin/env bash
            set -euo pipefail
            if [[ -n "${GIFSICLE_LOG:-}" ]]; then
              echo "$*" >> "$GIFSICLE_LOG"
            fi
            echo "gifsicle: noisy diagnostics" >&2
            cp "$5" "$4"
            """
        )
    tool.write_text(script, encoding="utf-8")
    tool.chmod(tool.stat().st_mode | stat.S_IEXEC)
    return tool


@pytest.fixture
def fake_gifsicle(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    tool = _write_fake_gifsicle(bin_dir)
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    monkeypatch.setenv("GIFSICLE_LOG", str(tmp_path / "gifsicle.log"))
    return tool


def test_gifsicle_command():
    cmd = gifsicle_command(Path("a.gif"), Path("a-small.gif"))
    assert cmd == ["gifsicle", "-O3", "--lossy=30", "-o", "a-small.gif", "a.gif"]


def test_pending_optimizations():
    names = [
        "20240101_000000_aaaaaa.gif",
        "20240101_000000_aaaaaa-small.gif",
        "20240102_000000_bbbbbb.gif",
        "202401.html",
        "index.html",
    ]
    assert pending_optimizations(names) == [
        ("20240102_000000_bbbbbb.gif", "20240102_000000_bbbbbb-small.gif")
    ]


def test_ensure_gifsicle_success(fake_gifsicle: Path):
    ensure_gifsicle()


def test_ensure_gifsicle_failure(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr("gifindex.optimizer.shutil.which", lambda x: None)

    with pytest.raises(OptimizerError, match="gifsicle not found"):
        ensure_gifsicle()


def test_optimize_file(tmp_path: Path, fake_gifsicle: Path):
    src = tmp_path / "a.gif"
    src.write_bytes(b"GIF89a")
    dst = tmp_path / "a-small.gif"

    optimize_file(src, dst)
    assert dst.read_bytes() == b"GIF89a"
    assert (tmp_path / "gifsicle.log").read_text().strip() == f"-O3 --lossy=30 -o {dst} {src}"


def test_optimize_file_nonzero_exit(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    _write_fake_gifsicle(bin_dir, fail=True)
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    src = tmp_path / "a.gif"
    src.write_bytes(b"GIF89a")

    with pytest.raises(OptimizerError, match="Command failed \\(1\\)"):
        optimize_file(src, tmp_path / "a-small.gif")


def test_optimize_file_launch_failure(tmp_path: Path):
    src = tmp_path / "a.gif"
    src.write_bytes(b"GIF89a")

    with pytest.raises(OptimizerError, match="Failed to launch"):
        optimize_file(src, tmp_path / "a-small.gif", binary=str(tmp_path / "no-such-tool"))


def test_optimize_missing(tmp_path: Path, fake_gifsicle: Path, caplog: pytest.LogCaptureFixture):
    archive = tmp_path / "archive"
    archive.mkdir()
    (archive / "20240101_000000_aaaaaa.gif").write_bytes(b"a")
    (archive / "20240101_000000_aaaaaa-small.gif").write_bytes(b"already")
    (archive / "20240102_000000_bbbbbb.gif").write_bytes(b"b")

    caplog.set_level(logging.INFO)
    created = optimize_missing(archive, sorted(os.listdir(archive)), logger=LOGGER)

    assert created == [archive / "20240102_000000_bbbbbb-small.gif"]
    assert (archive / "20240101_000000_aaaaaa-small.gif").read_bytes() == b"already"
    assert "optimizing 20240102_000000_bbbbbb.gif" in caplog.text
    # exactly one launch
    assert len((tmp_path / "gifsicle.log").read_text().splitlines()) == 1


def test_optimize_missing_nothing_to_do_needs_no_tool(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr("gifindex.optimizer.shutil.which", lambda x: None)
    assert optimize_missing(tmp_path, [], logger=LOGGER) == []
