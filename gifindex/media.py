from __future__ import annotations

import re
from fnmatch import fnmatchcase
from pathlib import Path


ARCHIVE_EXT = ".gif"
SMALL_SUFFIX = "-small"
PAGE_EXT = ".html"

# Priority order matters: the first matching pattern wins.
CANDIDATE_PATTERNS = (
    "output*.GIF",
    "output*.gif",
    "Motion-Still*.gif",
    "Motion-Still*.GIF",
)

# YYYYMMDD_HHMMSS_XXXXXX
IDENTIFIER_RE = re.compile(r"^(\d{8})_(\d{6})_([A-Za-z0-9]{6})$")


def match_candidate(name: str, patterns: tuple[str, ...] = CANDIDATE_PATTERNS) -> str | None:
    """Return the first pattern `name` matches, or None."""
    for pattern in patterns:
        if fnmatchcase(name, pattern):
            return pattern
    return None


def is_derivative(name: str) -> bool:
    return name.endswith(SMALL_SUFFIX + ARCHIVE_EXT)


def is_archive_original(name: str) -> bool:
    return name.endswith(ARCHIVE_EXT) and not is_derivative(name)


def derivative_name(name: str) -> str:
    p = Path(name)
    return p.stem + SMALL_SUFFIX + p.suffix


def is_identifier_name(name: str) -> bool:
    p = Path(name)
    return p.suffix == ARCHIVE_EXT and IDENTIFIER_RE.match(p.stem) is not None


def period_key(name: str) -> str:
    # YYYYMM
    return name[:6]


def page_name(period: str) -> str:
    return f"{period}{PAGE_EXT}"
