from __future__ import annotations

import base64
import os
import secrets
from datetime import datetime
from pathlib import Path
from typing import Callable


SEGMENT_LEN = 6
MAX_ATTEMPTS = 5
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S_"

RandomSource = Callable[[int], bytes]


class IdentifierError(RuntimeError):
    pass


def origin_time(st: os.stat_result) -> float:
    """The earlier of modification and creation time, as a POSIX timestamp.

    Creation time is `st_birthtime` where the platform reports it, `st_ctime`
    otherwise.
    """
    created = getattr(st, "st_birthtime", None)
    if created is None:
        created = st.st_ctime
    return min(st.st_mtime, created)


def random_segment(random_source: RandomSource = secrets.token_bytes, *, size: int = SEGMENT_LEN) -> str:
    """
    `size` characters of URL-safe base64 with `-` and `_` removed.

    Regenerates when stripping leaves fewer than `size` characters; gives up
    with IdentifierError after MAX_ATTEMPTS.
    """
    for _ in range(MAX_ATTEMPTS):
        raw = random_source(size)
        encoded = base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")
        cleaned = encoded.replace("-", "").replace("_", "")
        if len(cleaned) >= size:
            return cleaned[:size]
    raise IdentifierError(
        f"Failed generating a {size}-character random segment after {MAX_ATTEMPTS} attempts\n"
        f"  Try: Check that the system random source is working."
    )


def format_identifier(timestamp: float, segment: str) -> str:
    # local time, second precision
    return datetime.fromtimestamp(timestamp).strftime(TIMESTAMP_FORMAT) + segment


def new_archive_name(source: Path, *, random_source: RandomSource = secrets.token_bytes) -> str:
    """
    Archive filename for `source`: YYYYMMDD_HHMMSS_XXXXXX plus the lower-cased
    source extension. Raises OSError if `source` cannot be stat'ed.
    """
    st = source.stat()
    return format_identifier(origin_time(st), random_segment(random_source)) + source.suffix.lower()
