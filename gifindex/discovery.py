from __future__ import annotations

import os
import queue
import stat
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator

from . import media
from .hashing import sha1_file


_PUT_POLL_SECONDS = 0.1
_DONE = object()


class DiscoveryError(RuntimeError):
    pass


@dataclass(frozen=True)
class WalkEntry:
    path: Path
    is_dir: bool
    error: OSError | None = None


def walk_entries(root: Path) -> Iterator[WalkEntry]:
    """
    Depth-first walk of `root`, entries of each directory in lexical order.

    Errors are yielded rather than raised: an entry with `error` set at `root`
    means the root itself could not be stat'ed or listed.
    """
    try:
        st = os.stat(root)
    except OSError as e:
        yield WalkEntry(root, False, e)
        return
    is_dir = stat.S_ISDIR(st.st_mode)
    yield WalkEntry(root, is_dir)
    if is_dir:
        yield from _walk_dir(root)


def _walk_dir(directory: Path) -> Iterator[WalkEntry]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        yield WalkEntry(directory, True, e)
        return

    for entry in entries:
        path = Path(entry.path)
        try:
            # don't follow symlinked directories (temp trees can loop)
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError as e:
            yield WalkEntry(path, False, e)
            continue
        yield WalkEntry(path, is_dir)
        if is_dir:
            yield from _walk_dir(path)


def iter_candidates(
    roots: Iterable[Path],
    known_hashes: set[str],
    *,
    logger,
    patterns: tuple[str, ...] = media.CANDIDATE_PATTERNS,
    should_stop: Callable[[], bool] | None = None,
) -> Iterator[Path]:
    """
    Yield paths under `roots` that match a candidate pattern and whose content
    is neither in `known_hashes` nor identical to something already yielded.

    Roots are walked one after the other. A root that cannot be walked is logged
    and abandoned; an unreadable entry below a root is logged and skipped.
    `known_hashes` is only read. `should_stop` is checked before every entry;
    once it returns True the walk ends without yielding anything more.
    """
    emitted: set[str] = set()
    for root in roots:
        root = Path(root)
        logger.info(f"Searching {root}")
        for entry in walk_entries(root):
            if should_stop is not None and should_stop():
                logger.debug(f"Search stopped at {entry.path}")
                return
            if entry.error is not None:
                if entry.path == root:
                    logger.error(f"Cannot walk {root}: {entry.error}")
                    break
                logger.warning(f"Skipping {entry.path}: {entry.error}")
                continue
            if entry.is_dir:
                continue

            logger.debug(f"{entry.path}")
            if media.match_candidate(entry.path.name, patterns) is None:
                continue

            # the name matched, so a read failure here (dangling symlink included)
            # is a hashing error and fatal, not a skippable walk error
            try:
                digest, _ = sha1_file(entry.path)
            except OSError as e:
                raise DiscoveryError(
                    f"Failed to read candidate: {entry.path}\n"
                    f"  Try: Check read permissions on the file and its directory.\n"
                    f"  Original error: {e}"
                ) from e

            if digest in known_hashes or digest in emitted:
                logger.info(f"Already have {entry.path} - {digest}")
                continue
            emitted.add(digest)
            yield entry.path


class Discoverer:
    """
    Runs `iter_candidates` on a background thread and hands the paths over a
    bounded queue. Iterate it from a single consumer:

        with Discoverer(roots, hashes, logger=logger) as found:
            for path in found:
                ...

    Errors raised while discovering are re-raised from the iteration once the
    candidates delivered before them have been consumed. Leaving the `with`
    block early stops the producer.
    """

    def __init__(
        self,
        roots: Iterable[Path],
        known_hashes: set[str],
        *,
        logger,
        patterns: tuple[str, ...] = media.CANDIDATE_PATTERNS,
        maxsize: int = 1,
    ) -> None:
        self._roots = list(roots)
        self._known_hashes = known_hashes
        self._logger = logger
        self._patterns = patterns
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._stop = threading.Event()
        self._error: BaseException | None = None
        self._thread = threading.Thread(target=self._produce, name="gifindex-discover", daemon=True)

    def __enter__(self) -> Discoverer:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def start(self) -> None:
        self._thread.start()

    def close(self) -> None:
        self._stop.set()
        if self._thread.is_alive():
            self._thread.join()

    def _offer(self, item) -> bool:
        while not self._stop.is_set():
            try:
                self._queue.put(item, timeout=_PUT_POLL_SECONDS)
                return True
            except queue.Full:
                continue
        return False

    def _produce(self) -> None:
        try:
            for path in iter_candidates(
                self._roots,
                self._known_hashes,
                logger=self._logger,
                patterns=self._patterns,
                should_stop=self._stop.is_set,
            ):
                if not self._offer(path):
                    return
        except Exception as e:  # noqa: BLE001 - re-raised on the consumer side
            self._error = e
        self._offer(_DONE)

    def __iter__(self) -> Iterator[Path]:
        while True:
            item = self._queue.get()
            if item is _DONE:
                if self._error is not None:
                    raise self._error
                return
            yield item
