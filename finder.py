"""Recursive search over a Backend, with declarative filters.

    >>> from backend import MemoryBackend
    >>> b = MemoryBackend({"a.txt": "x", "sub": {"b.txt": "y"}})
    >>> sorted(dir(b, "/", "*.txt", recursive=True))
    ['/a.txt', '/sub/b.txt']

search() returns a mapping from full path to an attribute record holding
``dir`` plus every value a filter compared, so callers need not query the
backend again for them.
"""

import logging
from dataclasses import dataclass, field

from backend import Backend, BackendError, NotADirectory, SessionError
from filters import FindType, NameFilter, TypeFilter, parse_filters
from wildcard import compile_glob

logger = logging.getLogger(__name__)


@dataclass
class SearchStats:
    """Counters filled in by search() when passed in."""
    listed: int = 0
    matched: int = 0
    skipped: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)  # (path, error message)


class Entry:
    """One listed child. Size and mtime are fetched on first use only."""

    def __init__(self, backend: Backend, name: str, path: str, is_dir: bool):
        self.name = name
        self.path = path
        self.is_dir = is_dir
        self._backend = backend
        self._metadata = None

    def _fetch(self) -> tuple[int, int]:
        if self._metadata is None:
            self._metadata = self._backend.metadata(self.path)
        return self._metadata

    @property
    def size(self) -> int:
        return self._fetch()[0]

    @property
    def mtime(self) -> int:
        return self._fetch()[1]


def _is_dots(name: str) -> bool:
    return not name.strip(".")


def _merge(into: dict, found: dict):
    for path, record in found.items():
        if path in into:
            raise RuntimeError(f"Duplicate result path: {path}")
        into[path] = record


def _skip(path: str, error: BackendError, stats: SearchStats):
    logger.debug("Skipping %s: %s", path, error)
    stats.skipped += 1
    stats.errors.append((path, str(error)))


def _walk(backend: Backend, path: str, filters: list, recursive: bool, stats: SearchStats) -> dict:
    results = {}
    for name in backend.list(path):
        if _is_dots(name):
            continue
        stats.listed += 1
        full = backend.join(path, name)
        try:
            is_dir = backend.is_dir(full)
            if is_dir and recursive:
                try:
                    _merge(results, _walk(backend, full, filters, recursive, stats))
                except SessionError:
                    raise
                except BackendError as e:
                    # The directory itself is still a candidate.
                    _skip(full, e, stats)
            entry = Entry(backend, name, full, is_dir)
            record = {"dir": is_dir}
            if all(f.check(entry, record) for f in filters):
                results[full] = record
                stats.matched += 1
        except SessionError:
            raise
        except BackendError as e:
            _skip(full, e, stats)
    return results


def search(backend: Backend, path: str, filters=None, recursive: bool = False,
           stats: SearchStats | None = None) -> dict[str, dict]:
    """Find and filter entries in a directory.

    Args:
        backend: Where to look.
        path: Base directory.
        filters: Filter spec mapping or list of filter descriptors (see
            filters.py). Without a type filter only files are returned.
        recursive: Also search subdirectories. Subdirectories are descended
            into whether or not they match the filters themselves.
        stats: Optional SearchStats to collect counters and skipped entries.

    Returns:
        Mapping of full path -> attribute record, in listing order.

    Raises:
        NotADirectory: path is not a directory, or cannot be checked.
        DirectoryUnavailable: path could not be listed.
        SessionError: the backend connection became unusable.
    """
    try:
        found = backend.is_dir(path)
    except SessionError:
        raise
    except BackendError as e:
        raise NotADirectory(f"Not a directory: {path}: {e}") from e
    if not found:
        raise NotADirectory(f"Not a directory: {path}")
    if stats is None:
        stats = SearchStats()
    results = _walk(backend, path, parse_filters(filters), recursive, stats)
    logger.debug("Searched %s: %d listed, %d matched, %d skipped",
                 path, stats.listed, stats.matched, stats.skipped)
    return results


def dir(backend: Backend, path: str, pattern: str | None = None, recursive: bool = False) -> list[str]:
    """List the paths of files in a directory, optionally matching a wildcard pattern."""
    filters = [TypeFilter(FindType.FILE)]
    if pattern:
        filters.append(NameFilter(compile_glob(pattern), "//"))
    return list(search(backend, path, filters, recursive))
