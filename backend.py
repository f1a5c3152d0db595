"""Base backend interface, error hierarchy and in-memory reference implementation."""

import posixpath
from dataclasses import dataclass


@dataclass
class ResourceInfo:
    """Size and modification time of a file in a MemoryBackend."""
    size: int = 0
    mtime: int = 0


class BackendError(Exception):
    """Base error for backend operations."""
    pass


class NotFoundError(BackendError):
    """Resource does not exist."""
    pass


class NotADirectory(NotFoundError):
    """The base path of a search is not a directory (or does not exist)."""
    pass


class DirectoryUnavailable(BackendError):
    """A directory exists but its listing could not be read."""
    pass


class EntryUnavailable(BackendError):
    """A single entry could not be queried (stat failed, vanished, ...)."""
    pass


class SessionError(BackendError):
    """The backend connection is closed or left in an unusable state."""
    pass


class Backend:
    """Abstract read-only tree of named resources.

    Subclasses supply the three queries the search engine needs:
    ``list``, ``is_dir`` and ``metadata``. ``join`` builds a child path
    with the backend's own separator.
    """

    def list(self, path: str) -> list[str]:
        """Return child names for a directory. Raises DirectoryUnavailable."""
        raise NotImplementedError

    def is_dir(self, path: str) -> bool:
        """Return True if path is a directory."""
        raise NotImplementedError

    def metadata(self, path: str) -> tuple[int, int]:
        """Return ``(size, mtime)`` for a file. Raises EntryUnavailable."""
        raise NotImplementedError

    def join(self, base: str, name: str) -> str:
        return posixpath.join(base, name)

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def search(self, path: str, filters=None, recursive: bool = False, stats=None) -> dict:
        """Find and filter entries below path. See :func:`finder.search`."""
        from finder import search
        return search(self, path, filters, recursive, stats=stats)

    def dir(self, path: str, pattern: str | None = None, recursive: bool = False) -> "list[str]":
        """List file paths matching a wildcard pattern. See :func:`finder.dir`."""
        from finder import dir as dir_
        return dir_(self, path, pattern, recursive)


def _normalize(path: str) -> str:
    """Normalize a path: ensure leading /, remove trailing /, collapse doubles."""
    if not path.startswith("/"):
        path = "/" + path
    # Collapse repeated slashes
    while "//" in path:
        path = path.replace("//", "/")
    # Remove trailing slash (except for root)
    if path != "/" and path.endswith("/"):
        path = path[:-1]
    return path


class MemoryBackend(Backend):
    """In-memory backend backed by a nested dict.

    Structure: nested dicts are directories. Files are bytes/str values
    (size is the UTF-8 length, mtime is the backend-wide ``mtime``) or
    ResourceInfo instances carrying explicit size and mtime.

    Example:
        MemoryBackend({
            "readme.txt": "Hello, world!",
            "big.iso": ResourceInfo(size=4 << 30, mtime=1700000000),
            "docs": {
                "guide.txt": "A guide",
            }
        })
    """

    def __init__(self, tree: dict, mtime: int = 0):
        self._tree = tree
        self._mtime = mtime

    def _resolve(self, path: str):
        """Walk the tree to find the node at path. Returns the node or raises NotFoundError."""
        path = _normalize(path)
        if path == "/":
            return self._tree

        parts = path.strip("/").split("/")
        node = self._tree
        for part in parts:
            if not isinstance(node, dict) or part not in node:
                raise NotFoundError(f"Not found: {path}")
            node = node[part]
        return node

    def list(self, path: str) -> list[str]:
        try:
            node = self._resolve(path)
        except NotFoundError as e:
            raise DirectoryUnavailable(str(e)) from e
        if not isinstance(node, dict):
            raise DirectoryUnavailable(f"Not a directory: {path}")
        return list(node.keys())

    def is_dir(self, path: str) -> bool:
        try:
            node = self._resolve(path)
        except NotFoundError:
            return False
        return isinstance(node, dict)

    def metadata(self, path: str) -> tuple[int, int]:
        try:
            node = self._resolve(path)
        except NotFoundError as e:
            raise EntryUnavailable(str(e)) from e
        if isinstance(node, dict):
            raise EntryUnavailable(f"Not a file: {path}")
        if isinstance(node, ResourceInfo):
            return node.size, node.mtime
        data = node.encode("utf-8") if isinstance(node, str) else node
        return len(data), self._mtime
