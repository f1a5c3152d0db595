"""Local filesystem backend — search a directory tree on disk."""

import os
import stat

from backend import Backend, DirectoryUnavailable, EntryUnavailable


class LocalBackend(Backend):
    """Expose the local filesystem. Paths are plain OS paths."""

    def list(self, path: str) -> list[str]:
        try:
            names = os.listdir(path)
        except OSError as e:
            raise DirectoryUnavailable(f"Cannot list {path}: {e}") from e
        # os.listdir order is arbitrary; sort so repeated searches agree.
        return sorted(names)

    def is_dir(self, path: str) -> bool:
        try:
            st = os.stat(path)
        except (FileNotFoundError, NotADirectoryError):
            return False
        except OSError as e:
            raise EntryUnavailable(f"Cannot stat {path}: {e}") from e
        return stat.S_ISDIR(st.st_mode)

    def metadata(self, path: str) -> tuple[int, int]:
        try:
            st = os.stat(path)
        except OSError as e:
            raise EntryUnavailable(f"Cannot stat {path}: {e}") from e
        return st.st_size, int(st.st_mtime)

    def join(self, base: str, name: str) -> str:
        return os.path.join(base, name)
