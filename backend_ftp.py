"""FTP backend — search a remote tree over a single FTP control connection.

The control channel carries one command/response pair at a time, so a
FtpBackend must only ever be driven from one thread. Directory checks are
done by changing into the candidate path and back again.
"""

import calendar
import ftplib
import logging
import posixpath
import time

from backend import Backend, BackendError, DirectoryUnavailable, EntryUnavailable, SessionError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 21
DEFAULT_TIMEOUT = 90


def parse_mdtm(reply: str) -> int:
    """Convert an MDTM reply ("213 20240131120000[.123]") to a Unix timestamp (UTC)."""
    try:
        stamp = reply.split()[-1].split(".")[0]
        parsed = time.strptime(stamp, "%Y%m%d%H%M%S")
    except (IndexError, ValueError) as e:
        raise EntryUnavailable(f"Bad MDTM reply: {reply!r}") from e
    return calendar.timegm(parsed)


class FtpBackend(Backend):
    """Expose a remote FTP server as a read-only tree.

    Either connects itself (host/port/user/password, optional TLS) or wraps
    an already-open ``ftplib.FTP``-like ``connection``.
    """

    def __init__(self, host: str = "", port: int = DEFAULT_PORT, user: str = "",
                 password: str = "", secure: bool = False,
                 timeout: float = DEFAULT_TIMEOUT, connection=None):
        if connection is not None:
            self._ftp = connection
            return

        ftp_class = ftplib.FTP_TLS if secure else ftplib.FTP
        self._ftp = ftp_class(timeout=timeout)
        try:
            self._ftp.connect(host, port)
            self._ftp.login(user or "anonymous", password)
            if secure:
                self._ftp.prot_p()
            # SIZE is only reliable in binary mode
            self._ftp.voidcmd("TYPE I")
        except ftplib.all_errors as e:
            self._ftp.close()
            raise BackendError(f"Cannot connect to {host}:{port}: {e}") from e
        logger.info("Connected to %s:%s as %s", host, port, user or "anonymous")

    def close(self):
        if self._ftp is None:
            return
        try:
            self._ftp.quit()
        except ftplib.all_errors:
            self._ftp.close()
        self._ftp = None
        logger.info("Connection closed")

    def _connection(self):
        if self._ftp is None:
            raise SessionError("Connection is closed")
        return self._ftp

    def list(self, path: str) -> list[str]:
        ftp = self._connection()
        logger.debug("NLST %s", path)
        try:
            entries = ftp.nlst(path)
        except ftplib.error_perm as e:
            # Several servers answer an empty directory with a 550.
            if "no files found" in str(e).lower():
                return []
            raise DirectoryUnavailable(f"Cannot list {path}: {e}") from e
        except ftplib.all_errors as e:
            raise DirectoryUnavailable(f"Cannot list {path}: {e}") from e
        # Servers differ in whether NLST returns bare names or full paths.
        return [posixpath.basename(entry.rstrip("/")) for entry in entries]

    def is_dir(self, path: str) -> bool:
        ftp = self._connection()
        try:
            current = ftp.pwd()
        except ftplib.all_errors as e:
            raise SessionError(f"PWD failed: {e}") from e
        try:
            ftp.cwd(path)
        except ftplib.error_perm:
            return False
        except ftplib.all_errors as e:
            raise EntryUnavailable(f"Cannot check {path}: {e}") from e
        try:
            ftp.cwd(current)
        except ftplib.all_errors as e:
            # Every later relative command would run in the wrong directory.
            raise SessionError(f"Cannot return to {current}: {e}") from e
        return True

    def metadata(self, path: str) -> tuple[int, int]:
        ftp = self._connection()
        logger.debug("SIZE/MDTM %s", path)
        try:
            size = ftp.size(path)
            reply = ftp.sendcmd(f"MDTM {path}")
        except ftplib.all_errors as e:
            raise EntryUnavailable(f"Cannot query {path}: {e}") from e
        if size is None:
            raise EntryUnavailable(f"No size reported for {path}")
        return int(size), parse_mdtm(reply)
