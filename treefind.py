"""CLI entry point for treefind — search local or FTP directory trees."""

import argparse
import json
import logging
import sys
from urllib.parse import unquote, urlparse

from backend import Backend, BackendError
from backend_ftp import DEFAULT_PORT, DEFAULT_TIMEOUT
from filters import FindType
from finder import search, dir as dir_
from wildcard import compile_glob

# Maps URL scheme -> (module, class)
SCHEMES = {
    "": ("backend_local", "LocalBackend"),
    "file": ("backend_local", "LocalBackend"),
    "ftp": ("backend_ftp", "FtpBackend"),
    "ftps": ("backend_ftp", "FtpBackend"),
}

TYPES = {
    "file": FindType.FILE,
    "dir": FindType.DIRECTORY,
    "all": FindType.ALL,
}


def open_target(target: str, timeout: float = DEFAULT_TIMEOUT) -> tuple[Backend, str]:
    """Open the backend for a local path or ftp(s):// URL. Returns (backend, base path)."""
    parsed = urlparse(target)
    scheme = parsed.scheme.lower()
    # Windows drive letters parse as a one-letter scheme
    if len(scheme) == 1:
        scheme = ""
    if scheme not in SCHEMES:
        raise ValueError(
            f"Unsupported target '{target}'. "
            f"Supported schemes: {', '.join(s for s in sorted(SCHEMES) if s)}"
        )

    mod_name, cls_name = SCHEMES[scheme]
    module = __import__(mod_name)
    backend_class = getattr(module, cls_name)
    if scheme == "":
        return backend_class(), target
    if scheme == "file":
        return backend_class(), unquote(parsed.path)

    backend = backend_class(
        parsed.hostname or "",
        parsed.port or DEFAULT_PORT,
        unquote(parsed.username or ""),
        unquote(parsed.password or ""),
        secure=scheme == "ftps",
        timeout=timeout,
    )
    return backend, unquote(parsed.path) or "/"


def build_filters(args) -> dict:
    filters = {"type": TYPES[args.type]}
    if args.name:
        filters["name//"] = compile_glob(args.name)
    for key, value in args.filter or []:
        filters[key] = value
    return filters


def format_record(path: str, record: dict) -> str:
    attrs = " ".join(f"{key}={value}" for key, value in record.items())
    return f"{path}\t{attrs}"


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="treefind — search local or FTP directory trees"
    )
    parser.add_argument("target", help="Directory or ftp://[user[:password]@]host[:port]/path")
    parser.add_argument("-r", "--recursive", action="store_true", help="Search subdirectories")
    parser.add_argument("-n", "--name", help="Wildcard pattern for names, e.g. '*.txt'")
    parser.add_argument("-t", "--type", choices=sorted(TYPES), default="file",
                        help="Entry type to report (default: file)")
    parser.add_argument("-f", "--filter", nargs=2, action="append", metavar=("KEY", "VALUE"),
                        help="Extra filter, e.g. -f 'size>=' 2M or -f 'time<' 1700000000")
    parser.add_argument("-l", "--long", action="store_true", help="Show compared attributes")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT,
                        help="FTP connection timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        backend, path = open_target(args.target, args.timeout)
    except (BackendError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    with backend:
        try:
            if args.filter or args.long or args.json or args.type != "file":
                results = search(backend, path, build_filters(args), args.recursive)
            else:
                results = dict.fromkeys(dir_(backend, path, args.name, args.recursive))
        except (BackendError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

    if args.json:
        print(json.dumps(results, indent=2, default=str))
    elif args.long:
        for found, record in results.items():
            print(format_record(found, record))
    else:
        for found in results:
            print(found)


if __name__ == "__main__":
    main()
