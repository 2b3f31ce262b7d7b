"""Command-line interface for pagedsink."""

import argparse
import logging
import sys
from pathlib import Path

from .common import CHUNK_SIZE, DEFAULT_ENV_VAR, PRODUCER
from .config import PagerConfig, PagingPolicy
from .errors import (
    ClosedByConsumer,
    NoCommandConfigured,
    file_not_found,
    invalid_argument,
    print_error,
    report_for,
    spawn_failed,
)
from .sink import PagedSink, open_pager

logger = logging.getLogger(__name__)


def copy_stream(source, sink: PagedSink, chunk_size: int = CHUNK_SIZE) -> int:
    """Copy a binary stream into a sink.

    Args:
        source: Binary stream to read from.
        sink: Open sink.
        chunk_size: Read size.

    Returns:
        Number of bytes copied.
    """
    total = 0
    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            return total
        total += sink.write(chunk)


def cmd_page(args: argparse.Namespace) -> int:
    """Copy the input files through the pager."""
    paths = args.files or ["-"]

    missing = [p for p in paths if p != "-" and not Path(p).is_file()]
    if missing:
        print_error(file_not_found(missing[0]), args.json)
        return 1

    policy = PagingPolicy(args.policy) if args.policy else None
    try:
        config = PagerConfig.from_environ(env_var=args.env_var, policy=policy)
    except ValueError as e:
        print_error(invalid_argument("PAGEDSINK_POLICY", str(e)), args.json)
        return 1

    try:
        sink = open_pager(args.pager or "", sys.stdout, config)
    except NoCommandConfigured as e:
        print_error(report_for(e), args.json)
        return 1
    except OSError as e:
        print_error(spawn_failed(e.strerror or str(e)), args.json)
        return 1

    try:
        with sink:
            for path in paths:
                if path == "-":
                    copy_stream(sys.stdin.buffer, sink)
                    continue
                with open(path, "rb") as f:
                    copy_stream(f, sink)
    except ClosedByConsumer:
        logger.debug("Pager quit after %d bytes", sink.bytes_written)
    except Exception as e:
        print_error(report_for(e), args.json)
        return 1

    return 0


def main(argv: list[str] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="pagedsink",
        description="Copy files to stdout through a pager when stdout is a terminal",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {PRODUCER['version']}"
    )
    parser.add_argument(
        "files", nargs="*", metavar="FILE", help="Files to display ('-' for stdin)"
    )
    parser.add_argument(
        "-p", "--pager", help=f"Pager command (default: ${DEFAULT_ENV_VAR})"
    )
    parser.add_argument(
        "--env-var",
        default=DEFAULT_ENV_VAR,
        help="Environment variable holding the default pager command",
    )
    parser.add_argument(
        "--policy",
        choices=[p.value for p in PagingPolicy],
        help="When to spawn the pager (default: auto)",
    )
    parser.add_argument("--json", action="store_true", help="Report errors as JSON")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output to stderr"
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(name)s: %(levelname)s: %(message)s",
            stream=sys.stderr,
        )

    return cmd_page(args)


if __name__ == "__main__":
    sys.exit(main())
