"""Paged output sink.

A PagedSink is a writable byte stream that feeds an external pager
(`sh -c "$PAGER"`) whose standard output is the destination stream, or that
writes straight to the destination when no pager should be spawned.

Lifecycle:
- open_pager() resolves the command, decides between bypass and subprocess
  mode, and spawns the pager
- write() feeds the pager; the first failure is recorded and sticks
- close() tears the pager down once, either when called or as soon as a
  write finds that the pager went away

A sink is not safe for concurrent use. Writes block while the pager is not
draining its input, and close() blocks until the pager exits.
"""

import errno
import io
import logging
import subprocess
import sys
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from .config import PagerConfig, PagingPolicy, resolve_command
from .errors import ClosedByConsumer, PagerClosed, translate_error
from .streams import byte_stream, flush_quietly, is_flushable, is_terminal

logger = logging.getLogger(__name__)


@dataclass
class _Passthrough:
    """Bypass mode: bytes go straight to the destination."""

    stream: object


@dataclass
class _Subprocess:
    """Subprocess mode: the pager process and the pipe feeding its stdin."""

    process: subprocess.Popen
    pipe: object


_Mode = Union[_Passthrough, _Subprocess]


class PagedSink:
    """Byte sink that pages its output when writing to a terminal.

    Use open_pager() or open_default() to create one.
    """

    def __init__(self, command: str, destination, mode: _Mode):
        self._command = command
        self._destination = destination
        self._mode: Optional[_Mode] = mode
        self._error: Optional[BaseException] = None
        self._bytes_written = 0

    def __repr__(self) -> str:
        state = "closed" if self.closed else self.mode
        return f"<PagedSink command={self._command!r} {state}>"

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    @property
    def command(self) -> str:
        """Pager command, empty in bypass mode."""
        return self._command

    @property
    def destination(self):
        return self._destination

    @property
    def error(self) -> Optional[BaseException]:
        """The first error recorded by a write or close, if any."""
        return self._error

    @property
    def closed(self) -> bool:
        """True once torn down, or once the pager is known to be gone."""
        return self._mode is None or isinstance(self._error, ClosedByConsumer)

    @property
    def mode(self) -> str:
        """Either "subprocess" or "bypass"."""
        return "bypass" if self._command == "" else "subprocess"

    @property
    def bytes_written(self) -> int:
        return self._bytes_written

    def writable(self) -> bool:
        return not self.closed

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def write(self, data) -> int:
        """Write bytes to the pager (or the destination in bypass mode).

        Args:
            data: A bytes-like object.

        Returns:
            Number of bytes written.

        Raises:
            PagerClosed: If the sink was already torn down.
            ClosedByConsumer: If the pager went away. The sink is torn down
                before this is raised.
            BlockingIOError: If a non-blocking raw destination could not
                take the rest of the data.
            Exception: The sticky error of an earlier failed write, or the
                destination's own error on the first failure.
        """
        if self._mode is None:
            raise PagerClosed()
        if self._error is not None:
            raise self._error.with_traceback(None)

        mode = self._mode
        target = mode.pipe if isinstance(mode, _Subprocess) else mode.stream
        view = memoryview(data).cast("B")
        written = 0
        try:
            while written < len(view):
                n = target.write(view[written:])
                if n is None:
                    # A raw stream in non-blocking mode took nothing
                    if isinstance(target, io.RawIOBase):
                        raise BlockingIOError(
                            errno.EAGAIN, "write could not complete without blocking", written
                        )
                    # Writers outside the io hierarchy that do not report a
                    # count take everything
                    written = len(view)
                elif n == 0:
                    break
                else:
                    written += n
        except Exception as e:
            error = translate_error(e, written)
            self._error = error
            if isinstance(error, ClosedByConsumer):
                logger.debug("Pager consumer went away after %d bytes", written)
                self._teardown()
            if error is e:
                raise
            raise error
        finally:
            self._bytes_written += written
        return written

    def writelines(self, lines: Iterable) -> None:
        for line in lines:
            self.write(line)

    def flush(self) -> None:
        """Flush the destination in bypass mode.

        The pager pipe is unbuffered, so there is nothing to flush in
        subprocess mode.
        """
        if self._mode is None:
            raise PagerClosed()
        if isinstance(self._mode, _Passthrough) and is_flushable(self._mode.stream):
            self._mode.stream.flush()

    # ------------------------------------------------------------------
    # Closing
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Tear the pager down and wait for it to exit.

        Safe to call more than once; later calls repeat the recorded error
        without touching the pager again.

        Raises:
            ClosedByConsumer: If the pager went away.
            subprocess.CalledProcessError: If the pager exited abnormally.
            Exception: The sticky error of an earlier failed write.
        """
        if self._mode is not None:
            error = self._teardown()
            if self._error is None:
                self._error = error
        if self._error is not None:
            raise self._error.with_traceback(None)

    def _teardown(self) -> Optional[BaseException]:
        mode = self._mode
        if mode is None:
            return None
        try:
            if isinstance(mode, _Subprocess):
                return self._stop_pager(mode)
            return None
        finally:
            self._mode = None
            logger.debug("Paged sink closed after %d bytes", self._bytes_written)

    def _stop_pager(self, mode: _Subprocess) -> Optional[BaseException]:
        pipe_error = None
        try:
            mode.pipe.close()
        except OSError as e:
            pipe_error = translate_error(e)

        returncode = _wait(mode.process)
        if returncode != 0:
            logger.debug("Pager exited with status %d: %s", returncode, self._command)

        flush_quietly(self._destination)

        # An abnormal exit explains a failed pipe close better than the
        # close error does
        if returncode != 0:
            return subprocess.CalledProcessError(returncode, mode.process.args)
        return pipe_error

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> "PagedSink":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            self.close()
        except Exception:
            if exc_val is None:
                raise
            # The body's exception takes precedence
            logger.debug("Suppressed close error while unwinding", exc_info=True)


def _wait(process: subprocess.Popen) -> int:
    """Wait for the pager to exit.

    Ctrl-C reaches the pager as well; the pager decides whether to quit,
    so keep waiting until it does.
    """
    while True:
        try:
            return process.wait()
        except KeyboardInterrupt:
            continue


def open_pager(
    command: str = "",
    destination=None,
    config: Optional[PagerConfig] = None,
) -> PagedSink:
    """Open a paged sink.

    Args:
        command: Pager command; empty to use the configured environment
            variable (default: $PAGER).
        destination: Stream receiving the pager's output (default: sys.stdout).
        config: Policy, shell and environment lookup (default: PagerConfig()).

    Returns:
        The open sink.

    Raises:
        NoCommandConfigured: If no command is given and none is configured.
        OSError: If the destination cannot be flushed or the pager cannot
            be spawned.
    """
    if config is None:
        config = PagerConfig()

    if destination is None:
        destination = sys.stdout

    if config.policy is PagingPolicy.NEVER:
        logger.debug("Paging disabled, writing through to %r", destination)
        return _bypass(destination)

    command = resolve_command(command, config.lookup, config.env_var)

    if config.policy is PagingPolicy.AUTO and not is_terminal(destination):
        logger.debug("Destination is not a terminal, not paging")
        return _bypass(destination)

    # Output the caller already buffered must come before the pager's
    if is_flushable(destination):
        destination.flush()

    argv = [config.shell, "-c", command]
    logger.debug("Spawning pager: %s", argv)
    process = subprocess.Popen(
        argv,
        stdin=subprocess.PIPE,
        stdout=destination,
        bufsize=0,
    )
    return PagedSink(command, destination, _Subprocess(process, process.stdin))


def open_default() -> PagedSink:
    """Open a paged sink on stdout using $PAGER."""
    return open_pager()


def _bypass(destination) -> PagedSink:
    stream = byte_stream(destination)
    if stream is not destination and is_flushable(destination):
        # Pending text must not be overtaken by bytes written underneath it
        destination.flush()
    return PagedSink("", destination, _Passthrough(stream))
