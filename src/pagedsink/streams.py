"""Capability queries on destination streams.

A destination only has to support writing bytes. Flushing and file
descriptor access are optional and are always probed, never assumed.
"""

import io
import logging
import os

logger = logging.getLogger(__name__)


def is_flushable(stream) -> bool:
    """Check whether a stream exposes a callable flush()."""
    return callable(getattr(stream, "flush", None))


def is_file_backed(stream) -> bool:
    """Check whether a stream is backed by an OS file descriptor."""
    fileno = getattr(stream, "fileno", None)
    if not callable(fileno):
        return False
    try:
        return isinstance(fileno(), int)
    except (OSError, ValueError, io.UnsupportedOperation):
        return False


def is_terminal(stream) -> bool:
    """Check whether a stream is an interactive terminal."""
    if not is_file_backed(stream):
        return False
    try:
        return os.isatty(stream.fileno())
    except (OSError, ValueError):
        return False


def byte_stream(stream):
    """Return the object bytes should be written to for a destination.

    Text streams that wrap a binary buffer (such as sys.stdout) are written
    through that buffer. Other streams are used as they are.
    """
    if isinstance(stream, io.TextIOBase):
        buffer = getattr(stream, "buffer", None)
        if buffer is not None:
            return buffer
    return stream


def flush_quietly(stream) -> None:
    """Flush a stream if it can be flushed, ignoring failures."""
    if not is_flushable(stream):
        return
    try:
        stream.flush()
    except (OSError, ValueError) as e:
        logger.debug("Ignoring flush failure on %r: %s", stream, e)
