"""Simple paging helpers built on PagedSink.

Key design principles:
- No background threads or refresh
- Works with redirected output (no pager unless writing to a TTY)
- The user quitting the pager early is not an error
"""

import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import Iterator, Optional, Union

from .config import PagerConfig, PagingPolicy
from .errors import ClosedByConsumer, NoCommandConfigured
from .sink import PagedSink, open_pager

logger = logging.getLogger(__name__)


@contextmanager
def paged(
    command: str = "",
    destination=None,
    config: Optional[PagerConfig] = None,
) -> Iterator[PagedSink]:
    """Open a paged sink for the duration of a block.

    The pager going away, whether noticed by a write inside the block or by
    the final close, ends the block quietly. Any other error propagates.

    Args:
        command: Pager command (default: $PAGER).
        destination: Output stream (default: sys.stdout).
        config: Paging configuration.

    Yields:
        The open sink.
    """
    sink = open_pager(command, destination, config)
    try:
        with sink:
            yield sink
    except ClosedByConsumer:
        logger.debug("Pager quit after %d bytes", sink.bytes_written)


def page(
    content: Union[str, bytes],
    *,
    command: str = "",
    destination=None,
    config: Optional[PagerConfig] = None,
    encoding: str = "utf-8",
    fallback: bool = True,
) -> None:
    """Display content through a pager.

    Args:
        content: Text or bytes to display.
        command: Pager command (default: $PAGER).
        destination: Output stream (default: sys.stdout).
        config: Paging configuration.
        encoding: Encoding used when content is text.
        fallback: Write directly to the destination if no pager is
            configured or it cannot be started.

    Raises:
        NoCommandConfigured: If no pager is configured and fallback is off.
        OSError: If the pager cannot be started and fallback is off.
    """
    data = content.encode(encoding) if isinstance(content, str) else content

    try:
        sink = open_pager(command, destination, config)
    except (NoCommandConfigured, OSError) as e:
        if not fallback:
            raise
        logger.debug("Not paging: %s", e)
        direct = replace(config or PagerConfig(), policy=PagingPolicy.NEVER)
        sink = open_pager(destination=destination, config=direct)

    try:
        with sink:
            sink.write(data)
    except ClosedByConsumer:
        logger.debug("Pager quit after %d of %d bytes", sink.bytes_written, len(data))
