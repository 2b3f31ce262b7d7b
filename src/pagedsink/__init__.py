"""pagedsink: write output through a pager when it goes to a terminal.

Submodules:
- sink: PagedSink and the open functions
- config: paging policy, configuration and command resolution
- errors: exception vocabulary, broken-pipe translation, CLI error envelope
- streams: capability queries on destination streams
- page: page() and paged() helpers

Usage:
    from pagedsink import open_pager

    with open_pager() as out:
        out.write(b"Hello, World!\\n")
"""

from .config import PagerConfig, PagingPolicy, resolve_command
from .errors import (
    ClosedByConsumer,
    NoCommandConfigured,
    PagerClosed,
    PagerError,
    translate_error,
)
from .page import page, paged
from .sink import PagedSink, open_default, open_pager

__version__ = "0.1.0"

__all__ = [
    # Sink
    "PagedSink",
    "open_pager",
    "open_default",
    # Config
    "PagerConfig",
    "PagingPolicy",
    "resolve_command",
    # Errors
    "PagerError",
    "NoCommandConfigured",
    "ClosedByConsumer",
    "PagerClosed",
    "translate_error",
    # Helpers
    "page",
    "paged",
]
