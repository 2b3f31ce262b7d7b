"""Common constants for pagedsink.

This module defines the defaults shared by the resolver, the sink and the CLI.
"""

# Environment variable holding the pager command
DEFAULT_ENV_VAR = "PAGER"

# Environment variable selecting the paging policy (auto/always/never)
POLICY_ENV_VAR = "PAGEDSINK_POLICY"

# Shell used to run the pager command as `<shell> -c <command>`
DEFAULT_SHELL = "sh"

# Read size used when copying input streams through a sink
CHUNK_SIZE = 64 * 1024

# Producer info - identifies the implementation in error envelopes
PRODUCER = {
    "name": "pagedsink",
    "version": "0.1.0",
}
