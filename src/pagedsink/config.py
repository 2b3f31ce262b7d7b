"""Pager configuration and command resolution.

The pager command is resolved in a fixed order: an explicit command, then
the configured environment variable, then failure. The environment is read
through an injectable lookup so resolution can be exercised without touching
the process environment.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Mapping, Optional

from .common import DEFAULT_ENV_VAR, DEFAULT_SHELL, POLICY_ENV_VAR
from .errors import NoCommandConfigured

logger = logging.getLogger(__name__)

EnvLookup = Callable[[str], Optional[str]]


class PagingPolicy(Enum):
    """Paging mode."""

    AUTO = "auto"  # Page if TTY, write through otherwise
    ALWAYS = "always"  # Always spawn the pager
    NEVER = "never"  # Never spawn the pager


@dataclass
class PagerConfig:
    """Settings used when opening a paged sink.

    Attributes:
        env_var: Environment variable holding the default pager command.
        policy: Bypass policy.
        shell: Shell used to run the command (`<shell> -c <command>`).
        lookup: Environment lookup capability.
    """

    env_var: str = DEFAULT_ENV_VAR
    policy: PagingPolicy = PagingPolicy.AUTO
    shell: str = DEFAULT_SHELL
    lookup: EnvLookup = field(default=os.environ.get, repr=False)

    @classmethod
    def from_environ(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        *,
        env_var: str = DEFAULT_ENV_VAR,
        policy: Optional[PagingPolicy] = None,
    ) -> "PagerConfig":
        """Build a config whose lookup and policy come from an environment.

        Args:
            environ: Environment mapping (default: os.environ).
            env_var: Variable holding the pager command.
            policy: Explicit policy; the policy variable is only read
                when this is None.

        Returns:
            The config.

        Raises:
            ValueError: If the policy variable holds an unknown value.
        """
        if environ is None:
            environ = os.environ

        if policy is None:
            policy = PagingPolicy.AUTO
            raw = (environ.get(POLICY_ENV_VAR) or "").strip().lower()
            if raw:
                policy = PagingPolicy(raw)

        return cls(env_var=env_var, policy=policy, lookup=environ.get)


def resolve_command(
    explicit: Optional[str],
    lookup: EnvLookup,
    env_var: str = DEFAULT_ENV_VAR,
) -> str:
    """Resolve the pager command to run.

    Args:
        explicit: Command supplied by the caller; empty or None to fall back.
        lookup: Environment lookup used for the fallback.
        env_var: Variable consulted by the fallback.

    Returns:
        The command string.

    Raises:
        NoCommandConfigured: If neither source provides a command.
    """
    command = (explicit or "").strip()
    if command:
        return command

    command = (lookup(env_var) or "").strip()
    if command:
        logger.debug("Pager command from $%s: %s", env_var, command)
        return command

    raise NoCommandConfigured(env_var)
