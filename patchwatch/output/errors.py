"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from patchwatch.core.errors import ErrorCode
from patchwatch.output.console import Style

if TYPE_CHECKING:
    from patchwatch.core.config import ConfigError
    from patchwatch.output.console import ConsoleProtocol
    from patchwatch.releases.errors import FetchError
    from patchwatch.releases.model import TrackedProject
    from patchwatch.releases.service import UpdateCheck

__all__ = ["print_config_error", "print_fetch_error", "check_exit_code"]


def print_fetch_error(
    project: TrackedProject, error: FetchError, console: ConsoleProtocol
) -> None:
    console.error(f"could not check for updates for {project.name} ({project.slug})")
    match error.kind:
        case "transport":
            console.print(f"  network: {error}", Style.DIM)
        case "decode":
            console.print(f"  unexpected response: {error}", Style.DIM)


def print_config_error(error: ConfigError, console: ConsoleProtocol) -> None:
    console.error(f"invalid configuration: {error}")
    console.print("hint: see `patchwatch check --help` for the config format", Style.DIM)


def check_exit_code(checks: Sequence[UpdateCheck], *, exit_on_updates: bool) -> int:
    """Exit code for a finished ``check`` run.

    Fetch failures win over available updates so that CI notices a check that
    did not actually happen.
    """
    if any(c.error is not None for c in checks):
        return int(ErrorCode.NETWORK_ERROR)
    if exit_on_updates and any(c.update is not None for c in checks):
        return int(ErrorCode.UPDATES_AVAILABLE)
    return int(ErrorCode.OK)
