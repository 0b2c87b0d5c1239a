"""Process exit codes for the patchwatch CLI.

The numeric values are part of the command-line contract (scripts and CI jobs
branch on them) and must stay stable:
- 0: Success, nothing to report
- 1: User error (bad arguments)
- 2: Configuration error (missing or invalid config file)
- 4: Network error (at least one project could not be checked)
- 10: A newer patch is available (only with ``check --exit-code``)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    NETWORK_ERROR = 4
    UPDATES_AVAILABLE = 10
