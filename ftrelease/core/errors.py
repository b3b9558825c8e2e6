"""Exit codes for the release CLI.

Values are process exit codes and must stay stable, CI jobs branch on them:
- 0: Success
- 1: User error (bad version string, unknown flavor)
- 2: Environment error (invalid settings file)
- 3: Build error (native tree regeneration or compilation failed)
- 5: I/O error (JSON document, patched file or native tree not writable)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    IO_ERROR = 5
