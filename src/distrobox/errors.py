"""Error taxonomy shared by every distrobox operation.

Each error carries the process exit status the CLI reports for it:
0 success, 1 generic failure or invalid arguments, 126 wrong execution
context, 127 missing dependency or missing export/clone target.
"""

from typing import Optional


class DistroboxError(Exception):
    """Base error for all distrobox operations."""

    exit_code = 1

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class PreconditionError(DistroboxError):
    """Conflicting or missing request fields."""


class WrongContextError(PreconditionError):
    """Operation invoked from the wrong execution context."""

    exit_code = 126


class NotFoundError(DistroboxError):
    """No matching descriptor, unit, binary, tool or source container."""

    exit_code = 127


class StateConflictError(DistroboxError):
    """The target exists but is in a state that forbids the operation."""


class SourceRunningError(StateConflictError):
    """Clone source container is running."""


class NotExportedError(StateConflictError):
    """Host artifact is missing or does not carry the distrobox marker."""


class ExternalToolError(DistroboxError):
    """The container manager reported a failure."""

    def __init__(self, message: str, exit_code: Optional[int] = None, stderr: str = ""):
        super().__init__(message, exit_code)
        self.stderr = stderr


class CommitFailedError(ExternalToolError):
    """Committing the clone source to an image failed."""
