"""
Error taxonomy for the synchronization engine.

Every class except ``GitCommandError`` is fatal to a run.
"""

from typing import List, Optional


class GitCommandError(Exception):
    """A git child process exited non-zero or could not be started."""

    def __init__(
        self,
        subcommand: str,
        args: List[str],
        returncode: Optional[int],
        message: str = "",
    ):
        self.subcommand = subcommand
        self.args_list = list(args)
        self.returncode = returncode
        self.message = message.strip()
        detail = f": {self.message}" if self.message else ""
        super().__init__(
            f"git {subcommand} failed (exit {returncode}){detail}"
        )


class SyncError(Exception):
    """Base class for fatal synchronization errors."""


class StagingError(SyncError):
    """Adding a path to (or resetting) the index failed."""

    def __init__(self, path: str, reason: str, action: str = "add"):
        self.path = path
        super().__init__(f"git {action} for {path}: {reason}")


class DiffError(SyncError):
    """Computing the staged diff of a path failed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"git diff for {path}: {reason}")


class CommitError(SyncError):
    pass


class RebaseError(SyncError):
    pass


class RetryExhaustedError(SyncError):
    """Push was still rejected after the configured number of attempts."""

    def __init__(self, attempts: int, reason: str):
        self.attempts = attempts
        super().__init__(f"push failed {attempts} times: {reason}")


class ReportingError(SyncError):
    pass
