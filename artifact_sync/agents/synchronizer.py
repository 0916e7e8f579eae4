"""
Commit-Push Synchronizer.

Commits the candidate artifacts and pushes them to the CI branch. A rejected
push usually means another job updated the branch after our diff was taken,
so the local commit is rebased onto the remote tip and pushed again, up to a
configured number of push attempts.
"""

from typing import List
import structlog

from artifact_sync.errors import (
    CommitError,
    GitCommandError,
    RebaseError,
    RetryExhaustedError,
    StagingError,
)
from artifact_sync.integrations.git_runner import GitRunner
from artifact_sync.models.state import RetryState

logger = structlog.get_logger()


class CommitPushSynchronizer:
    """Publishes local artifact changes to a remote branch."""

    def __init__(self, runner: GitRunner, remote: str = "origin", max_attempts: int = 3):
        """
        Initialize synchronizer.

        Args:
            runner: Git process runner
            remote: Remote to push to and rebase from
            max_attempts: Upper bound on push calls per commit_and_push
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.runner = runner
        self.remote = remote
        self.max_attempts = max_attempts

    def commit_and_push(self, paths: List[str], message: str, branch: str) -> RetryState:
        """
        Commit ``paths`` and push HEAD to ``branch``.

        Returns:
            Final RetryState (state == "succeeded")

        Raises:
            StagingError: resetting or staging the index failed
            CommitError: git commit failed, including "nothing to commit"
            RebaseError: conflict recovery failed
            RetryExhaustedError: every push attempt was rejected
        """
        if not branch:
            raise CommitError("no target branch to push to")

        try:
            self.runner.run("reset", "-q")
        except GitCommandError as e:
            raise StagingError("index", str(e), action="reset") from e

        try:
            self.runner.run("add", "--", *paths)
        except GitCommandError as e:
            raise StagingError(", ".join(paths), str(e)) from e

        try:
            self.runner.run("commit", "-m", message)
        except GitCommandError as e:
            logger.error("git_commit_failed", paths=paths, error=str(e))
            raise CommitError(f"git commit: {e}") from e

        logger.info("changes_committed", paths=paths, message=message)
        return self._push(branch)

    def _push(self, branch: str) -> RetryState:
        retry = RetryState(max_attempts=self.max_attempts)

        while retry.state not in ("succeeded", "exhausted"):
            if retry.state == "attempting":
                logger.info(
                    "push_attempt",
                    remote=self.remote,
                    branch=branch,
                    attempt=retry.attempt,
                    max_attempts=retry.max_attempts,
                )
                try:
                    self.runner.run("push", self.remote, f"HEAD:{branch}")
                except GitCommandError as e:
                    if retry.exhausted:
                        retry.state = "exhausted"
                        logger.error("push_retries_exhausted", attempts=retry.attempt, error=str(e))
                        raise RetryExhaustedError(retry.attempt, str(e)) from e
                    logger.warning("push_rejected", attempt=retry.attempt, error=str(e))
                    retry.state = "conflict-recovery"
                else:
                    retry.state = "succeeded"

            elif retry.state == "conflict-recovery":
                logger.info("push_failed_rebasing", remote=self.remote, branch=branch)
                try:
                    self.runner.run("pull", "--rebase", "--autostash", self.remote, branch)
                except GitCommandError as e:
                    logger.error("git_rebase_failed", branch=branch, error=str(e))
                    raise RebaseError(f"git pull rebase: {e}") from e
                retry.rebases += 1
                retry.attempt += 1
                retry.state = "attempting"
                logger.info("rebase_complete", rebases=retry.rebases)

        logger.info("push_succeeded", branch=branch, attempts=retry.attempt, rebases=retry.rebases)
        return retry
