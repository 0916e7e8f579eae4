"""
Staging & Diff Engine.

Computes hunk-only diffs between candidate artifacts and HEAD. ``git diff
--staged`` is the only form that reports both modified and brand-new files,
so each path is staged for the duration of the diff and reset afterwards.
"""

from contextlib import contextmanager
from typing import Iterable, Iterator, List
import structlog

from artifact_sync.errors import DiffError, GitCommandError, StagingError
from artifact_sync.integrations.git_runner import GitRunner
from artifact_sync.templates import render_diff_section

logger = structlog.get_logger()

# Extended header lines git prints before the first hunk
PREAMBLE_PREFIXES = (
    "diff --git ",
    "index ",
    "--- ",
    "+++ ",
    "new file mode ",
    "deleted file mode ",
    "old mode ",
    "new mode ",
    "similarity index ",
    "dissimilarity index ",
    "rename from ",
    "rename to ",
    "copy from ",
    "copy to ",
)


def strip_preamble(lines: Iterable[str]) -> List[str]:
    """Drop the diff header, keeping everything from the first hunk on."""
    body: List[str] = []
    in_header = True
    for line in lines:
        if in_header and line.startswith(PREAMBLE_PREFIXES):
            continue
        in_header = False
        body.append(line)
    return body


class StagingDiffEngine:
    """Stages candidate paths and reports how they differ from HEAD."""

    def __init__(self, runner: GitRunner):
        self.runner = runner

    @contextmanager
    def staged(self, path: str) -> Iterator[None]:
        """
        Keep ``path`` staged inside the block and unstage it on every exit.

        Raises:
            StagingError: if ``git add`` fails
        """
        try:
            try:
                self.runner.run("add", "--", path)
            except GitCommandError as e:
                logger.error("git_add_failed", path=path, error=str(e))
                raise StagingError(path, str(e)) from e
            yield
        finally:
            self._reset(path)

    def _reset(self, path: str) -> None:
        try:
            self.runner.run("reset", "-q", "--", path)
        except GitCommandError as e:
            # Best effort; never masks the diff result
            logger.warning("git_reset_failed", path=path, error=str(e))

    def stage_and_diff(self, path: str) -> str:
        """
        Return the hunk-only diff of ``path`` against HEAD.

        An empty string means the path matches the committed version.

        Raises:
            StagingError: if the path could not be staged
            DiffError: if git diff failed
        """
        with self.staged(path):
            try:
                lines = self.runner.iter_lines("diff", "--staged", "--no-color", "--", path)
                diff = "\n".join(strip_preamble(lines))
            except GitCommandError as e:
                logger.error("git_diff_failed", path=path, error=str(e))
                raise DiffError(path, str(e)) from e

        logger.info("diff_computed", path=path, changed=bool(diff), lines=diff.count("\n") + 1 if diff else 0)
        return diff

    def aggregate_diff(self, paths: Iterable[str]) -> str:
        """Concatenate the labelled non-empty diffs of all paths."""
        sections = []
        for path in paths:
            diff = self.stage_and_diff(path)
            if diff:
                sections.append(render_diff_section(path, diff))
        return "".join(sections)
