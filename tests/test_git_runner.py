"""
Process runner tests against real git and sh binaries.
"""

import io
import shutil
import time

import pytest

from artifact_sync.errors import GitCommandError
from artifact_sync.integrations.git_runner import GitRunner
from conftest import git, requires_git


@requires_git
def test_run_returns_stdout(git_repo):
    runner = GitRunner(cwd=str(git_repo))
    assert runner.run("rev-parse", "--abbrev-ref", "HEAD").strip() == "main"


@requires_git
def test_run_raises_on_non_zero_exit(git_repo):
    runner = GitRunner(cwd=str(git_repo))
    with pytest.raises(GitCommandError) as exc_info:
        runner.run("rev-parse", "--verify", "no-such-ref")
    assert exc_info.value.subcommand == "rev-parse"
    assert exc_info.value.returncode != 0


def test_run_raises_when_executable_missing(tmp_path):
    runner = GitRunner(cwd=str(tmp_path), executable="definitely-not-git-binary")
    with pytest.raises(GitCommandError) as exc_info:
        runner.run("status")
    assert exc_info.value.returncode is None


@requires_git
def test_iter_lines_yields_output_lines(git_repo):
    runner = GitRunner(cwd=str(git_repo))
    files = list(runner.iter_lines("ls-files"))
    assert files == ["README.md", "action.yml"]


@requires_git
def test_iter_lines_raises_after_output_on_failure(git_repo):
    runner = GitRunner(cwd=str(git_repo))
    lines = runner.iter_lines("log", "no-such-ref")
    with pytest.raises(GitCommandError):
        list(lines)


@requires_git
def test_config_identity(git_repo):
    runner = GitRunner(cwd=str(git_repo))
    runner.config_identity("bot", "bot@example.com")
    assert git(git_repo, "config", "user.name").strip() == "bot"
    assert git(git_repo, "config", "user.email").strip() == "bot@example.com"


requires_sh = pytest.mark.skipif(shutil.which("sh") is None, reason="sh not installed")


@requires_sh
def test_run_timeout_kills_child(tmp_path):
    runner = GitRunner(cwd=str(tmp_path), timeout=1, executable="sh")
    started = time.monotonic()
    with pytest.raises(GitCommandError) as exc_info:
        runner.run("-c", "sleep 5")
    assert exc_info.value.returncode is None
    assert "timed out" in str(exc_info.value)
    assert time.monotonic() - started < 4


@requires_sh
def test_iter_lines_timeout_kills_child_holding_stdout(tmp_path):
    runner = GitRunner(cwd=str(tmp_path), timeout=1, executable="sh")
    lines = []
    started = time.monotonic()
    with pytest.raises(GitCommandError) as exc_info:
        for line in runner.iter_lines("-c", "echo hunk; sleep 5; echo more"):
            lines.append(line)
    assert exc_info.value.returncode is None
    assert "timed out" in str(exc_info.value)
    assert lines == ["hunk"]
    assert time.monotonic() - started < 4


@requires_sh
def test_iter_lines_without_timeout_reads_everything(tmp_path):
    runner = GitRunner(cwd=str(tmp_path), executable="sh")
    assert list(runner.iter_lines("-c", "echo one; echo two")) == ["one", "two"]


@requires_sh
def test_iter_lines_survives_large_stderr_without_passthrough(tmp_path):
    # StringIO has no fileno, so stderr cannot be handed to the child directly
    runner = GitRunner(cwd=str(tmp_path), timeout=20, stderr=io.StringIO(), executable="sh")
    script = "i=0; while [ $i -lt 3000 ]; do echo 'noise noise noise noise noise noise' >&2; i=$((i+1)); done; echo done"
    assert list(runner.iter_lines("-c", script)) == ["done"]
