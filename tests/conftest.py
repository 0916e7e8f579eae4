"""
Shared fixtures: a scripted git runner and throwaway git repositories.
"""

import os
import shutil
import subprocess
import sys
from typing import Dict, List

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from artifact_sync.errors import GitCommandError


class FakeRunner:
    """Records git calls and fails them on demand."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.outputs: Dict[str, str] = {}
        self._failures: Dict[str, int] = {}

    def fail(self, subcommand: str, times: int = 1):
        self._failures[subcommand] = self._failures.get(subcommand, 0) + times

    def _call(self, subcommand, args):
        self.calls.append((subcommand, *args))
        if self._failures.get(subcommand, 0) > 0:
            self._failures[subcommand] -= 1
            raise GitCommandError(subcommand, list(args), 1, f"{subcommand} rejected")
        return self.outputs.get(subcommand, "")

    def run(self, subcommand, *args):
        return self._call(subcommand, args)

    def iter_lines(self, subcommand, *args):
        return iter(self._call(subcommand, args).splitlines())

    def config_identity(self, name, email):
        self.run("config", "user.name", name)
        self.run("config", "user.email", email)

    def count(self, subcommand: str) -> int:
        return sum(1 for call in self.calls if call[0] == subcommand)

    def subcommands(self) -> List[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def fake_runner():
    return FakeRunner()


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def git(cwd, *args) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        check=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    return result.stdout


def _clone(remote, target):
    git(target.parent, "clone", "-q", str(remote), target.name)
    git(target, "config", "user.name", "Test User")
    git(target, "config", "user.email", "test@example.com")
    git(target, "config", "commit.gpgsign", "false")
    return target


@pytest.fixture
def git_remote(tmp_path):
    """Bare remote seeded with one commit on main holding action.yml."""
    remote = tmp_path / "remote.git"
    git(tmp_path, "init", "-q", "--bare", str(remote))
    git(remote, "symbolic-ref", "HEAD", "refs/heads/main")

    seed = tmp_path / "seed"
    seed.mkdir()
    git(seed, "init", "-q")
    git(seed, "symbolic-ref", "HEAD", "refs/heads/main")
    git(seed, "config", "user.name", "Seed")
    git(seed, "config", "user.email", "seed@example.com")
    git(seed, "config", "commit.gpgsign", "false")
    (seed / "action.yml").write_text("name: demo\nruns:\n  using: docker\n")
    (seed / "README.md").write_text("demo\n")
    git(seed, "add", ".")
    git(seed, "commit", "-q", "-m", "initial")
    git(seed, "remote", "add", "origin", str(remote))
    git(seed, "push", "-q", "origin", "HEAD:main")
    return remote


@pytest.fixture
def git_repo(tmp_path, git_remote):
    """Working clone of git_remote checked out on main."""
    return _clone(git_remote, tmp_path / "work")


@pytest.fixture
def other_clone(tmp_path, git_remote):
    """A second clone standing in for a concurrent CI job."""
    return _clone(git_remote, tmp_path / "other")
