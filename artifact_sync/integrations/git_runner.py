"""
Git process runner.

The only place in the package that spawns child processes. Standard error of
every git call is passed straight through to our own stderr so CI logs show
git's progress and rejection messages as they happen.
"""

import os
import signal
import subprocess
import sys
import tempfile
import threading
from typing import IO, Iterator, List, Optional

import structlog

from artifact_sync.errors import GitCommandError

logger = structlog.get_logger()


class GitRunner:
    """Runs ``git <subcommand> ...`` against a working tree."""

    def __init__(
        self,
        cwd: Optional[str] = None,
        timeout: Optional[float] = None,
        stderr: Optional[IO] = None,
        executable: str = "git",
    ):
        """
        Initialize runner.

        Args:
            cwd: Working tree to run in (defaults to the process cwd)
            timeout: Seconds before a child is killed; None waits forever
            stderr: Stream git's stderr is forwarded to (defaults to sys.stderr)
            executable: git binary to invoke
        """
        self.cwd = cwd
        self.timeout = timeout
        self.stderr = stderr
        self.executable = executable

    def _stderr_target(self):
        # pytest and friends replace sys.stderr with objects lacking a fileno
        stream = self.stderr if self.stderr is not None else sys.stderr
        try:
            stream.fileno()
        except (AttributeError, OSError, ValueError):
            return None
        return stream

    @staticmethod
    def _kill(proc: subprocess.Popen) -> None:
        # git forks helpers that inherit stdout; take down the whole group
        if os.name == "posix":
            try:
                os.killpg(proc.pid, signal.SIGKILL)
                return
            except OSError:
                pass
        proc.kill()

    def _spawn(self, subcommand: str, args: List[str], stderr: Optional[IO] = None) -> subprocess.Popen:
        cmd = [self.executable, subcommand, *args]
        logger.debug("git_command", command=" ".join(cmd), cwd=self.cwd)
        if stderr is None:
            stderr = self._stderr_target()
        try:
            return subprocess.Popen(
                cmd,
                cwd=self.cwd,
                stdout=subprocess.PIPE,
                stderr=stderr if stderr is not None else subprocess.PIPE,
                text=True,
                start_new_session=os.name == "posix",
            )
        except OSError as e:
            raise GitCommandError(subcommand, args, None, str(e)) from e

    def run(self, subcommand: str, *args: str) -> str:
        """
        Run a git subcommand and return its full standard output.

        Raises:
            GitCommandError: if git exits non-zero, times out or cannot start
        """
        arg_list = list(args)
        proc = self._spawn(subcommand, arg_list)
        try:
            stdout, stderr = proc.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            self._kill(proc)
            proc.communicate()
            logger.error("git_command_timeout", subcommand=subcommand, timeout=self.timeout)
            raise GitCommandError(
                subcommand, arg_list, None, f"timed out after {self.timeout}s"
            ) from e

        if stderr:
            sys.stderr.write(stderr)
        if proc.returncode != 0:
            raise GitCommandError(subcommand, arg_list, proc.returncode, stderr or "")
        return stdout

    def iter_lines(self, subcommand: str, *args: str) -> Iterator[str]:
        """
        Run a git subcommand and yield its standard output line by line.

        The exit status is checked once the output is exhausted, so a failure
        surfaces as ``GitCommandError`` from the final ``next()`` call. With a
        timeout set, the child is killed once the deadline passes, even while
        it is still holding stdout open.
        """
        arg_list = list(args)
        # stderr goes to a temp file when it cannot be passed through, so a
        # chatty child never blocks on a full pipe while we drain stdout
        spool = None
        if self._stderr_target() is None:
            spool = tempfile.TemporaryFile(mode="w+")
        try:
            proc = self._spawn(subcommand, arg_list, stderr=spool)
        except GitCommandError:
            if spool is not None:
                spool.close()
            raise

        timed_out = threading.Event()

        def kill_on_deadline():
            if proc.poll() is None:
                timed_out.set()
                self._kill(proc)

        timer = None
        if self.timeout is not None:
            timer = threading.Timer(self.timeout, kill_on_deadline)
            timer.daemon = True
            timer.start()

        stderr = ""
        try:
            for line in proc.stdout:
                if timed_out.is_set():
                    break
                yield line.rstrip("\n")
            returncode = proc.wait()
        finally:
            if timer is not None:
                timer.cancel()
            if proc.poll() is None:
                self._kill(proc)
                proc.wait()
            proc.stdout.close()
            if spool is not None:
                spool.seek(0)
                stderr = spool.read()
                spool.close()

        if timed_out.is_set():
            logger.error("git_command_timeout", subcommand=subcommand, timeout=self.timeout)
            raise GitCommandError(
                subcommand, arg_list, None, f"timed out after {self.timeout}s"
            )
        if stderr:
            sys.stderr.write(stderr)
        if returncode != 0:
            raise GitCommandError(subcommand, arg_list, returncode, stderr)

    def config_identity(self, name: str, email: str) -> None:
        """Configure the committer identity for this working tree."""
        self.run("config", "user.name", name)
        self.run("config", "user.email", email)
        logger.info("git_identity_configured", name=name, email=email)
