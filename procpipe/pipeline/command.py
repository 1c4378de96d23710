"""
Unspawned OS command handles.

A CommandHandle binds a program, its arguments and optional stdio
redirections. Nothing runs until spawn(), status() or output() is called.
Pipe file descriptors bound with ``owned=True`` belong to the handle and are
closed in the parent as soon as the child has been started.
"""

import logging
import os
import subprocess
import time
from dataclasses import dataclass
from typing import IO, Iterable, Optional, Union

from procpipe.domain.errors import SpawnFailure

logger = logging.getLogger(__name__)

# None inherits the parent's stream
Redirect = Union[None, int, IO]

TERMINATE_TIMEOUT_SEC = 5.0
REAP_TIMEOUT_SEC = 1.0


@dataclass(frozen=True)
class CommandOutput:
    """Exit status and captured streams of a finished command."""

    returncode: int
    stdout: bytes
    stderr: bytes

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def text(self) -> str:
        """Captured stdout decoded as UTF-8."""
        return self.stdout.decode("utf-8")


class CommandHandle:
    """
    A command that has not been spawned yet.

    Attributes:
        program: Executable name or path
        args: Arguments passed to the program
        stage: Position in a pipeline, if the handle belongs to one
        upstream: Already-spawned processes feeding this handle's stdin
    """

    def __init__(self, program: str, args: Iterable[str] = (), stage: Optional[int] = None):
        self.program = program
        self.args = list(args)
        self.stage = stage
        self.stdin: Redirect = None
        self.stdout: Redirect = None
        self.stderr: Redirect = None
        self.upstream: list[subprocess.Popen] = []
        self._owned_fds: set[int] = set()

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def __enter__(self) -> 'CommandHandle':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def bind_stdin(self, target: Redirect, owned: bool = False) -> 'CommandHandle':
        """
        Redirect standard input.

        Args:
            target: File descriptor, file object, subprocess constant, or None
            owned: Close ``target`` (a descriptor) once the child is spawned
        """
        self._release(self.stdin)
        self.stdin = target
        if owned:
            self._owned_fds.add(target)
        return self

    def bind_stdout(self, target: Redirect, owned: bool = False) -> 'CommandHandle':
        """Redirect standard output. See bind_stdin."""
        self._release(self.stdout)
        self.stdout = target
        if owned:
            self._owned_fds.add(target)
        return self

    def bind_stderr(self, target: Redirect) -> 'CommandHandle':
        self.stderr = target
        return self

    def close(self):
        """Close every descriptor owned by this handle."""
        while self._owned_fds:
            os.close(self._owned_fds.pop())

    def _release(self, target: Redirect):
        if isinstance(target, int) and target in self._owned_fds:
            self._owned_fds.discard(target)
            os.close(target)

    def spawn(self, **streams) -> subprocess.Popen:
        """
        Start the command without waiting for it.

        Args:
            **streams: Per-call overrides for stdin, stdout or stderr

        Returns:
            The running child process

        Raises:
            SpawnFailure: If the OS could not start the program
        """
        redirects = {"stdin": self.stdin, "stdout": self.stdout, "stderr": self.stderr}
        redirects.update(streams)

        try:
            process = subprocess.Popen(self.argv, **redirects)
        except OSError as e:
            if self.upstream:
                logger.warning(
                    f"Failed to spawn {self.program!r}, terminating {len(self.upstream)} upstream stage(s)"
                )
                terminate_processes(self.upstream)
            raise SpawnFailure(self.program, e.strerror or str(e), stage=self.stage) from e
        finally:
            # The child holds its own copies now
            self.close()

        logger.debug(f"Spawned {self.program!r} (pid={process.pid}, stage={self.stage})")
        return process

    def status(self) -> int:
        """
        Run to completion with the configured redirections.

        Returns:
            Exit status of this command only
        """
        process = self.spawn()
        returncode = process.wait()
        self._reap_upstream()
        return returncode

    def output(self) -> CommandOutput:
        """
        Run to completion capturing stdout and stderr.

        Streams that are already bound are left as they are. An unbound stdin
        is connected to the null device.
        """
        streams = {}
        if self.stdin is None:
            streams["stdin"] = subprocess.DEVNULL
        if self.stdout is None:
            streams["stdout"] = subprocess.PIPE
        if self.stderr is None:
            streams["stderr"] = subprocess.PIPE

        process = self.spawn(**streams)
        stdout, stderr = process.communicate()
        self._reap_upstream()
        return CommandOutput(
            returncode=process.returncode,
            stdout=stdout or b"",
            stderr=stderr or b"",
        )

    def _reap_upstream(self, timeout: float = REAP_TIMEOUT_SEC):
        # Upstream statuses are not checked, only collected. Stages that
        # outlive the deadline are left running.
        deadline = time.monotonic() + timeout
        for process in self.upstream:
            try:
                process.wait(timeout=max(0.0, deadline - time.monotonic()))
            except subprocess.TimeoutExpired:
                logger.debug(f"Upstream pid {process.pid} still running, not waiting for it")

    def __repr__(self) -> str:
        return f"CommandHandle({self.argv!r}, stage={self.stage})"


def terminate_processes(processes: list[subprocess.Popen], timeout: float = TERMINATE_TIMEOUT_SEC):
    """
    Terminate processes, escalating to kill after ``timeout`` seconds.

    Already-finished processes are only reaped.
    """
    for process in processes:
        if process.poll() is None:
            logger.debug(f"Terminating pid {process.pid}")
            process.terminate()

    for process in processes:
        try:
            process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning(f"Process {process.pid} did not terminate, killing")
            process.kill()
            process.wait()
