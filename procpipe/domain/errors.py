"""
Error taxonomy for process and pipeline execution.

OS-level failures are chained from the underlying ``OSError`` so the
underlying errno stays available on ``__cause__``.
"""

from typing import Optional


class ProcpipeError(Exception):
    """Base class for all recoverable procpipe errors."""


class InvalidEncoding(ProcpipeError, ValueError):
    """An argument could not be interpreted as text."""

    def __init__(self, program: str, index: Optional[int], value: object):
        self.program = program
        self.index = index
        self.value = value
        if index is None:
            message = f"program name is not valid text: {value!r}"
        else:
            message = f"argument {index} of {program!r} is not valid text: {value!r}"
        super().__init__(message)


class SpawnFailure(ProcpipeError):
    """The OS refused to start a program."""

    def __init__(self, program: str, reason: str, stage: Optional[int] = None):
        self.program = program
        self.reason = reason
        self.stage = stage
        location = f" (pipeline stage {stage})" if stage is not None else ""
        super().__init__(f"failed to spawn {program!r}{location}: {reason}")


class PipeAllocationFailure(ProcpipeError):
    """The OS could not allocate an anonymous pipe."""

    def __init__(self, link: int, reason: str):
        self.link = link
        self.reason = reason
        super().__init__(
            f"failed to allocate pipe between stages {link} and {link + 1}: {reason}"
        )


class PreconditionViolation(AssertionError):
    """A pipeline operation was invoked on a pipeline that cannot support it."""


class DirectoryExistsError(ProcpipeError, FileExistsError):
    """Target directory already exists and the overwrite policy forbids reuse."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"directory already exists: {path} (use the force policy to reuse it)"
        )
