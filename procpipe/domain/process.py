"""
Process descriptor.

Immutable description of a program and its arguments, not yet running.
"""

import os
from dataclasses import dataclass
from typing import Any

from procpipe.domain.errors import InvalidEncoding
from procpipe.domain.verbosity import Verbosity
from procpipe.utils.formatting import format_process


def _to_text(value: Any) -> str:
    """
    Convert an argument-like value to text.

    Raises:
        UnicodeError: If the value holds bytes that are not valid UTF-8
    """
    if isinstance(value, os.PathLike):
        value = os.fspath(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    text = value if isinstance(value, str) else str(value)
    # Lone surrogates (e.g. from surrogateescape decoding) are not text
    text.encode("utf-8")
    return text


@dataclass(frozen=True)
class Process:
    """
    A single program invocation.

    Arguments are materialized once at construction; the descriptor can be
    displayed or executed any number of times.

    Example:
        Process("cp", ["/path/to/source", "/path/to/target"]).execute()
    """

    program: str
    args: tuple[str, ...] = ()

    def __post_init__(self):
        """Normalize and validate program and arguments."""
        try:
            program = _to_text(self.program)
        except UnicodeError:
            raise InvalidEncoding(repr(self.program), None, self.program) from None
        if not program:
            raise ValueError("program cannot be empty")

        if isinstance(self.args, (str, bytes)):
            raise TypeError(
                f"args must be an iterable of arguments, not a single {type(self.args).__name__}"
            )

        args = []
        for index, value in enumerate(self.args):
            try:
                args.append(_to_text(value))
            except UnicodeError as e:
                raise InvalidEncoding(program, index, value) from e

        object.__setattr__(self, "program", program)
        object.__setattr__(self, "args", tuple(args))

    @classmethod
    def from_dict(cls, data: dict) -> 'Process':
        """Create a Process from ``{"program": ..., "args": [...]}``."""
        args = data.get("args") or ()
        if not isinstance(args, (list, tuple)):
            raise ValueError(
                f"args of {data['program']!r} must be a list, got {type(args).__name__}"
            )
        return cls(program=data["program"], args=tuple(args))

    def command(self):
        """
        Build an unspawned command handle for this process.

        Returns:
            CommandHandle with program and arguments bound
        """
        from procpipe.pipeline.command import CommandHandle

        return CommandHandle(self.program, self.args)

    def execute(self) -> int:
        """
        Run the process to completion with inherited stdio.

        Returns:
            Exit status of the process

        Raises:
            SpawnFailure: If the program could not be started
        """
        return self.command().status()

    def display(self, verbosity: Verbosity) -> str:
        """Textual form of this process under ``verbosity``."""
        return format_process(self, verbosity)

    def __str__(self) -> str:
        return format_process(self, Verbosity.verbose())
