"""
Human-readable formatting of processes and pipelines.

Pure functions: they take the value and a verbosity and return a string.
"""

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from procpipe.domain.process import Process
    from procpipe.domain.verbosity import Verbosity

TRUNCATION_MARKER = " ..."
STAGE_SEPARATOR = "\n\t| "


def format_process(process: "Process", verbosity: "Verbosity") -> str:
    """
    Format a process as ``program arg1 arg2 ...``.

    Args:
        process: Process to format
        verbosity: Verbose shows every argument; Brief(n) shows the first n
            and appends " ..." if any were omitted

    Returns:
        Display string

    Example:
        format_process(Process("ls", ["-l", "/path"]), Verbosity.brief(1))
        -> "ls -l ..."
    """
    args = process.args
    if verbosity.is_verbose:
        return " ".join([process.program, *args])

    text = " ".join([process.program, *args[:verbosity.max_args]])
    if verbosity.max_args < len(args):
        text += TRUNCATION_MARKER
    return text


def format_pipeline(stages: Iterable["Process"], verbosity: "Verbosity") -> str:
    """
    Format pipeline stages one per line, joined by a tab-indented pipe marker.

    Example:
        "echo -e a\\nb\\nc\\n\\t| grep b"
    """
    return STAGE_SEPARATOR.join(format_process(stage, verbosity) for stage in stages)
