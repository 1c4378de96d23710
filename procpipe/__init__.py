"""
procpipe - describe, display and execute OS processes and process pipelines.
"""

from .domain import (
    ProcpipeError,
    InvalidEncoding,
    SpawnFailure,
    PipeAllocationFailure,
    PreconditionViolation,
    DirectoryExistsError,
    Verbosity,
    verbose_if,
    Process,
)
from .utils import format_process, format_pipeline, OverwritePolicy, ensure_directory
from .pipeline import CommandHandle, CommandOutput, ProcessPipeline, chain

__version__ = "0.1.0"

__all__ = [
    "ProcpipeError",
    "InvalidEncoding",
    "SpawnFailure",
    "PipeAllocationFailure",
    "PreconditionViolation",
    "DirectoryExistsError",
    "Verbosity",
    "verbose_if",
    "Process",
    "format_process",
    "format_pipeline",
    "OverwritePolicy",
    "ensure_directory",
    "CommandHandle",
    "CommandOutput",
    "ProcessPipeline",
    "chain",
]
