"""
Domain models for procpipe.

Immutable process descriptors, display settings, errors and configuration.
"""

from .errors import (
    ProcpipeError,
    InvalidEncoding,
    SpawnFailure,
    PipeAllocationFailure,
    PreconditionViolation,
    DirectoryExistsError,
)
from .verbosity import Verbosity, verbose_if
from .process import Process
from .config import RunConfig, PipelineSpec, DisplayConfig, OutputConfig

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
    "RunConfig",
    "PipelineSpec",
    "DisplayConfig",
    "OutputConfig",
]
