"""
Pipeline execution layer.

Command handles, the pipe-wiring engine and the batch executor.
"""

from .command import CommandHandle, CommandOutput
from .engine import ProcessPipeline, chain
from .executor import PipelineExecutor, PipelineResult

__all__ = [
    "CommandHandle",
    "CommandOutput",
    "ProcessPipeline",
    "chain",
    "PipelineExecutor",
    "PipelineResult",
]
