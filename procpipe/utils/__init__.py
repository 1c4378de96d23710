"""
Utility modules for procpipe.
"""

from .formatting import format_process, format_pipeline
from .paths import OverwritePolicy, ensure_directory, create_run_dir

__all__ = [
    "format_process",
    "format_pipeline",
    "OverwritePolicy",
    "ensure_directory",
    "create_run_dir",
]
