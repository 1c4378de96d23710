"""
Path utilities for captured run output.

Handles directory creation under an overwrite policy and timestamped
run directories.
"""

import logging
import os
from datetime import datetime
from enum import Enum

from procpipe.domain.errors import DirectoryExistsError

logger = logging.getLogger(__name__)


class OverwritePolicy(Enum):
    """What to do when a target directory already exists."""

    FORCE = "force"
    FAIL = "fail"


def ensure_directory(path: str, policy: OverwritePolicy) -> str:
    """
    Create a directory, including missing parents.

    Args:
        path: Directory to create
        policy: FORCE reuses an existing directory; FAIL refuses to

    Returns:
        The path that was created or reused

    Raises:
        DirectoryExistsError: If the path exists and policy is FAIL
    """
    if policy is OverwritePolicy.FAIL:
        try:
            os.makedirs(path)
        except FileExistsError:
            raise DirectoryExistsError(path) from None
    else:
        os.makedirs(path, exist_ok=True)

    logger.debug(f"Directory ready: {path} (policy={policy.value})")
    return path


def run_dir_name(run_name: str, timestamped: bool = False) -> str:
    """
    Name of the directory for the current run.

    Example:
        run_dir_name("test_run", timestamped=True)
        -> "test_run_20260216_211730"
    """
    if not timestamped:
        return run_name
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{run_name}_{timestamp}"


def create_run_dir(
    base_output_dir: str,
    run_name: str,
    policy: OverwritePolicy,
    timestamped: bool = False,
) -> str:
    """
    Create the directory receiving captured output for a run.

    Args:
        base_output_dir: Base output directory (e.g., "./output")
        run_name: Run name used as the directory name
        policy: Overwrite policy applied to the run directory
        timestamped: Append a timestamp to the directory name

    Returns:
        Path to the run directory
    """
    run_dir = os.path.join(base_output_dir, run_dir_name(run_name, timestamped))
    return ensure_directory(run_dir, policy)
