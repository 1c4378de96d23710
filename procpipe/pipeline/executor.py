"""
PipelineExecutor - Batch runner for configured pipelines.

Builds every pipeline of a RunConfig, runs them in order and optionally
captures each final stdout into a run directory.
"""

import logging
import os
import time
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Optional

from tqdm import tqdm

from procpipe.domain.config import RunConfig
from procpipe.domain.errors import ProcpipeError
from procpipe.pipeline.command import CommandHandle
from procpipe.pipeline.engine import ProcessPipeline
from procpipe.utils.paths import OverwritePolicy, create_run_dir


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of one configured pipeline."""

    name: str
    returncode: Optional[int]
    elapsed_time_sec: float
    output_path: Optional[str] = None
    error: Optional[str] = None

    def __post_init__(self):
        """Validate pipeline result."""
        if self.elapsed_time_sec < 0:
            raise ValueError(f"elapsed_time_sec must be non-negative, got {self.elapsed_time_sec}")
        if self.returncode is None and not self.error:
            raise ValueError("error must be provided when returncode is None")

    @property
    def success(self) -> bool:
        return self.returncode == 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "returncode": self.returncode,
            "elapsed_time_sec": self.elapsed_time_sec,
            "output_path": self.output_path,
            "error": self.error,
        }


class PipelineExecutor:
    """
    High-level executor for a batch of pipelines.

    Responsible for:
    1. Building ProcessPipeline objects from configuration
    2. Preparing the run directory when output is captured
    3. Running each pipeline and recording its result
    """

    def __init__(self, config: RunConfig):
        self.config = config
        self.verbosity = config.display.verbosity
        self.logger = logging.getLogger(self.__class__.__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build_pipelines(self) -> list[tuple[str, ProcessPipeline]]:
        """Build one ProcessPipeline per configured entry, in config order."""
        return [(spec.name, ProcessPipeline(spec.stages)) for spec in self.config.pipelines]

    def describe(self) -> list[str]:
        """Display strings of every configured pipeline."""
        return [
            f"[{name}]\n{pipeline.display(self.verbosity)}"
            for name, pipeline in self.build_pipelines()
        ]

    def run(self) -> list[PipelineResult]:
        """
        Run every configured pipeline.

        Returns:
            One PipelineResult per pipeline, in config order

        Raises:
            DirectoryExistsError: If the run directory exists under the fail policy
        """
        run_dir = self._prepare_run_dir()
        pipelines = self.build_pipelines()

        self.logger.info(f"Running {len(pipelines)} pipeline(s) (display: {self.verbosity})")

        results = []
        progress_bar = tqdm(
            total=len(pipelines),
            desc="Pipelines",
            unit="pipeline",
            disable=not self.config.output.show_progress_bar,
        )
        with progress_bar as pbar:
            for name, pipeline in pipelines:
                results.append(self._run_one(name, pipeline, run_dir))
                pbar.update(1)

        return results

    def log_results(self, results: list[PipelineResult]):
        """Log final results."""
        self.logger.info("=" * 60)
        self.logger.info("Run summary")
        self.logger.info("=" * 60)

        for result in results:
            if result.error:
                self.logger.error(f"  {result.name}: FAILED ({result.error})")
            else:
                line = f"  {result.name}: exit {result.returncode} in {result.elapsed_time_sec:.2f}s"
                if result.output_path:
                    line += f" -> {result.output_path}"
                self.logger.info(line)

        succeeded = sum(1 for result in results if result.success)
        self.logger.info(f"{succeeded}/{len(results)} pipeline(s) succeeded")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _prepare_run_dir(self) -> Optional[str]:
        output = self.config.output
        if not output.captures_output:
            return None

        run_dir = create_run_dir(
            output.output_dir,
            self.config.run_name,
            OverwritePolicy(output.overwrite),
            timestamped=output.timestamped,
        )
        self.logger.info(f"Capturing output in: {run_dir}")
        return run_dir

    def _final_command(self, pipeline: ProcessPipeline) -> CommandHandle:
        # A single stage has nothing to pipe; it runs on its own
        if len(pipeline) == 1:
            return pipeline.stages[0].command()
        return pipeline.pipe()

    def _run_one(self, name: str, pipeline: ProcessPipeline, run_dir: Optional[str]) -> PipelineResult:
        self.logger.info(f"Running pipeline '{name}':\n{pipeline.display(self.verbosity)}")
        output_path = os.path.join(run_dir, f"{name}.out") if run_dir else None
        start = time.monotonic()

        try:
            with ExitStack() as stack:
                # Opened before any stage is spawned
                sink = stack.enter_context(open(output_path, "wb")) if output_path else None
                command = stack.enter_context(self._final_command(pipeline))
                if sink is not None:
                    command.bind_stdout(sink)
                returncode = command.status()
        except (ProcpipeError, OSError) as e:
            elapsed = time.monotonic() - start
            self.logger.error(f"Pipeline '{name}' failed: {e}")
            return PipelineResult(
                name=name,
                returncode=None,
                elapsed_time_sec=elapsed,
                error=str(e),
            )

        elapsed = time.monotonic() - start
        if returncode != 0:
            self.logger.warning(f"Pipeline '{name}' exited with status {returncode}")

        return PipelineResult(
            name=name,
            returncode=returncode,
            elapsed_time_sec=elapsed,
            output_path=output_path,
        )
