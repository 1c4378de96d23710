"""
Configuration domain models.

Validated configuration objects for a batch run of process pipelines.
"""

from dataclasses import dataclass, field
from typing import Optional

from procpipe.domain.process import Process
from procpipe.domain.verbosity import Verbosity, verbose_if

OVERWRITE_CHOICES = ("force", "fail")


@dataclass(frozen=True)
class DisplayConfig:
    """Configuration for how pipelines are printed."""

    verbose: bool = False
    max_args: int = 5

    def __post_init__(self):
        """Validate display configuration."""
        if self.max_args < 0:
            raise ValueError(f"max_args must be non-negative, got {self.max_args}")

    @property
    def verbosity(self) -> Verbosity:
        return verbose_if(self.verbose, self.max_args)


@dataclass(frozen=True)
class OutputConfig:
    """Configuration for captured pipeline output."""

    # Paths
    output_dir: Optional[str] = None

    # Behavior
    overwrite: str = "fail"
    timestamped: bool = False
    show_progress_bar: bool = True

    def __post_init__(self):
        """Validate output configuration."""
        if self.overwrite not in OVERWRITE_CHOICES:
            raise ValueError(
                f"overwrite must be one of {OVERWRITE_CHOICES}, got {self.overwrite!r}"
            )
        if self.output_dir is not None and not self.output_dir:
            raise ValueError("output_dir cannot be empty")

    @property
    def captures_output(self) -> bool:
        return self.output_dir is not None


@dataclass(frozen=True)
class PipelineSpec:
    """A named chain of processes to run."""

    name: str
    stages: tuple[Process, ...]

    def __post_init__(self):
        """Validate pipeline definition."""
        if not self.name:
            raise ValueError("pipeline name cannot be empty")
        if "/" in self.name or self.name in (".", ".."):
            raise ValueError(f"pipeline name must be a plain file name, got {self.name!r}")
        if not self.stages:
            raise ValueError(f"pipeline {self.name!r} must have at least one stage")

    @classmethod
    def from_dict(cls, data: dict) -> 'PipelineSpec':
        stages = tuple(Process.from_dict(stage) for stage in data.get("stages", []))
        return cls(name=data.get("name", ""), stages=stages)


@dataclass(frozen=True)
class RunConfig:
    """
    Complete run configuration.

    Immutable configuration object validated at creation.
    """

    pipelines: tuple[PipelineSpec, ...]
    display: DisplayConfig = field(default_factory=DisplayConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    # Run metadata
    run_name: str = "procpipe_run"

    def __post_init__(self):
        """Validate run configuration."""
        if not self.pipelines:
            raise ValueError("At least one pipeline must be configured")
        if not self.run_name:
            raise ValueError("run_name cannot be empty")

        names = [spec.name for spec in self.pipelines]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate pipeline names: {duplicates}")

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'RunConfig':
        """
        Create RunConfig from a dictionary (e.g., loaded from YAML).

        Args:
            config_dict: Dictionary with configuration values

        Returns:
            Validated RunConfig instance
        """
        display_dict = config_dict.get("display", {}) or {}
        display = DisplayConfig(
            verbose=bool(display_dict.get("verbose", False)),
            max_args=int(display_dict.get("max_args", 5)),
        )

        output_dict = config_dict.get("output", {}) or {}
        output = OutputConfig(
            output_dir=output_dict.get("output_dir"),
            overwrite=str(output_dict.get("overwrite", "fail")).lower(),
            timestamped=bool(output_dict.get("timestamped", False)),
            show_progress_bar=bool(output_dict.get("show_progress_bar", True)),
        )

        pipelines = tuple(
            PipelineSpec.from_dict(entry)
            for entry in config_dict.get("pipelines", []) or []
        )

        run_metadata = config_dict.get("run_metadata", {}) or {}

        return cls(
            pipelines=pipelines,
            display=display,
            output=output,
            run_name=run_metadata.get("run_name", "procpipe_run"),
        )
