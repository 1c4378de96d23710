#!/usr/bin/env python3
"""
Command-line entry point for procpipe.

Runs the pipelines described in a YAML configuration file, or only prints
them with --dry-run.
"""

import argparse
import logging
import sys

import yaml

from procpipe.domain.config import RunConfig
from procpipe.domain.errors import DirectoryExistsError
from procpipe.pipeline.executor import PipelineExecutor

EXIT_OK = 0
EXIT_PIPELINE_FAILED = 1
EXIT_CONFIG_ERROR = 2


def setup_logging(level: str = "INFO"):
    """Setup logging configuration."""
    # stdout is left to the pipelines themselves
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)]
    )


def load_config(config_path: str) -> dict:
    """Load configuration from YAML file."""
    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


def apply_overrides(config_dict: dict, args: argparse.Namespace) -> dict:
    """Apply command line overrides on top of the loaded configuration."""
    updated = dict(config_dict)
    display = dict(updated.get("display") or {})
    output = dict(updated.get("output") or {})

    if args.verbose:
        display["verbose"] = True
    if args.max_args is not None:
        display["max_args"] = args.max_args
    if args.force:
        output["overwrite"] = "force"
    if args.output_dir is not None:
        output["output_dir"] = args.output_dir
    if args.no_progress:
        output["show_progress_bar"] = False

    updated["display"] = display
    updated["output"] = output
    return updated


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="procpipe - run chains of processes connected by pipes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run every pipeline in config.yaml
  procpipe

  # Show what would run, with all arguments
  procpipe --config pipelines.yaml --dry-run --verbose

  # Capture outputs, reusing an existing run directory
  procpipe --output-dir ./output --force
        """
    )

    parser.add_argument(
        "--config", type=str, default="config.yaml",
        help="Path to configuration file (default: config.yaml)"
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Display the configured pipelines without running them"
    )

    display_group = parser.add_argument_group("Display Options")
    display_group.add_argument(
        "--verbose", action="store_true",
        help="Show every argument of every stage"
    )
    display_group.add_argument(
        "--max-args", type=int, default=None,
        help="Arguments shown per stage when not verbose"
    )

    output_group = parser.add_argument_group("Output Options")
    output_group.add_argument(
        "--output-dir", type=str, default=None,
        help="Capture each pipeline's output under this directory"
    )
    output_group.add_argument(
        "--force", action="store_true",
        help="Reuse the run directory if it already exists"
    )
    output_group.add_argument(
        "--no-progress", action="store_true",
        help="Disable the progress bar"
    )

    args = parser.parse_args(argv)

    if args.max_args is not None and args.max_args < 0:
        parser.error("--max-args must be non-negative")

    return args


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        config_dict = apply_overrides(load_config(args.config), args)
        config = RunConfig.from_dict(config_dict)
    except (OSError, yaml.YAMLError, ValueError, KeyError, TypeError) as e:
        logger.error(f"Invalid configuration {args.config}: {e}")
        return EXIT_CONFIG_ERROR

    executor = PipelineExecutor(config)

    if args.dry_run:
        logger.info(f"Dry run: {len(config.pipelines)} pipeline(s) configured")
        for description in executor.describe():
            logger.info(description)
        return EXIT_OK

    try:
        results = executor.run()
    except DirectoryExistsError as e:
        logger.error(str(e))
        return EXIT_CONFIG_ERROR

    executor.log_results(results)
    if all(result.success for result in results):
        return EXIT_OK
    return EXIT_PIPELINE_FAILED


if __name__ == "__main__":
    sys.exit(main())
