"""
Tests for the process pipeline engine.

These spawn real processes from coreutils (echo, grep, sort, ...).
"""

import signal
import subprocess
from unittest.mock import patch

import pytest

from procpipe import (
    Process,
    ProcessPipeline,
    chain,
    PipeAllocationFailure,
    PreconditionViolation,
    SpawnFailure,
)
from procpipe.pipeline import engine

MISSING_PROGRAM = "procpipe-definitely-not-a-real-program"


class TestConstruction:
    """Tests for building pipelines."""

    def test_chain_builds_pipeline_in_order(self):
        first, second = Process("echo", ["x"]), Process("cat")
        pipeline = chain(first, second)

        assert isinstance(pipeline, ProcessPipeline)
        assert pipeline.stages == (first, second)
        assert len(pipeline) == 2
        assert list(pipeline) == [first, second]

    def test_stages_from_list(self):
        stages = [Process("echo"), Process("cat")]
        assert ProcessPipeline(stages).stages == tuple(stages)

    def test_non_process_stage_rejected(self):
        with pytest.raises(TypeError, match="stage 1 must be a Process"):
            ProcessPipeline([Process("echo"), "cat"])

    def test_single_stage_allowed_at_construction(self):
        """Test that stage count is not validated until piping."""
        assert len(ProcessPipeline([Process("echo")])) == 1


class TestPipe:
    """Tests for ProcessPipeline.pipe and friends."""

    def test_echo_grep(self):
        """Test the canonical echo | grep scenario."""
        pipeline = chain(
            Process("echo", ["-e", r"a\nb\nc"]),
            Process("grep", ["b"]),
        )

        output = pipeline.pipe().output()

        assert output.returncode == 0
        assert output.text == "b\n"

    def test_matches_shell(self):
        """Test that a three stage pipeline matches what a shell produces."""
        pipeline = chain(
            Process("printf", ["%s\\n", "pear", "apple", "fig", "apple"]),
            Process("sort"),
            Process("uniq", ["-c"]),
        )
        expected = subprocess.run(
            "printf '%s\\n' pear apple fig apple | sort | uniq -c",
            shell=True,
            capture_output=True,
            check=True,
        ).stdout

        assert pipeline.output().stdout == expected

    def test_large_stream_flows_through_bounded_pipes(self):
        """Test that more data than a pipe buffer holds passes through."""
        pipeline = chain(
            Process("seq", ["1", "200000"]),
            Process("cat"),
            Process("tail", ["-n", "1"]),
        )
        assert pipeline.output().text == "200000\n"

    def test_consumer_exiting_early(self):
        """Test that an endless producer does not block the chain."""
        pipeline = chain(Process("yes"), Process("head", ["-n", "3"]))
        assert pipeline.output().text == "y\ny\ny\n"

    def test_upstream_reaped_after_last_stage_exits(self):
        """Test that an upstream stage killed by a closed pipe is collected."""
        handle = chain(Process("yes"), Process("head", ["-n", "1"])).pipe()

        assert handle.output().text == "y\n"
        assert handle.upstream[0].returncode == -signal.SIGPIPE

    def test_unused_handle_closed_by_context_manager(self):
        """Test that leaving the with block drops the read end of the chain."""
        with chain(Process("yes"), Process("cat")).pipe() as handle:
            assert isinstance(handle.stdin, int)

        # With no reader left the producer dies on its next write
        assert handle.upstream[0].wait(timeout=5) == -signal.SIGPIPE

    def test_pipe_returns_last_stage_unspawned(self):
        pipeline = chain(Process("echo", ["hi"]), Process("cat"), Process("wc", ["-c"]))

        handle = pipeline.pipe()

        assert handle.program == "wc"
        assert handle.stage == 2
        assert handle.stdout is None
        assert len(handle.upstream) == 2
        assert handle.output().text.strip() == "3"

    def test_pipeline_is_reusable(self):
        """Test that every run spawns a fresh chain."""
        pipeline = chain(Process("echo", ["again"]), Process("cat"))

        assert pipeline.output().text == "again\n"
        assert pipeline.output().text == "again\n"

    def test_single_stage_violates_precondition(self):
        """Test that piping a single stage fails instead of running it."""
        pipeline = ProcessPipeline([Process("echo", ["should not run"])])

        with pytest.raises(PreconditionViolation, match="at least two stages"):
            pipeline.pipe()

    def test_precondition_is_assertion(self):
        with pytest.raises(AssertionError):
            ProcessPipeline([]).pipe()

    def test_single_stage_execute_violates_precondition(self):
        with pytest.raises(PreconditionViolation):
            ProcessPipeline([Process("true")]).execute()


class TestExecute:
    """Tests for exit status reporting."""

    def test_status_of_last_stage(self):
        assert chain(Process("echo", ["x"]), Process("false")).execute() == 1

    def test_intermediate_status_not_checked(self):
        """Test that a failing intermediate stage does not fail the pipeline."""
        assert chain(Process("false"), Process("true")).execute() == 0

    def test_success(self):
        assert chain(Process("echo", ["x"]), Process("cat")).output().success


class TestFailures:
    """Tests for spawn and pipe failures."""

    def test_missing_last_stage(self):
        """Test that a missing final program fails when the chain is run."""
        handle = chain(Process("sleep", ["30"]), Process(MISSING_PROGRAM)).pipe()

        with pytest.raises(SpawnFailure) as excinfo:
            handle.output()

        assert excinfo.value.program == MISSING_PROGRAM
        assert excinfo.value.stage == 1
        assert handle.upstream[0].returncode is not None

    def test_missing_last_stage_with_status_terminates_upstream(self):
        """Test that running the chain for its status also stops upstream stages."""
        handle = chain(Process("sleep", ["30"]), Process(MISSING_PROGRAM)).pipe()

        with pytest.raises(SpawnFailure):
            handle.status()

        assert all(process.returncode is not None for process in handle.upstream)

    def test_missing_intermediate_stage_terminates_earlier_stages(self):
        """Test that stages spawned before a failure are terminated."""
        pipeline = chain(
            Process("sleep", ["30"]),
            Process(MISSING_PROGRAM),
            Process("cat"),
        )

        with patch.object(
            engine, "terminate_processes", wraps=engine.terminate_processes
        ) as terminate:
            with pytest.raises(SpawnFailure) as excinfo:
                pipeline.pipe()

        assert excinfo.value.stage == 1
        assert MISSING_PROGRAM in str(excinfo.value)
        assert isinstance(excinfo.value.__cause__, FileNotFoundError)

        terminate.assert_called_once()
        (spawned,) = terminate.call_args.args
        assert len(spawned) == 1
        assert spawned[0].returncode is not None

    def test_missing_first_stage(self):
        with pytest.raises(SpawnFailure) as excinfo:
            chain(Process(MISSING_PROGRAM), Process("cat")).pipe()
        assert excinfo.value.stage == 0

    @patch("procpipe.pipeline.engine.os.pipe")
    def test_pipe_allocation_failure(self, mock_pipe):
        """Test that an exhausted descriptor table surfaces immediately."""
        mock_pipe.side_effect = OSError(24, "Too many open files")

        with pytest.raises(PipeAllocationFailure) as excinfo:
            chain(Process("echo"), Process("cat")).pipe()

        assert excinfo.value.link == 0
        assert "Too many open files" in str(excinfo.value)
