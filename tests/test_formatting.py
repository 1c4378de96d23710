"""
Tests for process and pipeline display formatting.
"""

import pytest

from procpipe import Process, ProcessPipeline, Verbosity, chain
from procpipe.utils.formatting import format_process, format_pipeline


@pytest.fixture
def grep_pipeline():
    return chain(
        Process("echo", ["-e", r"a\nb\nc"]),
        Process("grep", ["b"]),
    )


class TestFormatProcess:
    """Tests for single process display."""

    def test_verbose_shows_all_args(self):
        process = Process("ls", ["-l", "/path/to/dir"])
        assert format_process(process, Verbosity.verbose()) == "ls -l /path/to/dir"

    def test_brief_at_arg_count_shows_all_args(self):
        process = Process("ls", ["-l", "/path/to/dir"])
        assert format_process(process, Verbosity.brief(2)) == "ls -l /path/to/dir"

    def test_brief_below_arg_count_truncates(self):
        process = Process("ls", ["-l", "/path/to/dir"])
        assert format_process(process, Verbosity.brief(1)) == "ls -l ..."

    def test_brief_zero(self):
        assert format_process(Process("ls", ["-l"]), Verbosity.brief(0)) == "ls ..."

    def test_no_args(self):
        """Test that a process without args never gets a marker."""
        process = Process("true")
        assert format_process(process, Verbosity.brief(0)) == "true"
        assert format_process(process, Verbosity.verbose()) == "true"

    def test_brief_not_below_count_equals_verbose(self):
        """Test that Brief(n) with n >= argument count equals Verbose."""
        process = Process("cmd", ["a", "b", "c", "d"])
        verbose = format_process(process, Verbosity.verbose())

        for n in range(len(process.args), len(process.args) + 5):
            assert format_process(process, Verbosity.brief(n)) == verbose
            assert not format_process(process, Verbosity.brief(n)).endswith(" ...")

    def test_brief_below_count_shows_exactly_n_args(self):
        """Test that Brief(n) with n < argument count shows n args and the marker."""
        args = ["a", "b", "c", "d"]
        process = Process("cmd", args)

        for n in range(len(args)):
            expected = " ".join(["cmd", *args[:n]]) + " ..."
            assert format_process(process, Verbosity.brief(n)) == expected

    def test_verbose_with_many_args_has_no_marker(self):
        process = Process("cmd", [str(i) for i in range(100)])
        assert not format_process(process, Verbosity.verbose()).endswith("...")

    def test_display_method_delegates(self):
        process = Process("ls", ["-l", "/tmp"])
        assert process.display(Verbosity.brief(1)) == format_process(process, Verbosity.brief(1))


class TestFormatPipeline:
    """Tests for pipeline display."""

    def test_verbose(self, grep_pipeline):
        assert grep_pipeline.display(Verbosity.verbose()) == "echo -e a\\nb\\nc\n\t| grep b"

    def test_brief_two(self, grep_pipeline):
        assert grep_pipeline.display(Verbosity.brief(2)) == "echo -e a\\nb\\nc\n\t| grep b"

    def test_brief_one(self, grep_pipeline):
        """Test that the same verbosity is applied to every stage."""
        assert grep_pipeline.display(Verbosity.brief(1)) == "echo -e ...\n\t| grep b"

    def test_str_is_verbose(self, grep_pipeline):
        assert str(grep_pipeline) == grep_pipeline.display(Verbosity.verbose())

    def test_three_stages(self):
        stages = [Process("cat", ["f"]), Process("sort"), Process("uniq", ["-c"])]
        assert format_pipeline(stages, Verbosity.verbose()) == "cat f\n\t| sort\n\t| uniq -c"

    def test_single_stage_has_no_separator(self):
        assert ProcessPipeline([Process("ls", ["-l"])]).display(Verbosity.verbose()) == "ls -l"

    def test_empty_pipeline(self):
        assert ProcessPipeline([]).display(Verbosity.verbose()) == ""
