"""
Process pipeline engine.

Wires an ordered chain of processes together through anonymous OS pipes,
the way a shell runs ``a | b | c``.
"""

import logging
import os
import subprocess
from typing import Iterable, Iterator

from procpipe.domain.errors import PipeAllocationFailure, PreconditionViolation
from procpipe.domain.process import Process
from procpipe.domain.verbosity import Verbosity
from procpipe.pipeline.command import CommandHandle, CommandOutput, terminate_processes
from procpipe.utils.formatting import format_pipeline

logger = logging.getLogger(__name__)


class ProcessPipeline:
    """
    A set of processes interacting through standard input/output.

    Stage ``i``'s stdout feeds stage ``i + 1``'s stdin. The pipeline itself is
    never consumed: every call to pipe() spawns a fresh chain.

    Example:
        p = chain(Process("echo", ["-e", r"a\\nb\\nc"]), Process("grep", ["b"]))
        p.output().text
        -> "b\\n"
    """

    def __init__(self, stages: Iterable[Process]):
        stages = tuple(stages)
        for index, stage in enumerate(stages):
            if not isinstance(stage, Process):
                raise TypeError(
                    f"stage {index} must be a Process, got {type(stage).__name__}"
                )
        self._stages = stages

    @property
    def stages(self) -> tuple[Process, ...]:
        return self._stages

    def __len__(self) -> int:
        return len(self._stages)

    def __iter__(self) -> Iterator[Process]:
        return iter(self._stages)

    def __repr__(self) -> str:
        return f"ProcessPipeline({list(self._stages)!r})"

    def __str__(self) -> str:
        return self.display(Verbosity.verbose())

    def display(self, verbosity: Verbosity) -> str:
        """Stages one per line, each continuation prefixed with ``\\t| ``."""
        return format_pipeline(self._stages, verbosity)

    def pipe(self) -> CommandHandle:
        """
        Spawn every stage but the last and return the last one unspawned.

        The returned handle has its stdin connected to the chain and its
        stdout unbound; running it drives the whole pipeline.

        Returns:
            CommandHandle of the final stage, with ``upstream`` holding the
            spawned intermediate processes in stage order

        Raises:
            PreconditionViolation: If the pipeline has fewer than two stages
            PipeAllocationFailure: If a pipe could not be allocated
            SpawnFailure: If an intermediate stage could not be started
        """
        if len(self._stages) < 2:
            raise PreconditionViolation(
                f"piping requires at least two stages, got {len(self._stages)}; "
                "execute a single process directly instead"
            )

        commands = []
        for index, stage in enumerate(self._stages):
            command = stage.command()
            command.stage = index
            commands.append(command)

        spawned: list[subprocess.Popen] = []
        try:
            for link, (producer, consumer) in enumerate(zip(commands, commands[1:])):
                try:
                    read_fd, write_fd = os.pipe()
                except OSError as e:
                    raise PipeAllocationFailure(link, e.strerror or str(e)) from e
                logger.debug(f"Allocated pipe for link {link} (r={read_fd}, w={write_fd})")

                producer.bind_stdout(write_fd, owned=True)
                consumer.bind_stdin(read_fd, owned=True)
                spawned.append(producer.spawn())
        except Exception:
            for command in commands:
                command.close()
            if spawned:
                logger.warning(
                    f"Pipeline wiring failed, terminating {len(spawned)} spawned stage(s)"
                )
                terminate_processes(spawned)
            raise

        last = commands[-1]
        last.upstream = spawned
        return last

    def execute(self) -> int:
        """
        Run the whole pipeline with the last stage's stdout inherited.

        Returns:
            Exit status of the last stage; earlier stages are not checked
        """
        return self.pipe().status()

    def output(self) -> CommandOutput:
        """Run the whole pipeline capturing the last stage's output."""
        return self.pipe().output()


def chain(*processes: Process) -> ProcessPipeline:
    """
    Build a pipeline inline.

    Example:
        chain(Process("echo", ["-e", r"a\\nb\\nc"]), Process("grep", ["b"]))
    """
    return ProcessPipeline(processes)
