"""Run the build tool and collect its output."""
from __future__ import annotations

import signal
import subprocess
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Callable, Sequence

from maketools.core.logging import get_logger

OutputCallback = Callable[[str], None]
ExitCallback = Callable[[int | None, str | None], None]


class ProcessSpawnError(RuntimeError):
    """The build tool could not be started."""


@dataclass
class ProcessResult:
    """Everything a finished build tool process produced, in delivery order."""

    stdout_chunks: list[str] = field(default_factory=list)
    stderr_chunks: list[str] = field(default_factory=list)
    exit_code: int | None = 0
    signal: str | None = None

    @property
    def stdout(self) -> str:
        return "".join(self.stdout_chunks)

    @property
    def stderr(self) -> str:
        return "".join(self.stderr_chunks)

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0 and self.signal is None


def _signal_name(number: int) -> str:
    try:
        return signal.Signals(number).name
    except ValueError:
        return str(number)


class ProcessRunner:
    """Spawn a command and stream stdout and stderr until it exits."""

    def __init__(self) -> None:
        self.logger = get_logger(__name__)

    def run(
        self,
        command: str,
        args: Sequence[str],
        cwd: Path,
        on_stdout: OutputCallback | None = None,
        on_stderr: OutputCallback | None = None,
        on_exit: ExitCallback | None = None,
    ) -> ProcessResult:
        self.logger.debug("Spawning %s %s in %s", command, " ".join(args), cwd)
        try:
            process = subprocess.Popen(
                [command, *args],
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as exc:
            raise ProcessSpawnError(f"Failed to run '{command}': {exc}") from exc

        result = ProcessResult()
        readers = [
            threading.Thread(
                target=self._stream_output, args=(process.stdout, result.stdout_chunks, on_stdout), daemon=True
            ),
            threading.Thread(
                target=self._stream_output, args=(process.stderr, result.stderr_chunks, on_stderr), daemon=True
            ),
        ]
        for reader in readers:
            reader.start()
        return_code = process.wait()
        for reader in readers:
            reader.join()

        if return_code < 0:
            result.exit_code = None
            result.signal = _signal_name(-return_code)
        else:
            result.exit_code = return_code
        if on_exit:
            on_exit(result.exit_code, result.signal)
        return result

    def _stream_output(self, stream: IO[str] | None, chunks: list[str], callback: OutputCallback | None) -> None:
        if stream is None:
            return
        for line in stream:
            chunks.append(line)
            if callback:
                callback(line)
        stream.close()
