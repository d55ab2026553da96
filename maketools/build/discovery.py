"""Discover makefile targets and launch candidates.

A readable build log is always preferred. Otherwise the build tool is run in
dry-run mode from the project root and its output is parsed, even when the
tool fails: a partial dry-run still lists useful targets and binaries.
"""
from __future__ import annotations

from concurrent.futures import Future
from pathlib import Path
from typing import Callable, Protocol

from PySide6.QtCore import QObject, Signal

from maketools.build.process import ProcessResult, ProcessRunner
from maketools.build.resolution import EffectiveBuildSettings, read_build_log
from maketools.core.logging import get_logger
from maketools.core.threads import BackgroundWorkers
from maketools.debugger.launch import LaunchRecord, encode_all
from maketools.workspace.selection import BuildTarget

TARGETS = "targets"
LAUNCH_CONFIGURATIONS = "launch-configurations"

# "all" comes first so every target is evaluated, -p prints the database
TARGET_DRY_RUN_ARGS = ("all", "--dry-run", "-p")
LAUNCH_DRY_RUN_ARGS = ("--dry-run", "--always-make", "--keep-going", "--print-data-base")


class BuildOutputParser(Protocol):
    def parse_targets(self, text: str) -> list[str]: ...

    def parse_launch_configurations(self, text: str) -> list[LaunchRecord]: ...


def target_arguments(effective: EffectiveBuildSettings) -> list[str]:
    return [*TARGET_DRY_RUN_ARGS, *effective.command_args]


def launch_arguments(effective: EffectiveBuildSettings, target: BuildTarget) -> list[str]:
    return [*effective.command_args, *target.arguments(), *LAUNCH_DRY_RUN_ARGS]


def _completed(value: list[str]) -> Future:
    future: Future = Future()
    future.set_result(value)
    return future


class DiscoveryPipeline(QObject):
    """Produce sorted, de-duplicated candidates for the selection prompts.

    Build log results are emitted right away. Dry-run results are emitted
    from the worker thread, so Qt queues them to this object's thread and
    they arrive once its event loop processes events.
    """

    targets_ready = Signal(list)
    launch_configurations_ready = Signal(list)
    discovery_failed = Signal(str, str)

    def __init__(
        self,
        parser: BuildOutputParser | None,
        project_root: Path,
        runner: ProcessRunner | None = None,
        workers: BackgroundWorkers | None = None,
        reader: Callable[[Path | None], str | None] = read_build_log,
    ) -> None:
        super().__init__()
        self.parser = parser
        self.project_root = project_root
        self.runner = runner or ProcessRunner()
        self.workers = workers or BackgroundWorkers(max_workers=2)
        self.reader = reader
        self.logger = get_logger(__name__)

    # Parsing ------------------------------------------------------------
    def _require_parser(self) -> BuildOutputParser:
        if self.parser is None:
            raise RuntimeError("No build output parser is configured")
        return self.parser

    def parse_targets(self, text: str) -> list[str]:
        return sorted(set(self._require_parser().parse_targets(text)))

    def parse_launch_configurations(self, text: str) -> list[str]:
        items = encode_all(self._require_parser().parse_launch_configurations(text))
        self.logger.info("Found the following launch targets defined in the makefile: %s", ";".join(items))
        return items

    # Build log ----------------------------------------------------------
    def targets_from_build_log(self, effective: EffectiveBuildSettings) -> list[str] | None:
        content = self.reader(effective.build_log)
        if not content:
            return None
        self.logger.info("Parsing the provided build log '%s' for targets...", effective.build_log)
        return self.parse_targets(content)

    def launch_configurations_from_build_log(self, effective: EffectiveBuildSettings) -> list[str] | None:
        content = self.reader(effective.build_log)
        if not content:
            return None
        self.logger.info("Parsing the provided build log '%s' for launch configurations...", effective.build_log)
        return self.parse_launch_configurations(content)

    # Discovery ----------------------------------------------------------
    def discover_targets(self, effective: EffectiveBuildSettings) -> Future | None:
        """Return a future resolving to the sorted makefile targets."""

        from_log = self.targets_from_build_log(effective)
        if from_log is not None:
            future = _completed(from_log)
        elif self.workers.in_flight(TARGETS):
            self.logger.info("Target discovery is already running")
            return self.workers.pending(TARGETS)
        else:
            args = target_arguments(effective)
            self.logger.info("Parsing the targets in the makefile. Command: %s %s", effective.command_name, " ".join(args))
            future = self.workers.submit_once(
                TARGETS, self._dry_run, TARGETS, effective.command_name, args, self.parse_targets
            )
        if future is not None:
            future.add_done_callback(lambda done: self._deliver(TARGETS, done, self.targets_ready))
        return future

    def discover_launch_configurations(self, effective: EffectiveBuildSettings, target: BuildTarget) -> Future | None:
        """Return a future resolving to the encoded launch candidates."""

        from_log = self.launch_configurations_from_build_log(effective)
        if from_log is not None:
            future = _completed(from_log)
        elif self.workers.in_flight(LAUNCH_CONFIGURATIONS):
            self.logger.info("Launch configuration discovery is already running")
            return self.workers.pending(LAUNCH_CONFIGURATIONS)
        else:
            args = launch_arguments(effective, target)
            self.logger.info(
                "Generating the dry-run to parse launch configuration for the binaries built by the makefile. "
                "Command: %s %s",
                effective.command_name,
                " ".join(args),
            )
            future = self.workers.submit_once(
                LAUNCH_CONFIGURATIONS,
                self._dry_run,
                LAUNCH_CONFIGURATIONS,
                effective.command_name,
                args,
                self.parse_launch_configurations,
            )
        if future is not None:
            future.add_done_callback(
                lambda done: self._deliver(LAUNCH_CONFIGURATIONS, done, self.launch_configurations_ready)
            )
        return future

    def _dry_run(self, kind: str, command: str, args: list[str], parse: Callable[[str], list[str]]) -> list[str]:
        result: ProcessResult = self.runner.run(command, args, self.project_root)
        if not result.succeeded:
            self.logger.warning(
                "The dry-run command for parsing %s failed (exit code %s, signal %s).", kind, result.exit_code, result.signal
            )
            if result.stderr:
                self.logger.warning("%s", result.stderr)
        return parse(result.stdout)

    def _deliver(self, kind: str, future: Future, ready) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            self.logger.error("Discovery of %s failed: %s", kind, error)
            self.discovery_failed.emit(kind, str(error))
            return
        ready.emit(future.result())
