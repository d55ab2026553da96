"""Process-wide state of the make tools, from activation to deactivation."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from PySide6.QtCore import QObject, Signal

from maketools.build.configurations import ConfigurationStore, configurations_path
from maketools.build.discovery import BuildOutputParser, DiscoveryPipeline
from maketools.build.process import ProcessRunner
from maketools.build.resolution import EffectiveBuildSettings, normalize_path, resolve
from maketools.core.config import SettingsStore
from maketools.core.logging import apply_logging_level, set_extension_log
from maketools.core.threads import BackgroundWorkers
from maketools.workspace.reconciliation import ReconciliationGuard
from maketools.workspace.selection import SelectionController, SelectionState, StatusDisplay

logger = logging.getLogger(__name__)


class MakeEvents(QObject):
    """Notifications for collaborators outside of the core."""

    reparse_requested = Signal()
    effective_changed = Signal(object)


@dataclass
class MakeContext:
    project_root: Path
    settings: SettingsStore
    configurations: ConfigurationStore
    state: SelectionState
    guard: ReconciliationGuard
    selection: SelectionController
    discovery: DiscoveryPipeline
    events: MakeEvents

    def recompute_effective(self) -> EffectiveBuildSettings:
        state = self.state
        effective = resolve(
            state.configuration_name,
            state.global_settings.make_path,
            state.global_settings.build_log,
            configurations=self.configurations.configurations,
            project_root=self.project_root,
        )
        state.effective = effective
        self.events.effective_changed.emit(effective)
        return effective

    def extension_log_path(self) -> Path | None:
        value = self.state.global_settings.extension_log
        if not value:
            return None
        path = normalize_path(value, self.project_root)
        if str(path) != value:
            logger.info("Resolving extension log path to '%s'", path)
        return path

    def apply_extension_log(self, truncate: bool = False) -> None:
        set_extension_log(self.extension_log_path(), truncate=truncate)

    def apply_logging_level(self) -> None:
        apply_logging_level(self.state.global_settings.logging_level)


def create_context(
    project_root: Path,
    parser: BuildOutputParser | None,
    status: StatusDisplay | None = None,
    runner: ProcessRunner | None = None,
    workers: BackgroundWorkers | None = None,
    settings: SettingsStore | None = None,
) -> MakeContext:
    project_root = Path(project_root).resolve()
    settings = settings or SettingsStore.for_project(project_root)
    state = SelectionState()
    guard = ReconciliationGuard()
    return MakeContext(
        project_root=project_root,
        settings=settings,
        configurations=ConfigurationStore(configurations_path(project_root)),
        state=state,
        guard=guard,
        selection=SelectionController(settings, state, guard, status),
        discovery=DiscoveryPipeline(parser, project_root, runner=runner, workers=workers),
        events=MakeEvents(),
    )


def initialize_from_settings(context: MakeContext) -> MakeContext:
    """Read every setting and derive the effective build settings."""

    context.selection.read_global_settings()
    context.apply_logging_level()
    context.apply_extension_log(truncate=True)
    context.selection.read_configuration()
    context.configurations.load()
    context.recompute_effective()
    context.selection.read_target()
    context.selection.read_launch_configuration()
    return context


def shutdown(context: MakeContext) -> None:
    context.settings.stop_watching()
    context.discovery.workers.shutdown()
    set_extension_log(None)
