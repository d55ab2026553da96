"""User commands for picking the configuration, target and launch record."""
from __future__ import annotations

from concurrent.futures import Future
from typing import Protocol, Sequence

from PySide6.QtCore import QObject, Signal

from maketools.context import MakeContext
from maketools.core.logging import get_logger
from maketools.debugger.launch import NO_LAUNCH_TARGETS, decode
from maketools.workspace.selection import DEFAULT_CONFIGURATION, target_from_setting


class SelectionPrompt(Protocol):
    def choose(self, items: Sequence[str], placeholder: str | None = None) -> str | None: ...


class MakeManager(QObject):
    """Drive the selection prompts and apply what the user picks."""

    selection_cancelled = Signal(str)

    def __init__(self, context: MakeContext, prompt: SelectionPrompt) -> None:
        super().__init__()
        self.context = context
        self.prompt = prompt
        self.logger = get_logger(__name__)
        context.discovery.targets_ready.connect(self.select_target)
        context.discovery.launch_configurations_ready.connect(self.select_launch_configuration)

    # Configurations -----------------------------------------------------
    def prepare_configuration_items(self) -> list[str]:
        # The file may have changed on disk since activation.
        items = self.context.configurations.load().names()
        if items:
            self.logger.info("Found the following configurations defined in make_configurations.json: %s", ";".join(items))
        else:
            self.logger.info("No configurations defined in make_configurations.json.")
            items = [DEFAULT_CONFIGURATION]
        return items

    def set_new_configuration(self) -> str | None:
        chosen = self.prompt.choose(self.prepare_configuration_items())
        if not chosen:
            self.selection_cancelled.emit("configuration")
            return None
        self.set_configuration_by_name(chosen)
        return chosen

    def set_configuration_by_name(self, name: str) -> None:
        self.context.selection.select_configuration(name)
        self.context.recompute_effective()
        self.context.events.reparse_requested.emit()

    # Targets ------------------------------------------------------------
    def set_new_target(self) -> Future | None:
        return self.context.discovery.discover_targets(self.context.state.effective)

    def select_target(self, targets: list) -> str | None:
        chosen = self.prompt.choose(targets)
        if not chosen:
            self.selection_cancelled.emit("target")
            return None
        self.set_target_by_name(chosen)
        return chosen

    def set_target_by_name(self, name: str) -> None:
        self.context.selection.select_target(target_from_setting(name))
        self.context.events.reparse_requested.emit()

    # Launch configurations ----------------------------------------------
    def set_new_launch_configuration(self) -> Future | None:
        state = self.context.state
        return self.context.discovery.discover_launch_configurations(state.effective, state.target)

    def select_launch_configuration(self, items: list) -> str | None:
        chosen = self.prompt.choose(items, placeholder=None if items else NO_LAUNCH_TARGETS)
        if not chosen:
            self.selection_cancelled.emit("launch configuration")
            return None
        self.set_launch_configuration_by_name(chosen)
        return chosen

    def set_launch_configuration_by_name(self, text: str) -> None:
        record = decode(text)
        if record is None:
            self.logger.warning("'%s' is not a valid launch configuration", text)
        self.context.selection.select_launch_configuration(record)
