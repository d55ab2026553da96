"""Keep memory in step with settings and the configurations file.

Both sources can be edited outside of this process. Only the settings that
influence how make is invoked lead to a new reparse; the rest just refresh
memory and the status display. Writes this process makes itself happen
while the guard is held and are ignored here.
"""
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

from PySide6.QtCore import QObject, Signal

from maketools.core import config as settings_keys
from maketools.core.config import SettingsChange
from maketools.core.logging import get_logger
from maketools.workspace.selection import DEFAULT_CONFIGURATION, target_from_setting

if TYPE_CHECKING:
    from maketools.context import MakeContext


class ReconciliationGuard:
    """Tell self-inflicted settings notifications apart from external edits."""

    def __init__(self) -> None:
        self._held = 0
        self._stopped = False

    @property
    def suppressed(self) -> bool:
        return self._stopped or self._held > 0

    @contextmanager
    def hold(self) -> Iterator[None]:
        self._held += 1
        try:
            yield
        finally:
            self._held -= 1

    def stop(self) -> None:
        self._stopped = True

    def start(self) -> None:
        self._stopped = False


class ReconciliationController(QObject):
    """React to settings notifications and configuration file saves."""

    reconciled = Signal(bool)

    def __init__(self, context: "MakeContext") -> None:
        super().__init__()
        self.context = context
        self.guard = context.guard
        self.logger = get_logger(__name__)
        self._connected = False

    def connect_sources(self) -> None:
        if self._connected:
            return
        self.context.settings.changed.connect(self.on_settings_changed)
        self._connected = True

    def disconnect_sources(self) -> None:
        if not self._connected:
            return
        self.context.settings.changed.disconnect(self.on_settings_changed)
        self._connected = False

    def start_listening(self) -> None:
        self.guard.start()

    def stop_listening(self) -> None:
        self.guard.stop()

    # Triggers -----------------------------------------------------------
    def on_document_saved(self, path: str | Path) -> bool:
        if self.guard.suppressed or not self.context.configurations.is_configurations_file(path):
            return False
        self.logger.info("Changes detected in %s and triggering update", Path(path).name)
        self.context.configurations.load()
        self.context.recompute_effective()
        self.context.events.reparse_requested.emit()
        self.reconciled.emit(True)
        return True

    def on_settings_changed(self, change: SettingsChange) -> bool:
        """Refresh changed values; return whether a reparse was requested."""

        if self.guard.suppressed or not change.affects(self.context.settings.namespace):
            return False
        self.logger.info("Detected a change in settings")
        state = self.context.state
        selection = self.context.selection
        reparse = False

        configuration = selection.text(settings_keys.BUILD_CONFIGURATION) or DEFAULT_CONFIGURATION
        if configuration != state.configuration_name:
            self.logger.info("Make configuration setting changed.")
            selection.read_configuration()
            reparse = True

        if target_from_setting(selection.text(settings_keys.BUILD_TARGET)) != state.target:
            self.logger.info("Target setting changed.")
            selection.read_target()
            reparse = True

        # Launch records do not influence how make is invoked.
        if selection.text(settings_keys.LAUNCH_CONFIGURATION) != state.launch_setting_value():
            self.logger.info("Launch configuration setting changed.")
            selection.read_launch_configuration()

        build_log = selection.text(settings_keys.BUILD_LOG)
        if build_log != state.global_settings.build_log:
            self.logger.info("Build log setting changed.")
            state.global_settings.build_log = build_log
            reparse = True

        extension_log = selection.text(settings_keys.EXTENSION_LOG)
        if extension_log != state.global_settings.extension_log:
            self.logger.info("Extension log setting changed.")
            state.global_settings.extension_log = extension_log
            self.context.apply_extension_log()

        logging_level = selection.text(settings_keys.LOGGING_LEVEL)
        if logging_level != state.global_settings.logging_level:
            self.logger.info("Logging level setting changed.")
            state.global_settings.logging_level = logging_level
            self.context.apply_logging_level()

        make_path = selection.text(settings_keys.MAKE_PATH)
        if make_path != state.global_settings.make_path:
            # A different make tool may print a different dry-run.
            self.logger.info("Make path setting changed.")
            state.global_settings.make_path = make_path
            reparse = True

        if reparse:
            self.logger.info("Some of the changes detected in settings are triggering updates")
            self.context.recompute_effective()
            self.context.events.reparse_requested.emit()
        self.reconciled.emit(reparse)
        return reparse