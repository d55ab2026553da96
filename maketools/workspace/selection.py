"""What is active right now: configuration, target and launch record."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, Union

from PySide6.QtCore import QObject, Signal

from maketools.build.resolution import EffectiveBuildSettings
from maketools.core import config as settings_keys
from maketools.core.config import SettingsStore
from maketools.core.logging import get_logger
from maketools.debugger.launch import NO_LAUNCH_CONFIGURATION, LaunchRecord, decode, encode

if TYPE_CHECKING:
    from maketools.workspace.reconciliation import ReconciliationGuard

DEFAULT_CONFIGURATION = "Default"
DEFAULT_TARGET_LABEL = "Default"


@dataclass(frozen=True)
class NoTarget:
    """Build without appending a target argument."""

    def arguments(self) -> list[str]:
        return []

    @property
    def label(self) -> str:
        return DEFAULT_TARGET_LABEL

    def setting_value(self) -> str | None:
        return None


@dataclass(frozen=True)
class NamedTarget:
    name: str

    def arguments(self) -> list[str]:
        return [self.name]

    @property
    def label(self) -> str:
        return self.name

    def setting_value(self) -> str | None:
        return self.name


BuildTarget = Union[NoTarget, NamedTarget]
NO_TARGET = NoTarget()


def setting_text(value: object) -> str | None:
    """Scalar setting value as text; YAML reads ``2024`` as an int."""

    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value) or None


def target_from_setting(value: object) -> BuildTarget:
    name = setting_text(value)
    return NamedTarget(name) if name else NO_TARGET


class StatusDisplay(Protocol):
    def set_configuration(self, name: str) -> None: ...

    def set_target(self, name: str) -> None: ...

    def set_launch_configuration(self, text: str) -> None: ...


class NullStatusDisplay:
    def set_configuration(self, name: str) -> None:
        return None

    def set_target(self, name: str) -> None:
        return None

    def set_launch_configuration(self, text: str) -> None:
        return None


@dataclass
class GlobalSettings:
    """Raw values of the settings that feed resolution, as stored."""

    make_path: str | None = None
    build_log: str | None = None
    extension_log: str | None = None
    logging_level: str | None = None


@dataclass
class SelectionState:
    configuration_name: str = DEFAULT_CONFIGURATION
    target: BuildTarget = NO_TARGET
    launch_configuration: LaunchRecord | None = None
    effective: EffectiveBuildSettings = field(default_factory=EffectiveBuildSettings)
    global_settings: GlobalSettings = field(default_factory=GlobalSettings)

    def launch_label(self) -> str:
        return self.launch_setting_value() or NO_LAUNCH_CONFIGURATION

    def launch_setting_value(self) -> str | None:
        if self.launch_configuration is None:
            return None
        return encode(self.launch_configuration)


class SelectionController(QObject):
    """Keep the selection in memory, in settings and on the status display."""

    configuration_changed = Signal(str)
    target_changed = Signal(str)
    launch_configuration_changed = Signal(str)

    def __init__(
        self,
        settings: SettingsStore,
        state: SelectionState,
        guard: "ReconciliationGuard",
        status: StatusDisplay | None = None,
    ) -> None:
        super().__init__()
        self.settings = settings
        self.state = state
        self.guard = guard
        self.status = status or NullStatusDisplay()
        self.logger = get_logger(__name__)

    # Reading from settings ----------------------------------------------
    def read_configuration(self) -> str:
        value = self.text(settings_keys.BUILD_CONFIGURATION)
        if not value:
            self.logger.info("No current configuration is defined in the settings file")
            value = DEFAULT_CONFIGURATION
        self.show_configuration(value)
        return self.state.configuration_name

    def read_target(self) -> BuildTarget:
        target = target_from_setting(self.settings.get(settings_keys.BUILD_TARGET))
        if isinstance(target, NoTarget):
            self.logger.info("No target defined in the settings file")
        self.show_target(target)
        return target

    def read_launch_configuration(self) -> LaunchRecord | None:
        raw = self.text(settings_keys.LAUNCH_CONFIGURATION)
        record = decode(raw) if raw else None
        if raw and record is None:
            self.logger.warning("Ignoring malformed launch configuration setting '%s'", raw)
        self.show_launch_configuration(record)
        return record

    def read_global_settings(self) -> GlobalSettings:
        values = GlobalSettings(
            make_path=self.text(settings_keys.MAKE_PATH),
            build_log=self.text(settings_keys.BUILD_LOG),
            extension_log=self.text(settings_keys.EXTENSION_LOG),
            logging_level=self.text(settings_keys.LOGGING_LEVEL),
        )
        if not values.make_path:
            self.logger.info("No path to the make tool is defined in the settings file")
        if values.build_log:
            self.logger.info("Found build log path setting '%s'", values.build_log)
        self.state.global_settings = values
        return values

    def text(self, key: str) -> str | None:
        return setting_text(self.settings.get(key))

    # Memory + display ---------------------------------------------------
    def show_configuration(self, name: str) -> None:
        self.state.configuration_name = name
        self.status.set_configuration(name)
        self.configuration_changed.emit(name)

    def show_target(self, target: BuildTarget) -> None:
        self.state.target = target
        self.status.set_target(target.label)
        self.target_changed.emit(target.label)

    def show_launch_configuration(self, record: LaunchRecord | None) -> None:
        self.state.launch_configuration = record
        label = self.state.launch_label()
        self.status.set_launch_configuration(label)
        self.launch_configuration_changed.emit(label)

    # User selections ----------------------------------------------------
    def select_configuration(self, name: str) -> None:
        self.logger.info("Setting configuration - %s", name)
        with self.guard.hold():
            self.settings.update(settings_keys.BUILD_CONFIGURATION, name)
        self.show_configuration(name)

    def select_target(self, target: BuildTarget) -> None:
        self.logger.info("Setting target %s", target.label)
        with self.guard.hold():
            self.settings.update(settings_keys.BUILD_TARGET, target.setting_value())
        self.show_target(target)

    def select_launch_configuration(self, record: LaunchRecord | None) -> None:
        self.logger.info("Setting launch target '%s'", encode(record) if record else NO_LAUNCH_CONFIGURATION)
        with self.guard.hold():
            self.settings.update(settings_keys.LAUNCH_CONFIGURATION, encode(record) if record else None)
        self.show_launch_configuration(record)
