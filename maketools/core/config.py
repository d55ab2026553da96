"""Workspace settings storage for the make tools."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from PySide6.QtCore import QFileSystemWatcher, QObject, Signal

from maketools.core.logging import get_logger

SETTINGS_DIR = ".maketools"
SETTINGS_FILE = "settings.yaml"
NAMESPACE = "makefile"

BUILD_CONFIGURATION = "buildConfiguration"
BUILD_TARGET = "buildTarget"
LAUNCH_CONFIGURATION = "launchConfiguration"
BUILD_LOG = "buildLog"
EXTENSION_LOG = "extensionLog"
MAKE_PATH = "makePath"
LOGGING_LEVEL = "loggingLevel"

KNOWN_KEYS = (
    BUILD_CONFIGURATION,
    BUILD_TARGET,
    LAUNCH_CONFIGURATION,
    BUILD_LOG,
    EXTENSION_LOG,
    MAKE_PATH,
    LOGGING_LEVEL,
)


def settings_path(project_root: Path) -> Path:
    return project_root / SETTINGS_DIR / SETTINGS_FILE


@dataclass(frozen=True)
class SettingsChange:
    """Describe which settings changed in one notification."""

    keys: frozenset[str] = field(default_factory=frozenset)

    def affects(self, section: str) -> bool:
        prefix = f"{section}."
        return any(key == section or key.startswith(prefix) for key in self.keys)

    def affects_key(self, section: str, key: str) -> bool:
        return f"{section}.{key}" in self.keys


class SettingsStore(QObject):
    """YAML backed key/value store with change notifications.

    Values live under the ``makefile`` namespace of the document. Every
    ``update`` persists immediately and emits :attr:`changed` synchronously.
    Edits made by other programs are picked up by :meth:`reload`, which the
    file watcher calls whenever the document changes on disk.
    """

    changed = Signal(object)

    def __init__(self, path: Path, namespace: str = NAMESPACE) -> None:
        super().__init__()
        self.path = path
        self.namespace = namespace
        self.logger = get_logger(__name__)
        self.document: dict[str, Any] = {}
        self.document = self._load_yaml(path)
        self._watcher: QFileSystemWatcher | None = None

    @classmethod
    def for_project(cls, project_root: Path) -> "SettingsStore":
        return cls(settings_path(project_root))

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            self.logger.error("Failed to read settings file %s: %s", path, exc)
            return dict(self.document)
        # An empty file is what a reader sees halfway through a rewrite.
        if not text.strip():
            self.logger.debug("Settings file %s is empty, keeping the loaded values", path)
            return dict(self.document)
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            self.logger.error("Failed to parse settings file %s: %s", path, exc)
            return dict(self.document)
        if not isinstance(data, dict):
            self.logger.warning("Ignoring settings file %s: top level is not a mapping", path)
            return {}
        return data

    def _section(self, document: dict[str, Any] | None = None) -> dict[str, Any]:
        document = self.document if document is None else document
        section = document.get(self.namespace)
        return section if isinstance(section, dict) else {}

    def get(self, key: str, default: Any | None = None) -> Any:
        return self._section().get(key, default)

    def values(self) -> dict[str, Any]:
        return dict(self._section())

    def update(self, key: str, value: Any) -> None:
        """Set ``key`` (or remove it when ``value`` is ``None``) and persist."""

        section = dict(self._section())
        if value is None:
            if key not in section:
                return
            section.pop(key)
        else:
            if section.get(key) == value:
                return
            section[key] = value
        self.document[self.namespace] = section
        self.save()
        self.changed.emit(SettingsChange(frozenset({f"{self.namespace}.{key}"})))

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        staging = self.path.with_name(self.path.name + ".tmp")
        with staging.open("w", encoding="utf-8") as handle:
            yaml.safe_dump(self.document, handle, default_flow_style=False, sort_keys=True)
        os.replace(staging, self.path)

    def reload(self) -> SettingsChange:
        """Re-read the document and notify about keys whose values differ."""

        document = self._load_yaml(self.path)
        old, new = self._section(), self._section(document)
        changed = {
            f"{self.namespace}.{key}"
            for key in set(old) | set(new)
            if old.get(key) != new.get(key)
        }
        self.document = document
        change = SettingsChange(frozenset(changed))
        if changed:
            self.logger.debug("Settings changed on disk: %s", ", ".join(sorted(changed)))
            self.changed.emit(change)
        return change

    # File watching ------------------------------------------------------
    def start_watching(self) -> None:
        if self._watcher is None:
            self._watcher = QFileSystemWatcher(self)
            self._watcher.fileChanged.connect(self._handle_file_change)
            self._watcher.directoryChanged.connect(self._handle_file_change)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._watcher.addPath(str(self.path.parent))
        if self.path.exists():
            self._watcher.addPath(str(self.path))

    def stop_watching(self) -> None:
        if self._watcher is None:
            return
        watched = self._watcher.files() + self._watcher.directories()
        if watched:
            self._watcher.removePaths(watched)

    def _handle_file_change(self, _path: str) -> None:
        # Editors often replace the file, which drops it from the watch list.
        if self._watcher is not None and self.path.exists() and str(self.path) not in self._watcher.files():
            self._watcher.addPath(str(self.path))
        self.reload()
