"""Named make configurations read from ``make_configurations.json``."""
from __future__ import annotations

import json
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from PySide6.QtCore import QObject, Signal

from maketools.core.config import SETTINGS_DIR

CONFIGURATIONS_FILE = "make_configurations.json"

logger = logging.getLogger(__name__)


def configurations_path(project_root: Path) -> Path:
    return project_root / SETTINGS_DIR / CONFIGURATIONS_FILE


class ConfigurationError(ValueError):
    """The configurations file exists but cannot be used."""


@dataclass(frozen=True)
class MakeConfiguration:
    """One way of invoking the build, e.g. ``make BUILD_TYPE=Debug``."""

    name: str
    command_name: str | None = None
    command_args: tuple[str, ...] | None = None
    build_log: str | None = None

    @classmethod
    def from_json(cls, entry: dict) -> "MakeConfiguration":
        args = entry.get("commandArgs")
        if args is not None and not (isinstance(args, list) and all(isinstance(a, str) for a in args)):
            logger.warning(
                "Ignoring commandArgs of configuration '%s': expected a list of strings", entry.get("name")
            )
            args = None
        command_name = entry.get("commandName")
        build_log = entry.get("buildLog")
        return cls(
            name=entry["name"],
            command_name=command_name if isinstance(command_name, str) and command_name else None,
            command_args=tuple(args) if args is not None else None,
            build_log=build_log if isinstance(build_log, str) and build_log else None,
        )


@dataclass
class ConfigurationSet:
    """Configurations keyed by name; the first record with a name wins."""

    records: "OrderedDict[str, MakeConfiguration]" = field(default_factory=OrderedDict)

    @classmethod
    def from_records(cls, records: list[MakeConfiguration]) -> "ConfigurationSet":
        ordered: OrderedDict[str, MakeConfiguration] = OrderedDict()
        for record in records:
            if record.name in ordered:
                logger.debug("Duplicate configuration '%s' ignored", record.name)
                continue
            ordered[record.name] = record
        return cls(ordered)

    def lookup(self, name: str | None) -> MakeConfiguration | None:
        if name is None:
            return None
        return self.records.get(name)

    def names(self) -> list[str]:
        return list(self.records)

    def __iter__(self) -> Iterator[MakeConfiguration]:
        return iter(self.records.values())

    def __len__(self) -> int:
        return len(self.records)


def parse_configurations(text: str) -> list[MakeConfiguration]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Failed to parse {CONFIGURATIONS_FILE}: {exc}") from exc
    if not isinstance(data, list):
        raise ConfigurationError(f"Failed to parse {CONFIGURATIONS_FILE}: expected a list of configurations")
    records: list[MakeConfiguration] = []
    for entry in data:
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            logger.warning("Skipping configuration entry without a name: %r", entry)
            continue
        records.append(MakeConfiguration.from_json(entry))
    return records


class ConfigurationStore(QObject):
    """Load and hold the configurations defined for a project.

    A missing file is a normal state and leaves an empty set. A malformed
    file keeps whatever was loaded before and emits :attr:`error_occurred`
    so the user can fix it.
    """

    error_occurred = Signal(str)

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = path
        self.configurations = ConfigurationSet()

    def load(self) -> ConfigurationSet:
        if not self.path.exists():
            logger.info("Configurations file %s not found", self.path)
            self.configurations = ConfigurationSet()
            return self.configurations
        logger.info("Reading configurations from file %s", self.path)
        try:
            records = parse_configurations(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            message = f"Failed to read {self.path.name}: {exc}"
            logger.error("%s", message)
            self.error_occurred.emit(message)
            return self.configurations
        except ConfigurationError as exc:
            logger.error("%s", exc)
            self.error_occurred.emit(str(exc))
            return self.configurations
        self.configurations = ConfigurationSet.from_records(records)
        return self.configurations

    def lookup(self, name: str | None) -> MakeConfiguration | None:
        return self.configurations.lookup(name)

    def names(self) -> list[str]:
        return self.configurations.names()

    def is_configurations_file(self, path: str | Path) -> bool:
        return Path(path).resolve() == self.path.resolve()
