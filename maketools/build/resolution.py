"""Resolve the make command, arguments and build log for a configuration.

Where the build information comes from, highest priority first:

1. the build log of the configuration (``make_configurations.json``)
2. the build log from settings (``makefile.buildLog``)
3. the command name and arguments of the configuration
4. the make path from settings with no extra arguments
5. plain ``make`` looked up on the search path
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from maketools.build.configurations import ConfigurationSet, MakeConfiguration

DEFAULT_MAKE = "make"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EffectiveBuildSettings:
    command_name: str = DEFAULT_MAKE
    command_args: tuple[str, ...] = ()
    build_log: Path | None = None
    diagnostics: tuple[str, ...] = field(default=(), compare=False)

    def command_line(self) -> str:
        return " ".join([self.command_name, *self.command_args])


def read_build_log(path: Path | None) -> str | None:
    """Return the content of ``path``, or ``None`` when it cannot be read."""

    if path is None:
        return None
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None


def normalize_path(value: str, project_root: Path) -> Path:
    path = Path(value)
    if not path.is_absolute():
        path = project_root / path
    return Path(os.path.normpath(path))


def split_tool_path(value: str | None) -> tuple[str, str] | None:
    """Split a tool path into ``(directory, base name)``.

    A value ending in a separator, or an absolute path naming an existing
    directory, only supplies the directory. Relative values are never probed
    on disk: the process working directory is not the project root.
    """

    if not value:
        return None
    if value.endswith(("/", os.sep)) or (os.path.isabs(value) and os.path.isdir(value)):
        return value.rstrip("/" + os.sep) or value, ""
    return os.path.split(value)


def resolve_build_log(
    record: MakeConfiguration | None,
    global_build_log: str | None,
    project_root: Path,
) -> Path | None:
    if record is not None and record.build_log:
        logger.info("Found build log path setting '%s' defined for configuration '%s'", record.build_log, record.name)
        path = normalize_path(record.build_log, project_root)
    elif global_build_log:
        path = normalize_path(global_build_log, project_root)
    else:
        return None
    if not path.exists():
        logger.info(
            "Build log %s not found. Remove the build log setting or provide a build log file on disk at the given location.",
            path,
        )
    return path


def resolve_command(
    record: MakeConfiguration | None,
    make_path: str | None,
) -> tuple[str, tuple[str, ...], list[str]]:
    """Return command name, arguments and diagnostics for ``record``.

    Directory and base name are taken independently: the configuration
    supplies either one first, settings fill in whatever is missing.
    """

    from_settings = split_tool_path(make_path)
    from_configuration = split_tool_path(record.command_name if record else None)
    command_args = tuple(record.command_args or ()) if record else ()

    base = (from_configuration and from_configuration[1]) or (from_settings and from_settings[1]) or DEFAULT_MAKE
    directory = (from_configuration and from_configuration[0]) or (from_settings and from_settings[0]) or ""
    command_name = os.path.join(directory, base) if directory else base

    diagnostics: list[str] = []
    if not (from_configuration and from_configuration[1]) and not (from_settings and from_settings[1]):
        diagnostics.append(
            "Could not find any make tool file name in make_configurations.json, nor in settings. Assuming make."
        )
    if not (from_configuration and from_configuration[0]) and not (from_settings and from_settings[0]):
        diagnostics.append("For the build information to be available, make must be on the search path.")
    if from_configuration is None and from_settings is None:
        diagnostics.append(
            "It is recommended to define the full path of the make tool in settings (makefile.makePath) "
            "or commandName/commandArgs in make_configurations.json."
        )
    return command_name, command_args, diagnostics


def resolve(
    configuration_name: str | None,
    make_path: str | None,
    build_log: str | None,
    *,
    configurations: ConfigurationSet,
    project_root: Path,
    reader: Callable[[Path | None], str | None] = read_build_log,
) -> EffectiveBuildSettings:
    """Compute the effective build settings for ``configuration_name``."""

    record = configurations.lookup(configuration_name)
    log_path = resolve_build_log(record, build_log, project_root)
    command_name, command_args, diagnostics = resolve_command(record, make_path)

    if record is not None and record.command_name:
        logger.info(
            "Found command '%s' for configuration %s", " ".join([command_name, *command_args]), configuration_name
        )

    # A readable build log means make is never invoked.
    if reader(log_path):
        diagnostics = []
    for message in diagnostics:
        logger.warning(message)

    return EffectiveBuildSettings(
        command_name=command_name,
        command_args=command_args,
        build_log=log_path,
        diagnostics=tuple(diagnostics),
    )
