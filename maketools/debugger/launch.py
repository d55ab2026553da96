"""Launch records for binaries built by the makefile.

A launch record is kept in settings and shown in the status bar as a single
line: ``<cwd>><binary relative to cwd>(<arg1>,<arg2>,...)``.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Iterable

NO_LAUNCH_CONFIGURATION = "No launch configuration set"
NO_LAUNCH_TARGETS = "No launch targets identified"

_LAUNCH_PATTERN = re.compile(r"(?P<cwd>[^>]*)>(?P<binary>[^(]*)\((?P<args>.*)\)", re.DOTALL)


@dataclass(frozen=True)
class LaunchRecord:
    binary: str
    cwd: str
    args: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))


def make_relative(path: str, base: str) -> str:
    try:
        return os.path.relpath(path, base)
    except ValueError:
        # Different drives on Windows
        return path


def make_absolute(path: str, base: str) -> str:
    if os.path.isabs(path):
        return os.path.normpath(path)
    return os.path.normpath(os.path.join(base, path))


def encode(record: LaunchRecord) -> str:
    relative = make_relative(record.binary, record.cwd)
    return f"{record.cwd}>{relative}({','.join(record.args)})"


def decode(text: str | None) -> LaunchRecord | None:
    """Parse an encoded launch record; malformed text yields ``None``."""

    if not text:
        return None
    match = _LAUNCH_PATTERN.fullmatch(text.strip())
    if not match:
        return None
    cwd = match.group("cwd")
    binary = match.group("binary")
    if not cwd or not binary:
        return None
    raw_args = match.group("args")
    args = tuple(raw_args.split(",")) if raw_args else ()
    return LaunchRecord(binary=make_absolute(binary, cwd), cwd=cwd, args=args)


def encode_all(records: Iterable[LaunchRecord]) -> list[str]:
    """Encode, sort and collapse records that encode to the same text."""

    return sorted({encode(record) for record in records})
