"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import concurrent.futures
import json
import logging
import os
from pathlib import Path
from typing import Any

import pytest

from maketools.core import logging as logging_mod
from maketools.core.config import SettingsStore, settings_path
from tests.fakes import FakeParser, FakePrompt, ImmediateExecutor, RecordingStatus

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    """Provide a shared QApplication before anything creates a core application."""

    from PySide6.QtWidgets import QApplication

    return QApplication.instance() or QApplication([])


@pytest.fixture(autouse=True)
def _isolated_logging(monkeypatch, tmp_path_factory):
    log_dir = tmp_path_factory.mktemp("logs")
    monkeypatch.setattr(logging_mod, "LOG_DIR", log_dir)
    monkeypatch.setattr(logging_mod, "LOG_FILE", log_dir / "maketools.log")
    yield
    logging_mod.set_extension_log(None)
    logging.getLogger().setLevel(logging.INFO)


@pytest.fixture
def immediate_executor(monkeypatch):
    monkeypatch.setattr(concurrent.futures, "ThreadPoolExecutor", ImmediateExecutor)
    return ImmediateExecutor


@pytest.fixture
def parser() -> FakeParser:
    return FakeParser()


@pytest.fixture
def prompt() -> FakePrompt:
    return FakePrompt()


@pytest.fixture
def status() -> RecordingStatus:
    return RecordingStatus()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    (root / ".maketools").mkdir(parents=True)
    return root.resolve()


@pytest.fixture
def write_configurations(project: Path):
    def _write(entries: Any) -> Path:
        path = project / ".maketools" / "make_configurations.json"
        text = entries if isinstance(entries, str) else json.dumps(entries, indent=2)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_settings(project: Path):
    def _write(values: dict[str, Any]) -> Path:
        path = settings_path(project)
        store = SettingsStore(path)
        store.document = {"makefile": dict(values)}
        store.save()
        return path

    return _write
