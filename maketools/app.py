"""Activation and teardown of the make tools for one project."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from PySide6.QtCore import QCoreApplication

from maketools.build.discovery import BuildOutputParser
from maketools.build.make_manager import MakeManager, SelectionPrompt
from maketools.build.process import ProcessRunner
from maketools.context import MakeContext, create_context, initialize_from_settings, shutdown
from maketools.core.threads import BackgroundWorkers
from maketools.workspace.reconciliation import ReconciliationController
from maketools.workspace.selection import StatusDisplay

logger = logging.getLogger(__name__)


@dataclass
class MakeTools:
    """Owns the context and the objects acting on it."""

    context: MakeContext
    controller: ReconciliationController
    manager: MakeManager
    application: QCoreApplication | None = None

    def document_saved(self, path: str | Path) -> bool:
        return self.controller.on_document_saved(path)


def activate(
    project_root: str | Path,
    parser: BuildOutputParser | None,
    prompt: SelectionPrompt,
    status: StatusDisplay | None = None,
    on_error: Callable[[str], None] | None = None,
    runner: ProcessRunner | None = None,
    workers: BackgroundWorkers | None = None,
    watch: bool = True,
) -> MakeTools:
    """Build the context for ``project_root`` and start reacting to changes.

    Dry-run discovery finishes on a worker thread and its results are queued
    to the thread that owns the pipeline. They reach the prompt only while a
    Qt event loop runs there. A ``QCoreApplication`` is created when none
    exists yet; GUI callers create their ``QApplication`` first.
    """

    application = QCoreApplication.instance() or QCoreApplication([])
    context = create_context(Path(project_root), parser, status=status, runner=runner, workers=workers)
    if on_error is not None:
        context.configurations.error_occurred.connect(on_error)
    initialize_from_settings(context)
    controller = ReconciliationController(context)
    controller.connect_sources()
    if watch:
        context.settings.start_watching()
    manager = MakeManager(context, prompt)
    logger.info("Make tools activated for %s", context.project_root)
    return MakeTools(context=context, controller=controller, manager=manager, application=application)


def deactivate(tools: MakeTools) -> None:
    tools.controller.disconnect_sources()
    shutdown(tools.context)
    logger.info("Make tools deactivated for %s", tools.context.project_root)
