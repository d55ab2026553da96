"""Main window wrapping the make tools for one project."""
from __future__ import annotations

import sys
from pathlib import Path

from PySide6.QtGui import QAction
from PySide6.QtWidgets import QApplication, QLabel, QMainWindow, QMessageBox, QToolBar

from maketools.app import MakeTools, activate, deactivate
from maketools.build.discovery import BuildOutputParser
from maketools.build.process import ProcessRunner
from maketools.build.resolution import EffectiveBuildSettings
from maketools.core.threads import BackgroundWorkers
from maketools.ui.quick_pick import QuickPick
from maketools.ui.status_bar import MakeStatusBar


class MakeToolsWindow(QMainWindow):
    """Toolbar commands, the effective command line and the selection status."""

    def __init__(
        self,
        project_root: Path,
        parser: BuildOutputParser | None = None,
        runner: ProcessRunner | None = None,
        workers: BackgroundWorkers | None = None,
        watch: bool = True,
    ) -> None:
        super().__init__()
        self.setWindowTitle(f"Make Tools - {Path(project_root).name}")
        self.resize(720, 160)

        self.status_bar = MakeStatusBar()
        self.setStatusBar(self.status_bar)
        self.command_label = QLabel()
        self.command_label.setContentsMargins(12, 12, 12, 12)
        self.setCentralWidget(self.command_label)
        self.prompt = QuickPick(self)

        self.tools: MakeTools | None = activate(
            project_root,
            parser,
            self.prompt,
            status=self.status_bar,
            on_error=self.show_error,
            runner=runner,
            workers=workers,
            watch=watch,
        )
        context = self.tools.context
        context.events.effective_changed.connect(self._show_effective)
        context.discovery.discovery_failed.connect(self._on_discovery_failed)
        self._show_effective(context.state.effective)
        self._build_actions(can_discover=parser is not None)

    def _build_actions(self, can_discover: bool) -> None:
        toolbar = QToolBar("Make", self)
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        self.configuration_action = QAction("Configuration...", self)
        self.configuration_action.triggered.connect(lambda: self.tools.manager.set_new_configuration())
        self.target_action = QAction("Target...", self)
        self.target_action.triggered.connect(lambda: self.tools.manager.set_new_target())
        self.launch_action = QAction("Launch Configuration...", self)
        self.launch_action.triggered.connect(lambda: self.tools.manager.set_new_launch_configuration())

        # Targets and launch records need a parser for the build output.
        self.target_action.setEnabled(can_discover)
        self.launch_action.setEnabled(can_discover)
        for action in (self.configuration_action, self.target_action, self.launch_action):
            toolbar.addAction(action)

    def _show_effective(self, effective: EffectiveBuildSettings) -> None:
        text = effective.command_line()
        if effective.build_log is not None:
            text += f"\nBuild log: {effective.build_log}"
        self.command_label.setText(text)

    def _on_discovery_failed(self, kind: str, message: str) -> None:
        self.show_error(f"Could not discover {kind}: {message}")

    def show_error(self, message: str) -> None:
        QMessageBox.critical(self, "Make Tools", message)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        if self.tools is not None:
            deactivate(self.tools)
            self.tools = None
        super().closeEvent(event)


def run_gui(project_root: Path, parser: BuildOutputParser | None = None) -> int:
    app = QApplication.instance() or QApplication(sys.argv)
    window = MakeToolsWindow(project_root, parser)
    window.show()
    return app.exec()
