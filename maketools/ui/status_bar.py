"""Status bar showing the active configuration, target and launch record."""
from __future__ import annotations

from PySide6.QtWidgets import QLabel, QStatusBar

from maketools.debugger.launch import NO_LAUNCH_CONFIGURATION
from maketools.workspace.selection import DEFAULT_CONFIGURATION, DEFAULT_TARGET_LABEL


class MakeStatusBar(QStatusBar):
    def __init__(self) -> None:
        super().__init__()
        self.configuration_label = QLabel(f"Configuration: {DEFAULT_CONFIGURATION}")
        self.configuration_label.setContentsMargins(0, 0, 8, 0)
        self.target_label = QLabel(f"Target: {DEFAULT_TARGET_LABEL}")
        self.launch_label = QLabel(NO_LAUNCH_CONFIGURATION)
        self.addPermanentWidget(self.configuration_label)
        self.addPermanentWidget(self.target_label)
        self.addPermanentWidget(self.launch_label)

    def set_configuration(self, name: str) -> None:
        self.configuration_label.setText(f"Configuration: {name}")

    def set_target(self, name: str) -> None:
        self.target_label.setText(f"Target: {name}")

    def set_launch_configuration(self, text: str) -> None:
        self.launch_label.setText(text)
        self.launch_label.setToolTip(text)