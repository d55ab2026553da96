"""Selection prompt backed by a Qt item dialog."""
from __future__ import annotations

from typing import Sequence

from PySide6.QtWidgets import QInputDialog, QWidget


class QuickPick:
    def __init__(self, parent: QWidget | None = None, title: str = "Makefile Tools") -> None:
        self.parent = parent
        self.title = title

    def choose(self, items: Sequence[str], placeholder: str | None = None) -> str | None:
        label = placeholder or "Select an item"
        chosen, accepted = QInputDialog.getItem(self.parent, self.title, label, list(items), 0, False)
        if not accepted or not chosen:
            return None
        return chosen


class ConsolePrompt:
    """Numbered list on stdout, answer read from stdin."""

    def __init__(self, input_func=input, output_func=print) -> None:
        self._input = input_func
        self._print = output_func

    def choose(self, items: Sequence[str], placeholder: str | None = None) -> str | None:
        if not items:
            self._print(placeholder or "Nothing to select")
            return None
        for index, item in enumerate(items, start=1):
            self._print(f"{index:>3}. {item}")
        answer = self._input("Select: ").strip()
        if not answer.isdigit():
            return None
        position = int(answer) - 1
        if 0 <= position < len(items):
            return items[position]
        return None
