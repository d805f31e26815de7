from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Optional

from rich.console import Console
from rich.theme import Theme

from rd_common.api import configure_logging
from rd_table.settings import TableSettings

THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "red",
        "success": "green",
        "accent": "#3ea6ff",
    }
)


@dataclass
class UIContext:
    """Container for UI services and state, initialized lazily."""

    settings_path: Optional[Path] = None
    stream: Optional[IO[str]] = None

    _console: Optional[Console] = None
    _settings: Optional[TableSettings] = None

    @property
    def console(self) -> Console:
        if self._console is None:
            self._console = Console(
                theme=THEME,
                file=self.stream or sys.stdout,
                highlight=False,
                soft_wrap=False,
            )
        return self._console

    @console.setter
    def console(self, value: Console) -> None:
        self._console = value

    @property
    def settings(self) -> TableSettings:
        if self._settings is None:
            if self.settings_path is not None:
                base = TableSettings.load(self.settings_path)
                self._settings = TableSettings.from_env(**base.model_dump(exclude_unset=True))
            else:
                self._settings = TableSettings.from_env()
        return self._settings

    @settings.setter
    def settings(self, value: TableSettings) -> None:
        self._settings = value

    def info(self, message: str) -> None:
        self.console.print(message, style="info", markup=False)

    def warning(self, message: str) -> None:
        self.console.print(message, style="warning", markup=False)

    def error(self, message: str) -> None:
        self.console.print(message, style="error", markup=False)

    def success(self, message: str) -> None:
        self.console.print(message, style="success", markup=False)


__all__ = [
    "UIContext",
    "configure_logging",
]
