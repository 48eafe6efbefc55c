"""UI composition container.

Keeps UI-only collaborators (window settings) outside of the application
container to preserve layer boundaries.
"""

from __future__ import annotations

from pathlib import Path

from serverdeck.application.container import Container as AppContainer
from serverdeck.ui.infrastructure.settings import AppSettings


class Container(AppContainer):
    def __init__(self, state_dir: Path | None = None) -> None:
        super().__init__(state_dir)
        self._settings: AppSettings | None = None

    @property
    def settings(self) -> AppSettings:
        if self._settings is None:
            self._settings = AppSettings()
        return self._settings


__all__ = ["Container"]
