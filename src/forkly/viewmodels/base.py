"""Shared state for view models."""

from __future__ import annotations

from typing import Any

from forkly.core.observable import Observable


class ViewModel(Observable):
    """Observable holder of ``is_loading`` and ``error_message``.

    A view model changes its state through ``_update`` so subscribers see
    one notification per logical change.
    """

    def __init__(self) -> None:
        super().__init__()
        self.is_loading = False
        self.error_message: str | None = None
        self._generation = 0

    def _update(self, **changes: Any) -> None:
        for name, value in changes.items():
            setattr(self, name, value)
        self._notify()

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation
