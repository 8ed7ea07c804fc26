"""Mutable client-side state, owned by a single context object."""
from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .routing import DEFAULT_LANG


@dataclass
class NavigationState:
    open_dialog: Optional[str] = None
    last_focused: Optional[Callable[[], Any]] = None
    current_lang: str = DEFAULT_LANG

    def remember_focus(self, element: Any) -> None:
        self.last_focused = weakref.ref(element) if element is not None else None

    def focused_element(self) -> Any:
        """Return the remembered element if it has not been garbage collected."""

        return self.last_focused() if self.last_focused is not None else None


@dataclass
class ClientContext:
    """Everything one page session needs: state plus its browser collaborators.

    ``history``, ``storage`` and ``document`` are the interfaces described in
    :mod:`homepage.navigation` and :mod:`homepage.rendering`.
    """

    locales: Any
    history: Any
    storage: Any
    document: Any
    browser_languages: tuple = ()
    state: NavigationState = field(default_factory=NavigationState)
