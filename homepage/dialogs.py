"""Which dialog is open, and where focus returns once it closes.

The machine knows nothing about the DOM. Showing and hiding dialog elements
happens in observers registered by the binding layer.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional

from .routing import get_definition
from .state import NavigationState

logger = logging.getLogger(__name__)


class DialogObserver:
    """Receives transitions of a :class:`DialogStateMachine`."""

    def dialog_opened(self, key: str) -> None:
        pass

    def dialog_closed(self, key: str) -> None:
        pass


def _is_focusable(element: Any) -> bool:
    return bool(getattr(element, "is_connected", False)) and callable(getattr(element, "focus", None))


class DialogStateMachine:
    def __init__(self, state: NavigationState, observers: Optional[List[DialogObserver]] = None) -> None:
        self.state = state
        self.observers: List[DialogObserver] = list(observers or [])

    @property
    def open_dialog(self) -> Optional[str]:
        return self.state.open_dialog

    @property
    def is_open(self) -> bool:
        return self.state.open_dialog is not None

    def subscribe(self, observer: DialogObserver) -> None:
        self.observers.append(observer)

    def open(self, key: Optional[str], focused: Any = None) -> bool:
        """Open ``key``; an already open different dialog is closed first.

        The focus target is only captured when coming from the closed state,
        so closing a dialog reached by switching still returns focus to the
        element that opened the first one.
        """

        if get_definition(key) is None:
            logger.debug("Ignoring request to open unknown dialog %r", key)
            return False
        if self.state.open_dialog == key:
            return True

        if self.state.open_dialog is not None:
            self._notify_closed(self.state.open_dialog)
        else:
            self.state.remember_focus(focused)

        self.state.open_dialog = key
        for observer in self.observers:
            observer.dialog_opened(key)
        return True

    def close(self) -> Optional[str]:
        key = self.state.open_dialog
        if key is None:
            return None

        self.state.open_dialog = None
        self._notify_closed(key)

        element = self.state.focused_element()
        self.state.last_focused = None
        if element is not None and _is_focusable(element):
            element.focus()
        return key

    def _notify_closed(self, key: str) -> None:
        for observer in self.observers:
            observer.dialog_closed(key)
