"""Keeps dialog state, language and browser history in step.

``history`` must expose ``pathname`` and ``search`` plus
``push_state(state, url)`` and ``replace_state(state, url)``; ``storage``
offers ``get_item(key)`` and ``set_item(key, value)`` like ``localStorage``.
"""
from __future__ import annotations

import logging
import urllib.parse
from typing import Any, Dict, Iterable, Mapping, Optional

from .dialogs import DialogStateMachine
from .rendering import DialogView, Renderer
from .routing import (
    DEFAULT_LANG,
    LANG_QUERY_PARAM,
    SUPPORTED_LANGS,
    build_localized_path,
    get_base_path_for_key,
    get_definition,
    get_key_by_path,
    is_supported_lang,
    split_localized_path,
)
from .state import ClientContext

logger = logging.getLogger(__name__)

OPEN_ATTR = "data-open-dialog"
STORAGE_LANG_KEY = "lang"


def detect_browser_lang(languages: Iterable[Optional[str]]) -> str:
    """First browser language whose lowercase form starts with a supported code."""

    for candidate in languages:
        value = str(candidate or "").lower()
        for lang in SUPPORTED_LANGS:
            if value.startswith(lang):
                return lang
    return DEFAULT_LANG


def query_lang(search: str) -> Optional[str]:
    values = urllib.parse.parse_qs(search.lstrip("?")).get(LANG_QUERY_PARAM, [])
    return next((value for value in values if is_supported_lang(value)), None)


def _strip_lang_param(search: str) -> str:
    params = urllib.parse.parse_qsl(search.lstrip("?"), keep_blank_values=True)
    return urllib.parse.urlencode([(name, value) for name, value in params if name != LANG_QUERY_PARAM])


class NavigationSync:
    def __init__(
        self,
        context: ClientContext,
        machine: Optional[DialogStateMachine] = None,
        renderer: Optional[Renderer] = None,
    ) -> None:
        self.context = context
        self.renderer = renderer or Renderer(context)
        self.machine = machine or DialogStateMachine(context.state)
        self.machine.subscribe(DialogView(context, self.renderer))

    @property
    def history(self) -> Any:
        return self.context.history

    @property
    def lang(self) -> str:
        return self.context.state.current_lang

    def _active_element(self) -> Any:
        return getattr(self.context.document, "active_element", None)

    def open_dialog(self, key: Optional[str], update_url: bool = True, focused: Any = None) -> bool:
        if focused is None:
            focused = self._active_element()
        if not self.machine.open(key, focused=focused):
            return False
        if update_url:
            target = build_localized_path(self.lang, get_base_path_for_key(key))
            if self.history.pathname != target:
                self.history.push_state({"modal": key}, target)
        return True

    def close_dialog(self, update_url: bool = True) -> Optional[str]:
        key = self.machine.close()
        if key is None:
            return None
        if update_url:
            # The user may already have navigated away, e.g. with the back button.
            if self.history.pathname == build_localized_path(self.lang, get_base_path_for_key(key)):
                self.history.replace_state({}, build_localized_path(self.lang, "/"))
        return key

    def set_language(self, lang: Optional[str], sync_url: bool = False) -> bool:
        if not is_supported_lang(lang):
            logger.debug("Ignoring unsupported language %r", lang)
            return False

        self.context.state.current_lang = lang
        self.context.storage.set_item(STORAGE_LANG_KEY, lang)

        if sync_url:
            base_path = split_localized_path(self.history.pathname).base_path
            target = build_localized_path(lang, base_path)
            search = _strip_lang_param(self.history.search or "")
            state: Dict[str, str] = {"modal": self.machine.open_dialog} if self.machine.is_open else {}
            self.history.replace_state(state, f"{target}?{search}" if search else target)

        self.renderer.render_page()
        return True

    def handle_popstate(self) -> None:
        localized = split_localized_path(self.history.pathname)
        lang = localized.lang or query_lang(self.history.search or "")
        if lang and lang != self.lang:
            self.set_language(lang, sync_url=False)

        key = get_key_by_path(localized.base_path)
        if key:
            self.machine.open(key, focused=self._active_element())
        elif self.machine.is_open:
            self.machine.close()

    def handle_opener_click(self, trigger: Any) -> bool:
        return self.open_dialog(trigger.get_attribute(OPEN_ATTR), update_url=True, focused=self._active_element())

    def handle_close_click(self) -> None:
        self.close_dialog(update_url=True)

    def handle_cancel(self) -> None:
        """Escape / platform dismiss; routed through close so the URL follows."""

        self.close_dialog(update_url=True)

    def handle_dialog_click(self, key: str, target: Any) -> None:
        # Clicks on the ::backdrop report the dialog element itself as target.
        definition = get_definition(key)
        dialog = self.context.document.get_element(definition.element_id) if definition else None
        if dialog is None or target is dialog:
            self.close_dialog(update_url=True)

    def initialize(
        self,
        initial_state: Optional[Mapping[str, Any]] = None,
        embedded_locale: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Restore language and dialog from a deep link without touching history."""

        initial_state = initial_state or {}
        server_lang = initial_state.get("lang")
        if embedded_locale and is_supported_lang(server_lang):
            self.context.locales.prime(server_lang, dict(embedded_locale))

        self.set_language(self._initial_lang(server_lang), sync_url=False)

        key = initial_state.get("dialog")
        if get_definition(key) is None:
            key = get_key_by_path(split_localized_path(self.history.pathname).base_path)
        if key:
            self.machine.open(key, focused=self._active_element())

    def _initial_lang(self, server_lang: Any) -> str:
        candidates = (
            server_lang,
            split_localized_path(self.history.pathname).lang,
            query_lang(self.history.search or ""),
            self.context.storage.get_item(STORAGE_LANG_KEY),
        )
        for candidate in candidates:
            if is_supported_lang(candidate):
                return candidate
        return detect_browser_lang(self.context.browser_languages)
