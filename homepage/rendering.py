"""Applying locale dictionaries to the page's DOM.

The document is anything offering ``query_all(attribute, scope=None)``,
``get_element(element_id)`` and ``set_lang(lang)``. Nodes offer
``get_attribute``/``set_attribute``, ``set_text`` and ``set_html``; dialog
elements additionally ``is_open``, ``show_modal()`` and ``close()``.
"""
from __future__ import annotations

import logging
import urllib.parse
from typing import Any, Optional

from .dialogs import DialogObserver
from .localization import LocaleDictionary, get_translation_value
from .routing import build_localized_path, get_definition, split_localized_path
from .state import ClientContext

logger = logging.getLogger(__name__)

I18N_ATTR = "data-i18n"
LANG_TOGGLE_ATTR = "data-lang"
BACKDROP_ATTR = "data-backdrop-for"
MARKUP_DELIMITER = "<"


def localize_href(href: Optional[str], lang: str) -> Optional[str]:
    """Swap the language segment of an internal localized link.

    External, protocol-relative, ``#anchor``, ``mailto:`` and ``tel:`` links
    and internal links without a language segment come back unchanged.
    """

    if not href or href.startswith("#") or href.startswith("//"):
        return href
    parts = urllib.parse.urlsplit(href)
    if parts.scheme or parts.netloc or not parts.path.startswith("/"):
        return href
    localized = split_localized_path(parts.path)
    if localized.lang is None:
        return href
    path = build_localized_path(lang, localized.base_path)
    return urllib.parse.urlunsplit(("", "", path, parts.query, parts.fragment))


class Renderer:
    def __init__(self, context: ClientContext) -> None:
        self.context = context

    @property
    def document(self) -> Any:
        return self.context.document

    @property
    def lang(self) -> str:
        return self.context.state.current_lang

    def render_page(self) -> None:
        dictionary = self.context.locales.load_locale(self.lang)
        self.document.set_lang(self.lang)
        self._apply(dictionary, scope=None)

    def render_modal(self, key: str) -> None:
        definition = get_definition(key)
        if definition is None:
            return
        dialog = self.document.get_element(definition.element_id)
        if dialog is None:
            logger.debug("Dialog element %s not present", definition.element_id)
            return
        dictionary = self.context.locales.load_locale(self.lang)
        dialog.set_attribute("lang", self.lang)
        self._apply(dictionary, scope=dialog)

    def _apply(self, dictionary: LocaleDictionary, scope: Any) -> None:
        for node in self.document.query_all(I18N_ATTR, scope):
            translate_node(node, dictionary)
        self.update_lang_toggles(scope)
        for link in self.document.query_all("href", scope):
            if link.get_attribute(LANG_TOGGLE_ATTR) is not None:
                continue
            href = link.get_attribute("href")
            localized = localize_href(href, self.lang)
            if localized != href:
                link.set_attribute("href", localized)

    def update_lang_toggles(self, scope: Any = None) -> None:
        for toggle in self.document.query_all(LANG_TOGGLE_ATTR, scope):
            pressed = toggle.get_attribute(LANG_TOGGLE_ATTR) == self.lang
            toggle.set_attribute("aria-pressed", "true" if pressed else "false")


def translate_node(node: Any, dictionary: LocaleDictionary) -> bool:
    path = node.get_attribute(I18N_ATTR)
    if not path:
        return False
    value = get_translation_value(dictionary, path)
    if value is None:
        return False
    if MARKUP_DELIMITER in value:
        node.set_html(value)
    else:
        node.set_text(value)
    return True


class DialogView(DialogObserver):
    """Shows and hides dialog elements as the state machine transitions."""

    def __init__(self, context: ClientContext, renderer: Renderer) -> None:
        self.context = context
        self.renderer = renderer

    def _element(self, key: str) -> Any:
        definition = get_definition(key)
        return self.context.document.get_element(definition.element_id) if definition else None

    def _remove_backdrop(self, element_id: str) -> None:
        # Server-rendered dialogs ship a manual backdrop the native one replaces.
        for backdrop in list(self.context.document.query_all(BACKDROP_ATTR)):
            if backdrop.get_attribute(BACKDROP_ATTR) == element_id:
                backdrop.remove()

    def dialog_opened(self, key: str) -> None:
        element = self._element(key)
        if element is not None and not element.is_open:
            element.show_modal()
            self._remove_backdrop(element.get_attribute("id"))
        self.renderer.render_modal(key)

    def dialog_closed(self, key: str) -> None:
        element = self._element(key)
        if element is not None and element.is_open:
            element.close()
            self._remove_backdrop(element.get_attribute("id"))
