"""Template context for server-rendered pages."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from markupsafe import Markup

from .config import SiteConfig
from .localization import FileLocaleSource, LocaleStore, translate
from .rendering import MARKUP_DELIMITER
from .routing import (
    DEFAULT_LANG,
    DIALOGS,
    SUPPORTED_LANGS,
    build_localized_path,
    get_base_path_for_key,
)


@dataclass
class SiteContext:
    """Per-application state: configuration and the read-only locale cache."""

    config: SiteConfig
    locales: LocaleStore

    @classmethod
    def from_config(cls, config: SiteConfig) -> "SiteContext":
        store = LocaleStore(
            FileLocaleSource(config.locale_dir),
            default_lang=DEFAULT_LANG,
            cache_enabled=not config.is_dev,
        )
        return cls(config=config, locales=store)


def as_markup(value: str) -> Any:
    """Mark a translation as HTML when the client would also insert it as HTML."""

    return Markup(value) if MARKUP_DELIMITER in value else value


def hreflang_links(base_url: str, base_path: str) -> List[Dict[str, str]]:
    links = [
        {"lang": lang, "url": f"{base_url}{build_localized_path(lang, base_path)}"}
        for lang in SUPPORTED_LANGS
    ]
    links.append({"lang": "x-default", "url": f"{base_url}{build_localized_path(DEFAULT_LANG, base_path)}"})
    return links


def build_page_context(
    site: SiteContext,
    lang: str,
    dialog: Optional[str],
    base_path: str,
    *,
    is_404: bool = False,
) -> Dict[str, Any]:
    locale = site.locales.load_locale(lang)
    fallback = locale if lang == DEFAULT_LANG else site.locales.load_locale(DEFAULT_LANG)
    config = site.config

    # Not-found pages hydrate as the root page of their language.
    state_path = build_localized_path(lang, "/" if is_404 else base_path)

    return {
        "lang": lang,
        "initial_dialog": dialog,
        "t": lambda key: translate(locale, fallback, key),
        "t_html": lambda key: as_markup(translate(locale, fallback, key)),
        "path_for": lambda key: build_localized_path(lang, get_base_path_for_key(key)),
        "lang_path_for": lambda target, key: build_localized_path(target, get_base_path_for_key(key)),
        "initial_state": {"lang": lang, "dialog": dialog, "path": state_path},
        "dialogs": DIALOGS,
        "supported_langs": SUPPORTED_LANGS,
        "build_id": config.build_id,
        "is_dev": config.is_dev,
        "is_404": is_404,
        "i18n": None if (config.is_dev or is_404) else locale,
        "canonical_url": f"{config.base_url}{state_path}",
        "hreflangs": [] if is_404 else hreflang_links(config.base_url, base_path),
    }
