"""Loading and lookup of per-language translation dictionaries."""
from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any, Dict, Optional

from .routing import DEFAULT_LANG

logger = logging.getLogger(__name__)

LocaleDictionary = Dict[str, Any]


class LocaleLoadError(Exception):
    """Raised by a locale source when a dictionary cannot be produced."""


def _validate_tree(node: Dict[Any, Any], prefix: str = "") -> LocaleDictionary:
    """Keep only string leaves and mapping nodes with string keys."""

    cleaned: LocaleDictionary = {}
    for key, value in node.items():
        dotted = f"{prefix}{key}"
        if not isinstance(key, str):
            logger.debug("Dropping non-string locale key %r", dotted)
        elif isinstance(value, str):
            cleaned[key] = value
        elif isinstance(value, dict):
            cleaned[key] = _validate_tree(value, prefix=f"{dotted}.")
        else:
            logger.debug("Dropping non-string locale leaf %s (%s)", dotted, type(value).__name__)
    return cleaned


def parse_locale(raw: str | bytes) -> LocaleDictionary:
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        raise LocaleLoadError(f"Invalid locale JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise LocaleLoadError("Locale root must be a JSON object")
    try:
        return _validate_tree(data)
    except RecursionError as exc:
        raise LocaleLoadError("Locale nesting too deep") from exc


class FileLocaleSource:
    """Reads ``{lang}.json`` from a directory on disk."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, lang: str) -> Path:
        return self.directory / f"{lang}.json"

    def fetch(self, lang: str) -> LocaleDictionary:
        path = self.path_for(lang)
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise LocaleLoadError(f"Cannot read {path}: {exc}") from exc
        return parse_locale(raw)


class HttpLocaleSource:
    """Fetches ``{base_url}/{lang}.json`` the way the browser does."""

    def __init__(self, base_url: str, timeout: float = 10) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def fetch(self, lang: str) -> LocaleDictionary:
        url = f"{self.base_url}/{lang}.json"
        request = urllib.request.Request(url, headers={"Cache-Control": "no-cache"})
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                raw = response.read()
        except (urllib.error.URLError, http.client.HTTPException, OSError) as exc:
            raise LocaleLoadError(f"i18n load failed for {url}: {exc}") from exc
        return parse_locale(raw)


class LocaleStore:
    """Cache-on-read access to locale dictionaries with one level of fallback."""

    def __init__(self, source, default_lang: str = DEFAULT_LANG, cache_enabled: bool = True) -> None:
        self.source = source
        self.default_lang = default_lang
        self.cache_enabled = cache_enabled
        self._cache: Dict[str, LocaleDictionary] = {}

    def is_cached(self, lang: str) -> bool:
        return lang in self._cache

    def prime(self, lang: str, dictionary: Dict[Any, Any]) -> None:
        if not isinstance(dictionary, dict):
            return
        try:
            self._cache[lang] = _validate_tree(dictionary)
        except RecursionError:
            logger.warning("Ignoring embedded locale %s: nesting too deep", lang)

    def load_locale(self, lang: str) -> LocaleDictionary:
        if self.cache_enabled and lang in self._cache:
            return self._cache[lang]

        try:
            dictionary = self.source.fetch(lang)
        except LocaleLoadError as exc:
            if lang != self.default_lang:
                logger.warning("Locale %s unavailable, falling back to %s: %s", lang, self.default_lang, exc)
                return self.load_locale(self.default_lang)
            logger.warning("Default locale %s unavailable: %s", lang, exc)
            return {}

        if self.cache_enabled:
            self._cache[lang] = dictionary
        return dictionary


def get_translation_value(dictionary: Any, dotted_path: str) -> Optional[str]:
    node: Any = dictionary
    for part in dotted_path.split("."):
        if not isinstance(node, dict):
            return None
        node = node.get(part)
    return node if isinstance(node, str) else None


def translate(primary: LocaleDictionary, fallback: LocaleDictionary, key: str) -> str:
    """Translator used by templates: requested locale, then default, then blank."""

    value = get_translation_value(primary, key)
    if value is None:
        value = get_translation_value(fallback, key)
    return value if value is not None else ""
