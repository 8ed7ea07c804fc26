"""Localized URL paths and the dialog registry shared by server and client."""
from __future__ import annotations

import urllib.parse
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

SUPPORTED_LANGS: Tuple[str, ...] = ("de", "en")
DEFAULT_LANG = "en"
LANG_QUERY_PARAM = "lang"


@dataclass(frozen=True)
class DialogDefinition:
    key: str
    element_id: str
    path: str


DIALOGS: Tuple[DialogDefinition, ...] = (
    DialogDefinition(key="about", element_id="about-dialog", path="/about"),
    DialogDefinition(key="imprint", element_id="imprint-dialog", path="/imprint"),
    DialogDefinition(key="privacy", element_id="privacy-dialog", path="/privacy"),
)
DIALOG_KEYS: Tuple[str, ...] = tuple(definition.key for definition in DIALOGS)


@dataclass(frozen=True)
class LocalizedPath:
    """A pathname split into its optional language prefix and base path."""

    lang: Optional[str]
    base_path: str


@dataclass(frozen=True)
class RequestResolution:
    """Outcome of mapping an incoming request URL onto the canonical form."""

    lang: str
    base_path: str
    canonical_path: str
    search: str
    needs_redirect: bool

    @property
    def redirect_target(self) -> str:
        return f"{self.canonical_path}?{self.search}" if self.search else self.canonical_path


def is_supported_lang(value: object) -> bool:
    return isinstance(value, str) and value in SUPPORTED_LANGS


def normalize_base_path(pathname: str) -> str:
    if not pathname or pathname == "/":
        return "/"
    normalized = pathname if pathname.startswith("/") else f"/{pathname}"
    if len(normalized) > 1 and normalized.endswith("/"):
        normalized = normalized[:-1]
    return normalized


def split_localized_path(pathname: str) -> LocalizedPath:
    """Split ``/de/about`` into ``LocalizedPath("de", "/about")``.

    Paths without a recognised language prefix keep their full (normalized)
    path as the base path and report ``lang=None``.
    """

    segments = [segment for segment in (pathname or "").split("/") if segment]
    lang: Optional[str] = None
    if segments and is_supported_lang(segments[0]):
        lang = segments.pop(0)
    return LocalizedPath(lang=lang, base_path=normalize_base_path("/" + "/".join(segments)))


def build_localized_path(lang: str, base_path: str) -> str:
    normalized = normalize_base_path(base_path)
    return f"/{lang}" if normalized == "/" else f"/{lang}{normalized}"


def get_definition(key: Optional[str]) -> Optional[DialogDefinition]:
    for definition in DIALOGS:
        if definition.key == key:
            return definition
    return None


def get_key_by_path(base_path: str) -> Optional[str]:
    # First declared definition wins if two ever share a path.
    for definition in DIALOGS:
        if definition.path == base_path:
            return definition.key
    return None


def get_key_by_localized_path(pathname: str) -> Optional[str]:
    return get_key_by_path(split_localized_path(pathname).base_path)


def get_base_path_for_key(key: Optional[str]) -> str:
    definition = get_definition(key)
    return definition.path if definition else "/"


def canonical_base_paths() -> Iterable[str]:
    """Root first, then every dialog path in declaration order."""

    yield "/"
    for definition in DIALOGS:
        yield definition.path


def resolve_request(pathname: str, query_string: str = "") -> RequestResolution:
    """Pick the language for a request and tell whether it must be redirected.

    The path prefix wins over a ``?lang=`` parameter, which wins over the
    default language. The ``lang`` parameter is always stripped from the
    canonical URL.
    """

    localized = split_localized_path(pathname)
    params = urllib.parse.parse_qsl(query_string, keep_blank_values=True)
    query_langs = [value for name, value in params if name == LANG_QUERY_PARAM]
    query_lang = next((value for value in query_langs if is_supported_lang(value)), None)

    lang = localized.lang or query_lang or DEFAULT_LANG
    remaining = [(name, value) for name, value in params if name != LANG_QUERY_PARAM]
    search = urllib.parse.urlencode(remaining)
    canonical_path = build_localized_path(lang, localized.base_path)

    return RequestResolution(
        lang=lang,
        base_path=localized.base_path,
        canonical_path=canonical_path,
        search=search,
        needs_redirect=pathname != canonical_path or len(remaining) != len(params),
    )
