"""Shared fixtures: an isolated Flask app and in-memory browser fakes."""

from __future__ import annotations

import json

import pytest

from homepage.app import create_app
from homepage.config import SiteConfig
from homepage.localization import LocaleLoadError, LocaleStore
from homepage.state import ClientContext

EN = {
    "meta": {"title": "Home", "description": "Personal site"},
    "nav": {"about": "About", "imprint": "Imprint", "privacy": "Privacy"},
    "home": {"title": "Hello", "tagline": "I build software"},
    "about": {"title": "About me", "body": "<p>Engineer</p>"},
    "imprint": {"title": "Imprint", "body": "Legal"},
    "notFound": {"title": "Not found"},
    "dialog": {"close": "Close"},
}
DE = {
    "meta": {"title": "Start"},
    "nav": {"about": "Über mich", "imprint": "Impressum", "privacy": "Datenschutz"},
    "home": {"title": "Hallo"},
    "about": {"title": "Über mich", "body": "<p>Entwickler</p>"},
    "imprint": {"title": "Impressum"},
    "notFound": {"title": "Nicht gefunden"},
    "dialog": {"close": "Schließen"},
}


@pytest.fixture()
def locale_dir(tmp_path):
    directory = tmp_path / "locales"
    directory.mkdir()
    (directory / "en.json").write_text(json.dumps(EN), encoding="utf-8")
    (directory / "de.json").write_text(json.dumps(DE), encoding="utf-8")
    return directory


@pytest.fixture()
def site_config(locale_dir):
    return SiteConfig(
        base_url="https://example.test",
        locale_dir=locale_dir,
        environment="production",
        build_id="test-build",
    )


@pytest.fixture()
def isolated_app(site_config):
    """Provide a Flask app reading locales from a temp directory."""

    flask_app = create_app(site_config)
    flask_app.config.update(TESTING=True)
    yield flask_app


@pytest.fixture()
def client(isolated_app):
    return isolated_app.test_client()


class DictLocaleSource:
    """Locale source backed by a dict; missing languages fail like a 404."""

    def __init__(self, locales):
        self.locales = locales
        self.fetches = []

    def fetch(self, lang):
        self.fetches.append(lang)
        if lang not in self.locales:
            raise LocaleLoadError(f"no locale {lang}")
        return self.locales[lang]


class FakeHistory:
    def __init__(self, pathname="/", search=""):
        self.pathname = pathname
        self.search = search
        self.entries = [({}, pathname)]
        self.pushes = []
        self.replacements = []

    def _navigate(self, url):
        path, _, query = url.partition("?")
        self.pathname = path
        self.search = f"?{query}" if query else ""

    def push_state(self, state, url):
        self.pushes.append((state, url))
        self.entries.append((state, url))
        self._navigate(url)

    def replace_state(self, state, url):
        self.replacements.append((state, url))
        self.entries[-1] = (state, url)
        self._navigate(url)

    def back_to(self, url):
        """Simulate the browser moving to ``url`` before popstate fires."""

        self._navigate(url)


class FakeStorage:
    def __init__(self, **items):
        self.items = dict(items)

    def get_item(self, key):
        return self.items.get(key)

    def set_item(self, key, value):
        self.items[key] = value


class FakeNode:
    def __init__(self, document, attrs=None, parent=None, text=""):
        self.document = document
        self.attrs = dict(attrs or {})
        self.parent = parent
        self.text = text
        self.html = None
        self.is_connected = True
        self.is_open = False
        self.focus_count = 0
        document.nodes.append(self)

    def get_attribute(self, name):
        return self.attrs.get(name)

    def set_attribute(self, name, value):
        self.attrs[name] = value

    def set_text(self, value):
        self.text = value
        self.html = None

    def set_html(self, value):
        self.html = value

    def show_modal(self):
        self.is_open = True

    def close(self):
        self.is_open = False

    def focus(self):
        self.focus_count += 1
        self.document.active_element = self

    def remove(self):
        self.is_connected = False
        self.document.nodes.remove(self)

    def within(self, scope):
        node = self.parent
        while node is not None:
            if node is scope:
                return True
            node = node.parent
        return False


class FakeDocument:
    def __init__(self):
        self.nodes = []
        self.lang = None
        self.active_element = None

    def add(self, parent=None, text="", **attrs):
        return FakeNode(self, {key.replace("_", "-"): value for key, value in attrs.items()}, parent, text)

    def query_all(self, attribute, scope=None):
        return [
            node
            for node in self.nodes
            if attribute in node.attrs and (scope is None or node.within(scope))
        ]

    def get_element(self, element_id):
        return next((node for node in self.nodes if node.attrs.get("id") == element_id), None)

    def set_lang(self, lang):
        self.lang = lang


def build_document():
    """A miniature page: headings, toggles, links and the three dialogs."""

    document = FakeDocument()
    document.add(text="Hello", data_i18n="home.title")
    document.add(text="keep me", data_i18n="home.missing")
    for code in ("de", "en"):
        document.add(data_lang=code, href=f"/{code}", aria_pressed="false")
    document.add(href="/en/about", data_open_dialog="about", data_i18n="nav.about")
    document.add(href="https://github.com/en/repo")
    document.add(href="mailto:hello@example.test")
    document.add(href="#top")
    for key in ("about", "imprint", "privacy"):
        dialog = document.add(id=f"{key}-dialog")
        document.add(parent=dialog, data_i18n=f"{key}.title")
        document.add(parent=dialog, data_i18n=f"{key}.body")
    return document


@pytest.fixture()
def locale_source():
    return DictLocaleSource({"en": EN, "de": DE})


@pytest.fixture()
def make_context(locale_source):
    def _make(pathname="/en", search="", stored_lang=None, languages=()):
        return ClientContext(
            locales=LocaleStore(locale_source, default_lang="en"),
            history=FakeHistory(pathname, search),
            storage=FakeStorage(lang=stored_lang) if stored_lang else FakeStorage(),
            document=build_document(),
            browser_languages=tuple(languages),
        )

    return _make
