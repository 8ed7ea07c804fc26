"""Tests for locale loading, fallback and dotted-key lookup."""

from __future__ import annotations

import http.client
import io
import json
import urllib.error

from homepage import localization
from homepage.localization import (
    FileLocaleSource,
    HttpLocaleSource,
    LocaleStore,
    get_translation_value,
    parse_locale,
    translate,
)


def test_translation_value_walks_nested_mappings():
    dictionary = {"a": {"b": "hi"}}

    assert get_translation_value(dictionary, "a.b") == "hi"
    assert get_translation_value(dictionary, "a.c") is None
    assert get_translation_value(dictionary, "a.b.c") is None
    assert get_translation_value(dictionary, "a") is None


def test_translation_value_ignores_non_string_leaves():
    dictionary = {"items": ["one"], "count": 3, "nested": {"flag": True}}

    assert get_translation_value(dictionary, "items") is None
    assert get_translation_value(dictionary, "count") is None
    assert get_translation_value(dictionary, "nested.flag") is None
    assert get_translation_value("not a mapping", "a") is None


def test_parse_locale_drops_invalid_leaves():
    parsed = parse_locale(json.dumps({"a": {"b": "ok", "c": [1]}, "d": 2, "e": None}))

    assert parsed == {"a": {"b": "ok"}}


def test_translate_prefers_primary_then_fallback():
    assert translate({"t": "Hallo"}, {"t": "Hello"}, "t") == "Hallo"
    assert translate({}, {"t": "Hello"}, "t") == "Hello"
    assert translate({}, {}, "t") == ""


def test_file_source_falls_back_to_default_on_malformed_json(tmp_path):
    (tmp_path / "de.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "en.json").write_text(json.dumps({"greeting": "Hello"}), encoding="utf-8")
    store = LocaleStore(FileLocaleSource(tmp_path), default_lang="en")

    assert store.load_locale("de") == {"greeting": "Hello"}
    assert not store.is_cached("de")
    assert store.is_cached("en")


def test_both_locales_failing_yields_empty_dictionary(tmp_path):
    (tmp_path / "de.json").write_text("[1, 2]", encoding="utf-8")
    store = LocaleStore(FileLocaleSource(tmp_path), default_lang="en")

    assert store.load_locale("de") == {}
    assert store.load_locale("en") == {}


def test_cache_serves_repeat_reads(locale_source):
    store = LocaleStore(locale_source, default_lang="en")

    first = store.load_locale("de")
    second = store.load_locale("de")

    assert first is second
    assert locale_source.fetches == ["de"]


def test_disabled_cache_reads_every_time(locale_source):
    store = LocaleStore(locale_source, default_lang="en", cache_enabled=False)

    store.load_locale("en")
    store.load_locale("en")

    assert locale_source.fetches == ["en", "en"]


def test_prime_seeds_the_cache(locale_source):
    store = LocaleStore(locale_source, default_lang="en")
    store.prime("de", {"home": {"title": "Vorab"}, "bad": 1})

    assert store.load_locale("de") == {"home": {"title": "Vorab"}}
    assert locale_source.fetches == []


def test_http_source_reads_json(monkeypatch):
    requested = []

    def fake_urlopen(request, timeout):
        requested.append((request.full_url, timeout))
        return io.BytesIO(json.dumps({"x": "y"}).encode("utf-8"))

    monkeypatch.setattr(localization.urllib.request, "urlopen", fake_urlopen)

    source = HttpLocaleSource("https://example.test/i18n/")

    assert source.fetch("de") == {"x": "y"}
    assert requested == [("https://example.test/i18n/de.json", 10)]


def test_http_errors_fall_back_to_default(monkeypatch):
    def fake_urlopen(request, timeout):
        if request.full_url.endswith("/de.json"):
            raise urllib.error.HTTPError(request.full_url, 404, "Not Found", {}, None)
        return io.BytesIO(json.dumps({"lang": "en"}).encode("utf-8"))

    monkeypatch.setattr(localization.urllib.request, "urlopen", fake_urlopen)
    store = LocaleStore(HttpLocaleSource("https://example.test/i18n"), default_lang="en")

    assert store.load_locale("de") == {"lang": "en"}


def test_undecodable_locale_file_falls_back_to_default(tmp_path):
    (tmp_path / "de.json").write_bytes(b'{"a": "\xff\xfe"}')
    (tmp_path / "en.json").write_text(json.dumps({"greeting": "Hello"}), encoding="utf-8")
    store = LocaleStore(FileLocaleSource(tmp_path), default_lang="en")

    assert store.load_locale("de") == {"greeting": "Hello"}
    assert not store.is_cached("de")


def test_deeply_nested_locale_falls_back_to_default(tmp_path):
    (tmp_path / "de.json").write_text("[" * 100000 + "]" * 100000, encoding="utf-8")
    (tmp_path / "en.json").write_text("{" + '"a": {' * 100000 + "}" * 100001, encoding="utf-8")
    store = LocaleStore(FileLocaleSource(tmp_path), default_lang="en")

    assert store.load_locale("de") == {}


def test_prime_ignores_overly_nested_dictionary(locale_source):
    nested = {}
    for _ in range(5000):
        nested = {"a": nested}
    store = LocaleStore(locale_source, default_lang="en")

    store.prime("de", nested)

    assert not store.is_cached("de")


def test_truncated_http_response_falls_back_to_default(monkeypatch):
    class TruncatedResponse(io.BytesIO):
        def read(self, *args):
            raise http.client.IncompleteRead(b'{"x"', 20)

    def fake_urlopen(request, timeout):
        if request.full_url.endswith("/de.json"):
            return TruncatedResponse()
        return io.BytesIO(json.dumps({"lang": "en"}).encode("utf-8"))

    monkeypatch.setattr(localization.urllib.request, "urlopen", fake_urlopen)
    store = LocaleStore(HttpLocaleSource("https://example.test/i18n"), default_lang="en")

    assert store.load_locale("de") == {"lang": "en"}
