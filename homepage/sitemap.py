"""sitemap.xml with hreflang alternates for every localized page."""
from __future__ import annotations

from typing import List
from xml.sax.saxutils import escape, quoteattr

from .routing import SUPPORTED_LANGS, build_localized_path, canonical_base_paths


def generate_sitemap(base_url: str) -> str:
    base_url = base_url.rstrip("/")
    urls: List[str] = []

    for path in canonical_base_paths():
        alternates = "\n".join(
            f"    <xhtml:link rel=\"alternate\" hreflang=\"{lang}\" "
            f"href={quoteattr(base_url + build_localized_path(lang, path))} />"
            for lang in SUPPORTED_LANGS
        )
        priority = "1.0" if path == "/" else "0.8"
        for lang in SUPPORTED_LANGS:
            loc = escape(base_url + build_localized_path(lang, path))
            urls.append(
                "  <url>\n"
                f"    <loc>{loc}</loc>\n"
                f"{alternates}\n"
                "    <changefreq>monthly</changefreq>\n"
                f"    <priority>{priority}</priority>\n"
                "  </url>"
            )

    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9" '
        'xmlns:xhtml="http://www.w3.org/1999/xhtml">\n'
        + "\n".join(urls)
        + "\n</urlset>\n"
    )
