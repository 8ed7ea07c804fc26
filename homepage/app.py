"""Flask application serving the localized homepage."""
from __future__ import annotations

import os
from typing import Optional

from flask import Flask, abort, jsonify, redirect, render_template, request, send_from_directory
from werkzeug.wrappers import Response

from .config import SiteConfig, load_config
from .pages import SiteContext, build_page_context
from .routing import get_key_by_path, is_supported_lang, resolve_request
from .sitemap import generate_sitemap

EXTENSION_KEY = "homepage"
PAGE_CACHE_CONTROL = "public, max-age=60, stale-while-revalidate=30"
NOT_FOUND_CACHE_CONTROL = "public, max-age=300, s-maxage=300, stale-while-revalidate=60"


def create_app(config: Optional[SiteConfig] = None) -> Flask:
    app = Flask(__name__)
    site = SiteContext.from_config(config or load_config())
    app.extensions[EXTENSION_KEY] = site

    @app.get("/healthz")
    def healthz() -> object:
        return jsonify({"status": "ok", "build_id": site.config.build_id})

    @app.get("/sitemap.xml")
    def sitemap() -> Response:
        response = Response(generate_sitemap(site.config.base_url), mimetype="application/xml")
        response.headers["Cache-Control"] = "no-store" if site.config.is_dev else "public, max-age=3600"
        return response

    @app.get("/i18n/<lang>.json")
    def locale_file(lang: str):
        if not is_supported_lang(lang):
            abort(404)
        response = send_from_directory(site.config.locale_dir, f"{lang}.json", mimetype="application/json")
        response.headers["Cache-Control"] = "no-cache"
        return response

    @app.get("/", defaults={"path": ""})
    @app.get("/<path:path>")
    def page(path: str):
        resolution = resolve_request(request.path, request.query_string.decode("utf-8", errors="replace"))
        if resolution.needs_redirect:
            app.logger.debug("Redirecting %s to %s", request.full_path, resolution.redirect_target)
            return redirect(resolution.redirect_target, code=302)

        dialog = None if resolution.base_path == "/" else get_key_by_path(resolution.base_path)
        if resolution.base_path != "/" and dialog is None:
            app.logger.info("No page for %s", request.path)
            return _render(site, resolution.lang, None, resolution.base_path, is_404=True)

        return _render(site, resolution.lang, dialog, resolution.base_path)

    return app


def _render(site: SiteContext, lang: str, dialog: Optional[str], base_path: str, *, is_404: bool = False) -> Response:
    context = build_page_context(site, lang, dialog, base_path, is_404=is_404)
    response = Response(render_template("index.html", **context), status=404 if is_404 else 200)
    response.headers["Content-Type"] = "text/html; charset=utf-8"
    if site.config.is_dev:
        response.headers["Cache-Control"] = "no-store"
    else:
        response.headers["Cache-Control"] = NOT_FOUND_CACHE_CONTROL if is_404 else PAGE_CACHE_CONTROL
    return response


app = create_app()


if __name__ == "__main__":
    port = int(os.getenv("PORT", "3000"))
    app.run(host=os.getenv("HOST", "0.0.0.0"), port=port, debug=app.extensions[EXTENSION_KEY].config.is_dev)
