"""Bilingual homepage: localized routing, dialogs and translations."""
from .app import create_app

__all__ = ["create_app"]
