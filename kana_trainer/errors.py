"""Deck loading errors.

Every fatal load failure derives from DeckLoadError so the web layer can
catch one type and show the same message regardless of cause.
"""
from __future__ import annotations

USER_MESSAGE = "Error loading deck. Check console (F12)."


class DeckLoadError(Exception):
    user_message = USER_MESSAGE


class ConfigError(DeckLoadError):
    """No usable deck path configured for the page."""


class FetchError(DeckLoadError):
    def __init__(self, source: str, status: int | None = None, reason: str = ""):
        self.source = source
        self.status = status
        detail = f"Failed to load deck file: {source}"
        if status is not None:
            detail += f" ({status})"
        if reason:
            detail += f": {reason}"
        super().__init__(detail)


class DeckEmptyError(DeckLoadError):
    def __init__(self, source: str = ""):
        self.source = source
        msg = "Deck loaded, but no valid entries were parsed."
        if source:
            msg = f"{msg} ({source})"
        super().__init__(msg)
