"""Fetch deck text from a local file or an http(s) URL and parse it."""
from __future__ import annotations

import logging
import time
from pathlib import Path

import httpx

from kana_trainer.errors import DeckEmptyError, FetchError
from kana_trainer.models import DeckProfile, ParsedDeck
from kana_trainer.parsers.deck_parser import parse_deck

log = logging.getLogger("kana_trainer.loader")


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


async def fetch_deck_text(
    source: str,
    timeout: float = 30.0,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Return the deck file contents. Any failure raises FetchError, no retries."""
    if not is_url(source):
        path = Path(source)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise FetchError(source, 404, "file not found") from None
        except (OSError, UnicodeDecodeError) as e:
            raise FetchError(source, reason=str(e)) from e

    t0 = time.monotonic()
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as c:
                resp = await c.get(source)
        else:
            resp = await client.get(source)
    except httpx.HTTPError as e:
        raise FetchError(source, reason=str(e) or type(e).__name__) from e

    if not resp.is_success:
        raise FetchError(source, resp.status_code)
    log.info("Fetched %s (%d bytes, %.2fs)", source, len(resp.content), time.monotonic() - t0)
    return resp.text


def parse_loaded_text(text: str, profile: DeckProfile | None = None, source: str = "") -> ParsedDeck:
    """Parse fetched text, refusing decks with no usable entries."""
    parsed = parse_deck(text, profile)
    if not parsed.entries:
        raise DeckEmptyError(source)
    if parsed.warnings:
        log.warning("%s: skipped %d invalid line(s)", source or "deck", len(parsed.warnings))
    return parsed


async def load_deck(
    profile: DeckProfile,
    timeout: float = 30.0,
    client: httpx.AsyncClient | None = None,
) -> ParsedDeck:
    text = await fetch_deck_text(profile.path, timeout=timeout, client=client)
    parsed = parse_loaded_text(text, profile, source=profile.path)
    log.info(
        "Loaded deck %s: %d entries in %d sections",
        profile.name, len(parsed.entries), len(parsed.sections),
    )
    return parsed
