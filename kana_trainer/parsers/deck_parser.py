"""Parse plain-text deck files into Entry and Section objects.

Recognized lines:
  # Section title         (header; "# ====" and bare "#" are separators)
  "あ","a"                 (primary format)
  "日","nichi|jitsu|hi"    (several accepted answers separated by |)
  kana: "え", romaji: "e"  (legacy format, keys in either order)

Anything else is skipped with a warning. Both the flat entry list and the
section grouping come out of the same pass.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path

from kana_trainer.matcher import split_answers
from kana_trainer.models import DeckProfile, Entry, LineWarning, ParsedDeck, Section

log = logging.getLogger("kana_trainer.parser")

DEFAULT_SECTION = "Unlabeled"

_SEPARATOR_RE = re.compile(r"^=+$")


class QuotedPairFormat:
    """Full-line "prompt","answers"."""

    pattern = re.compile(r'^\s*"([^"]+)"\s*,\s*"([^"]+)"\s*$')

    def match(self, line: str) -> tuple[str, str] | None:
        m = self.pattern.match(line)
        if m:
            return m.group(1), m.group(2)
        return None


class KeyValueFormat:
    """Legacy key: "value" pairs found anywhere on the line."""

    def __init__(self, prompt_key: str = "kana", answer_key: str = "romaji"):
        self.prompt_key = prompt_key
        self.answer_key = answer_key
        self._prompt_re = re.compile(re.escape(prompt_key) + r'\s*:\s*"([^"]+)"')
        self._answer_re = re.compile(re.escape(answer_key) + r'\s*:\s*"([^"]+)"')

    def match(self, line: str) -> tuple[str, str] | None:
        p = self._prompt_re.search(line)
        a = self._answer_re.search(line)
        if p and a:
            return p.group(1), a.group(1)
        return None


def line_formats(profile: DeckProfile | None = None) -> tuple:
    """Entry formats in the order they are tried."""
    formats = [QuotedPairFormat()]
    if profile is not None and (profile.prompt_field, profile.answer_field) != ("kana", "romaji"):
        formats.append(KeyValueFormat(profile.prompt_field, profile.answer_field))
    formats.append(KeyValueFormat())
    return tuple(formats)


def header_title(line: str) -> str | None:
    """Return the section title of a header line, or None for separators."""
    title = line.lstrip("#").strip()
    if not title or _SEPARATOR_RE.match(title):
        return None
    return title


def parse_entry(line: str, formats) -> Entry | None:
    for fmt in formats:
        pair = fmt.match(line)
        if pair is None:
            continue
        prompt, raw = pair
        answers = split_answers(raw)
        if not answers:
            return None
        return Entry(prompt=prompt, answers=answers, raw_answers=raw)
    return None


def parse_deck(text: str, profile: DeckProfile | None = None) -> ParsedDeck:
    formats = line_formats(profile)
    entries: list[Entry] = []
    sections: list[Section] = []
    warnings: list[LineWarning] = []
    current = Section(DEFAULT_SECTION)

    for lineno, raw in enumerate(re.split(r"\r?\n", text), start=1):
        line = raw.strip()
        if not line:
            continue

        if line.startswith("#"):
            title = header_title(line)
            if title is None:
                continue
            if current.items:
                sections.append(current)
            current = Section(title)
            continue

        entry = parse_entry(line, formats)
        if entry is None:
            log.warning("Skipping invalid deck line %d: %s", lineno, line)
            warnings.append(LineWarning(lineno, line))
            continue
        entries.append(entry)
        current.items.append(entry)

    if current.items:
        sections.append(current)

    return ParsedDeck(entries=entries, sections=sections, warnings=warnings)


def parse_flat(text: str, profile: DeckProfile | None = None) -> list[Entry]:
    return parse_deck(text, profile).entries


def parse_sections(text: str, profile: DeckProfile | None = None) -> list[Section]:
    return parse_deck(text, profile).sections


def parse_deck_file(path: Path, profile: DeckProfile | None = None) -> ParsedDeck:
    return parse_deck(path.read_text(encoding="utf-8"), profile)
