from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Entry:
    prompt: str
    answers: tuple[str, ...]
    raw_answers: str  # un-split answer field, shown in hints and tables


@dataclass
class Section:
    title: str
    items: list[Entry] = field(default_factory=list)


@dataclass(frozen=True)
class LineWarning:
    line_number: int
    line: str


@dataclass
class ParsedDeck:
    entries: list[Entry]
    sections: list[Section]
    warnings: list[LineWarning] = field(default_factory=list)


@dataclass(frozen=True)
class DeckProfile:
    name: str
    path: str
    prompt_field: str = "kana"
    answer_field: str = "romaji"
    columns: int = 12
    title: str = ""
