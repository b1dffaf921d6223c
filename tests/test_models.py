"""Tests for data models."""
from __future__ import annotations

import dataclasses

import pytest

from kana_trainer.models import DeckProfile, Entry, ParsedDeck, Section


class TestEntry:
    def test_create(self):
        e = Entry("を", ("o", "wo"), "o|wo")
        assert e.prompt == "を"
        assert e.answers == ("o", "wo")
        assert e.raw_answers == "o|wo"

    def test_frozen(self):
        e = Entry("あ", ("a",), "a")
        with pytest.raises(dataclasses.FrozenInstanceError):
            e.prompt = "い"


class TestSection:
    def test_items_not_shared(self):
        a, b = Section("A"), Section("B")
        a.items.append(Entry("あ", ("a",), "a"))
        assert b.items == []


class TestParsedDeck:
    def test_warnings_default(self):
        assert ParsedDeck(entries=[], sections=[]).warnings == []


class TestDeckProfile:
    def test_defaults(self):
        p = DeckProfile("kana", "kana.txt")
        assert (p.prompt_field, p.answer_field, p.columns) == ("kana", "romaji", 12)

