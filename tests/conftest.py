"""Shared test fixtures."""
from __future__ import annotations

import random

import pytest

from kana_trainer.models import DeckProfile, Entry


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def sample_entries():
    """A small kanji deck with multi-answer entries."""
    return [
        Entry("日", ("nichi", "jitsu", "hi"), "nichi|jitsu|hi"),
        Entry("月", ("getsu", "gatsu", "tsuki"), "getsu|gatsu|tsuki"),
        Entry("山", ("san", "yama"), "san|yama"),
        Entry("川", ("sen", "kawa"), "sen|kawa"),
    ]


@pytest.fixture
def kanji_profile(tmp_path):
    return DeckProfile(
        name="kanji",
        path=str(tmp_path / "kanji.txt"),
        prompt_field="kanji",
        answer_field="reading",
        columns=5,
        title="Kanji Trainer",
    )


@pytest.fixture
def animals_deck():
    return '#Animals\n"犬","inu"\n"猫","neko"\n'


@pytest.fixture
def deck_txt_content():
    """Deck text exercising every line kind the parser understands."""
    return """\
# ====================
# Hiragana
# ====================
"あ","a"
"い","i"
  "を" , "o|WO"

# Legacy
kana: "え", romaji: "e"
romaji: "ka", kana: "か"

this line is junk
"ん","|"

#
# Numbers
"一","ichi|hito"
"""
