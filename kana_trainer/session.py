"""Quiz session state machine.

A controller starts IDLE, becomes READY once a deck is loaded (or ERROR if
loading failed) and moves to FEEDBACK after a correct answer. The advance
out of FEEDBACK is deferred by ``feedback_delay`` seconds and settled the
next time the controller is touched, so nothing runs in the background.
"""
from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from kana_trainer.errors import USER_MESSAGE
from kana_trainer.matcher import is_correct
from kana_trainer.models import DeckProfile, Entry

log = logging.getLogger("kana_trainer.session")

CORRECT = "Correct!"
TRY_AGAIN = "Try again"


class SessionPhase(str, Enum):
    IDLE = "idle"
    READY = "ready"
    FEEDBACK = "feedback"
    ERROR = "error"


@dataclass
class SessionState:
    current_index: int = 0
    correct_count: int = 0
    total_count: int = 0

    @property
    def score_text(self) -> str:
        return f"Score: {self.correct_count}/{self.total_count}"


@dataclass(frozen=True)
class SubmitResult:
    correct: bool
    feedback: str


def pick_next_index(size: int, current: int, rng: random.Random | None = None) -> int:
    """Uniform random index in [0, size) that differs from ``current``."""
    if size <= 1:
        return 0
    rng = rng or random
    # Draw from size-1 slots and skip over the current one.
    nxt = rng.randrange(size - 1)
    if nxt >= current:
        nxt += 1
    return nxt


class SessionController:
    def __init__(
        self,
        profile: DeckProfile | None = None,
        *,
        feedback_delay: float = 0.2,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.profile = profile
        self.feedback_delay = feedback_delay
        self.rng = rng or random.Random()
        self.clock = clock

        self.phase = SessionPhase.IDLE
        self.entries: list[Entry] = []
        self.state = SessionState()
        self.feedback = ""
        self.error = ""
        self.composing = False
        self.clear_input = False
        self.select_input = False
        self._advance_at: float | None = None

    # ── Lifecycle ────────────────────────────────────────────────────────

    def load(self, entries: Sequence[Entry]) -> None:
        if self.phase is not SessionPhase.IDLE:
            raise RuntimeError(f"Cannot load a deck in phase {self.phase.value}")
        if not entries:
            raise ValueError("Cannot start a session with an empty deck")
        self.entries = list(entries)
        self.state = SessionState()
        self.phase = SessionPhase.READY

    def fail(self, message: str = USER_MESSAGE) -> None:
        self.phase = SessionPhase.ERROR
        self.error = message
        self.feedback = message

    @property
    def current_entry(self) -> Entry | None:
        if not self.entries:
            return None
        return self.entries[self.state.current_index]

    def settle(self) -> None:
        """Run the deferred post-correct advance once its delay has elapsed."""
        if self.phase is not SessionPhase.FEEDBACK or self._advance_at is None:
            return
        if self.clock() < self._advance_at:
            return
        self._advance_at = None
        self.phase = SessionPhase.READY
        self._advance()

    def _advance(self) -> None:
        self.state.current_index = pick_next_index(
            len(self.entries), self.state.current_index, self.rng
        )
        self.feedback = ""
        self.clear_input = False
        self.select_input = False

    # ── User actions ─────────────────────────────────────────────────────

    def submit(self, text: str | None) -> SubmitResult | None:
        """Score an answer. Returns None when the submission was discarded."""
        self.settle()
        if self.phase is not SessionPhase.READY:
            return None
        if self.composing:
            # Enter during IME composition confirms the composition, not the answer.
            log.debug("Submit discarded: composition in progress")
            return None

        entry = self.current_entry
        correct = is_correct(text, entry)
        self.state.total_count += 1
        if correct:
            self.state.correct_count += 1
            self.feedback = CORRECT
            self.clear_input = True
            self.select_input = False
            self.phase = SessionPhase.FEEDBACK
            self._advance_at = self.clock() + self.feedback_delay
        else:
            self.feedback = TRY_AGAIN
            self.clear_input = False
            self.select_input = True
        log.debug("Answer %r for %s: %s (%s)", text, entry.prompt, correct, self.state.score_text)
        return SubmitResult(correct, self.feedback)

    def hint(self) -> str | None:
        self.settle()
        if self.phase is not SessionPhase.READY:
            return None
        self.feedback = f"Hint: {self.current_entry.raw_answers}"
        self.clear_input = False
        self.select_input = False
        return self.feedback

    def next_card(self) -> bool:
        self.settle()
        if self.phase is not SessionPhase.READY:
            return False
        self._advance()
        return True

    def composition_start(self) -> None:
        self.composing = True

    def composition_end(self) -> None:
        self.composing = False

    # ── View ─────────────────────────────────────────────────────────────

    def snapshot(self) -> dict:
        self.settle()
        entry = self.current_entry
        pending = None
        if self._advance_at is not None:
            pending = max(0, round((self._advance_at - self.clock()) * 1000))
        return {
            "phase": self.phase.value,
            "deck": self.profile.name if self.profile else None,
            "prompt": entry.prompt if entry and self.phase is not SessionPhase.ERROR else "",
            "feedback": self.feedback,
            "score": self.state.score_text,
            "correct_count": self.state.correct_count,
            "total_count": self.state.total_count,
            "current_index": self.state.current_index,
            "deck_size": len(self.entries),
            "composing": self.composing,
            "clear_input": self.clear_input,
            "select_input": self.select_input,
            "advance_in_ms": pending,
        }
