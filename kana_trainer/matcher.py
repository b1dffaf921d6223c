"""Answer normalization and correctness checks."""
from __future__ import annotations

from kana_trainer.models import Entry


def normalize_answer(text: str | None) -> str:
    return (text or "").strip().lower()


def split_answers(raw: str) -> tuple[str, ...]:
    """Split a pipe-delimited answer field: "o|wo" -> ("o", "wo")."""
    return tuple(a for a in (normalize_answer(p) for p in raw.split("|")) if a)


def is_correct(submitted: str | None, entry: Entry) -> bool:
    # Typing the character itself counts, compared case-sensitively.
    typed = (submitted or "").strip()
    if typed == entry.prompt:
        return True
    return normalize_answer(typed) in entry.answers
