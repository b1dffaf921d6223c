from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from kana_trainer.errors import ConfigError
from kana_trainer.models import DeckProfile

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"
DECKS_DIR = Path(__file__).resolve().parent / "decks"

DEFAULTS = {
    "decks": {
        "kana": {
            "path": "kana.txt",
            "prompt_field": "kana",
            "answer_field": "romaji",
            "columns": 12,
            "title": "Kana Trainer",
        },
        "kanji": {
            "path": "kanji.txt",
            "prompt_field": "kanji",
            "answer_field": "reading",
            "columns": 5,
            "title": "Kanji Trainer",
        },
    },
    "default_deck": "kana",
    "feedback_delay_ms": 200,
    "fetch_timeout": 30.0,
    "max_sessions": 100,
    "session_idle_minutes": 120,
    "host": "127.0.0.1",
    "port": 8765,
}


def _default_decks() -> dict[str, dict]:
    return {name: dict(d) for name, d in DEFAULTS["decks"].items()}


@dataclass
class Settings:
    decks: dict[str, dict] = field(default_factory=_default_decks)
    default_deck: str = DEFAULTS["default_deck"]
    feedback_delay_ms: int = DEFAULTS["feedback_delay_ms"]
    fetch_timeout: float = DEFAULTS["fetch_timeout"]
    max_sessions: int = DEFAULTS["max_sessions"]
    session_idle_minutes: int = DEFAULTS["session_idle_minutes"]
    host: str = DEFAULTS["host"]
    port: int = DEFAULTS["port"]

    @property
    def feedback_delay(self) -> float:
        return self.feedback_delay_ms / 1000

    def deck_names(self) -> list[str]:
        return list(self.decks)

    def profile(self, name: str | None) -> DeckProfile:
        """Resolve a deck name to its profile, or raise ConfigError."""
        if not name:
            raise ConfigError('Missing data-deck on <body>, e.g. <body data-deck="kana">')
        raw = self.decks.get(name)
        if raw is None:
            raise ConfigError(f"Unknown deck: {name}")
        path = str(raw.get("path") or "").strip()
        if not path:
            raise ConfigError(f"Deck {name!r} has no path configured")
        return DeckProfile(
            name=name,
            path=resolve_deck_path(path),
            prompt_field=raw.get("prompt_field", "kana"),
            answer_field=raw.get("answer_field", "romaji"),
            columns=int(raw.get("columns", 12)),
            title=raw.get("title") or name,
        )

    def to_dict(self) -> dict:
        return {
            "decks": self.decks,
            "default_deck": self.default_deck,
            "feedback_delay_ms": self.feedback_delay_ms,
            "fetch_timeout": self.fetch_timeout,
            "max_sessions": self.max_sessions,
            "session_idle_minutes": self.session_idle_minutes,
            "host": self.host,
            "port": self.port,
        }


def resolve_deck_path(path: str) -> str:
    """URLs pass through; relative paths resolve against the bundled decks dir."""
    if path.startswith(("http://", "https://")):
        return path
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = DECKS_DIR / p
    return str(p)


def load_settings() -> Settings:
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
        known = {f.name for f in Settings.__dataclass_fields__.values()}
        filtered = {k: v for k, v in raw.items() if k in known}
        return Settings(**filtered)
    return Settings()


def save_settings(settings: Settings) -> None:
    CONFIG_PATH.write_text(
        json.dumps(settings.to_dict(), indent=4, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
