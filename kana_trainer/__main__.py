"""CLI entry point for kana-trainer.

Usage:
  uv run python -m kana_trainer serve [--port PORT] [--host HOST]
  uv run python -m kana_trainer stop
  uv run python -m kana_trainer restart [--port PORT]
  uv run python -m kana_trainer status
  uv run python -m kana_trainer decks
  uv run python -m kana_trainer check <deck name or file>
"""
from __future__ import annotations

import asyncio
import os
import signal
import sys
from pathlib import Path

PID_FILE = Path(__file__).resolve().parent.parent / ".server.pid"


def main():
    args = sys.argv[1:]
    command = args[0] if args else "serve"

    if command == "serve":
        _serve(args[1:])
    elif command == "stop":
        _stop()
    elif command == "restart":
        _restart(args[1:])
    elif command == "status":
        _status()
    elif command == "decks":
        _decks()
    elif command == "check":
        sys.exit(_check(args[1:]))
    else:
        print(f"Unknown command: {command}")
        print("Commands: serve, stop, restart, status, decks, check")
        sys.exit(1)


def _parse_flag(args: list[str], name: str, default: str) -> str:
    for i, a in enumerate(args):
        if a == name and i + 1 < len(args):
            return args[i + 1]
    return default


def _read_pid() -> int | None:
    """Read PID from file, return None if stale or missing."""
    if not PID_FILE.exists():
        return None
    try:
        pid = int(PID_FILE.read_text().strip())
        os.kill(pid, 0)
        return pid
    except (ValueError, ProcessLookupError, PermissionError):
        PID_FILE.unlink(missing_ok=True)
        return None


def _write_pid() -> None:
    PID_FILE.write_text(str(os.getpid()))


def _remove_pid() -> None:
    PID_FILE.unlink(missing_ok=True)


def _stop() -> bool:
    """Stop a running server. Returns True if a server was stopped."""
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
        return False
    try:
        os.kill(pid, signal.SIGTERM)
        print(f"Stopped server (PID {pid}).")
        PID_FILE.unlink(missing_ok=True)
        return True
    except ProcessLookupError:
        print("Server was not running (stale PID file removed).")
        PID_FILE.unlink(missing_ok=True)
        return False


def _status():
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
    else:
        print(f"Server is running (PID {pid}).")


def _restart(args: list[str]):
    import time
    _stop()
    time.sleep(1)
    _serve(args)


def _serve(args: list[str]):
    import uvicorn

    from kana_trainer.config import load_settings

    existing = _read_pid()
    if existing is not None:
        print(f"Server already running (PID {existing}). Use 'restart' or 'stop' first.")
        sys.exit(1)

    settings = load_settings()
    port = int(_parse_flag(args, "--port", str(settings.port)))
    host = _parse_flag(args, "--host", settings.host)
    _write_pid()

    print(f"Starting Kana Trainer on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")
    try:
        uvicorn.run(
            "kana_trainer.app:app",
            host=host,
            port=port,
            reload=False,
            timeout_graceful_shutdown=5,
        )
    finally:
        _remove_pid()


def _decks():
    from kana_trainer.config import load_settings

    settings = load_settings()
    for name in settings.deck_names():
        marker = "*" if name == settings.default_deck else " "
        raw = settings.decks[name]
        print(f" {marker} {name:10s} {raw.get('path', '')}  ({raw.get('columns', 12)} columns)")


def _check(args: list[str]) -> int:
    """Parse a deck and report what the quiz would see."""
    from kana_trainer.config import load_settings, resolve_deck_path
    from kana_trainer.errors import DeckLoadError
    from kana_trainer.loader import load_deck
    from kana_trainer.models import DeckProfile

    settings = load_settings()
    target = args[0] if args else settings.default_deck

    try:
        if target in settings.decks:
            profile = settings.profile(target)
        else:
            profile = DeckProfile(name=Path(target).stem, path=resolve_deck_path(target))
        parsed = asyncio.run(load_deck(profile, timeout=settings.fetch_timeout))
    except DeckLoadError as e:
        print(f"Error: {e}")
        return 1

    print(f"Deck: {profile.name} ({profile.path})")
    print("=" * 40)
    for section in parsed.sections:
        print(f"{section.title:30s} {len(section.items):4d}")
    print("-" * 40)
    print(f"{'Total entries':30s} {len(parsed.entries):4d}")
    if parsed.warnings:
        print(f"\n{len(parsed.warnings)} invalid line(s) skipped:")
        for w in parsed.warnings:
            print(f"  line {w.line_number}: {w.line}")
    return 0


if __name__ == "__main__":
    main()
