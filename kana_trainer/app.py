"""FastAPI application with all routes."""
from __future__ import annotations

import json
import logging
import time
import uuid
from html import escape
from pathlib import Path

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse

from kana_trainer.config import Settings, load_settings, save_settings
from kana_trainer.errors import USER_MESSAGE, ConfigError, DeckLoadError
from kana_trainer.loader import load_deck
from kana_trainer.render import inject_deck_tables
from kana_trainer.session import SessionController

app = FastAPI(title="Kana Trainer")

log = logging.getLogger("kana_trainer.app")

# Initialized in startup (or directly by tests)
_settings: Settings | None = None
_sessions: dict[str, SessionController] = {}  # least recently used first
_last_active: dict[str, float] = {}
_clock = time.monotonic


def get_settings() -> Settings:
    assert _settings is not None
    return _settings


def get_session(session_id: str) -> SessionController:
    _prune_sessions()
    controller = _sessions.pop(session_id, None)
    if controller is None:
        raise HTTPException(404, "Session not found")
    # Re-insert to keep _sessions ordered by last use.
    _sessions[session_id] = controller
    _last_active[session_id] = _clock()
    return controller


def _drop_session(session_id: str) -> SessionController | None:
    _last_active.pop(session_id, None)
    return _sessions.pop(session_id, None)


def _prune_sessions(room: int = 0) -> None:
    """Expire idle sessions, then evict the least recently used over the cap."""
    s = get_settings()
    cutoff = _clock() - s.session_idle_minutes * 60
    for sid in [sid for sid, t in _last_active.items() if t < cutoff]:
        _drop_session(sid)
        log.info("Session %s expired after %d idle minutes", sid, s.session_idle_minutes)
    while _sessions and len(_sessions) + room > s.max_sessions:
        sid = next(iter(_sessions))
        _drop_session(sid)
        log.info("Session %s evicted (limit %d)", sid, s.max_sessions)


async def _json_object(request: Request) -> dict | None:
    """Request body as a dict; None when it is missing, malformed or not an object."""
    raw = await request.body()
    if not raw:
        return None
    try:
        body = json.loads(raw)
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


async def _require_object(request: Request) -> dict:
    body = await _json_object(request)
    if body is None:
        raise HTTPException(400, "Expected a JSON object")
    return body


@app.on_event("startup")
async def startup():
    global _settings
    if _settings is not None:
        return  # Already initialized (e.g. by tests)
    _settings = load_settings()
    log.info("Decks configured: %s", ", ".join(_settings.deck_names()) or "(none)")


@app.on_event("shutdown")
async def shutdown():
    _sessions.clear()
    _last_active.clear()


# ── Pages & static files ──────────────────────────────────────────────────

static_dir = Path(__file__).parent / "static"


@app.get("/")
async def index():
    return FileResponse(static_dir / "index.html")


@app.get("/style.css")
async def style():
    return FileResponse(static_dir / "style.css", media_type="text/css")


@app.get("/app.js")
async def script():
    return FileResponse(static_dir / "app.js", media_type="application/javascript")


@app.get("/deck/{name}", response_class=HTMLResponse)
async def deck_page(name: str):
    s = get_settings()
    try:
        profile = s.profile(name)
    except ConfigError:
        raise HTTPException(404, f"Unknown deck: {name}")

    page = (static_dir / "quiz.html").read_text(encoding="utf-8")
    page = page.replace("{{deck}}", escape(profile.name, quote=True))
    page = page.replace("{{title}}", escape(profile.title, quote=True))

    # The reference tables are optional; the quiz still works without them.
    try:
        parsed = await load_deck(profile, timeout=s.fetch_timeout)
    except DeckLoadError as e:
        log.error("Deck tables unavailable for %s: %s", name, e)
        return page
    return inject_deck_tables(page, parsed.sections, profile.columns)


# ── API: Decks ────────────────────────────────────────────────────────────

@app.get("/api/decks")
async def api_decks():
    s = get_settings()
    decks = []
    for name, raw in s.decks.items():
        decks.append({
            "name": name,
            "title": raw.get("title") or name,
            "columns": raw.get("columns", 12),
        })
    return {"decks": decks, "default_deck": s.default_deck}


@app.get("/api/decks/{name}/sections")
async def api_deck_sections(name: str):
    s = get_settings()
    try:
        profile = s.profile(name)
        parsed = await load_deck(profile, timeout=s.fetch_timeout)
    except DeckLoadError as e:
        log.error("Failed to load deck %s: %s", name, e)
        return JSONResponse({"detail": USER_MESSAGE}, status_code=502)
    return {
        "deck": name,
        "columns": profile.columns,
        "entry_count": len(parsed.entries),
        "sections": [
            {
                "title": sec.title,
                "items": [{"prompt": e.prompt, "answers": e.raw_answers} for e in sec.items],
            }
            for sec in parsed.sections
        ],
        "warnings": [{"line_number": w.line_number, "line": w.line} for w in parsed.warnings],
    }


# ── API: Session ──────────────────────────────────────────────────────────

@app.post("/api/session/start")
async def api_session_start(request: Request):
    body = await _json_object(request) or {}
    s = get_settings()
    controller = SessionController(feedback_delay=s.feedback_delay)
    try:
        profile = s.profile(body.get("deck"))
        controller.profile = profile
        parsed = await load_deck(profile, timeout=s.fetch_timeout)
    except DeckLoadError as e:
        log.error("Error loading deck: %s", e)
        controller.fail(e.user_message)
        return JSONResponse({"detail": e.user_message, **controller.snapshot()}, status_code=502)

    controller.load(parsed.entries)
    _prune_sessions(room=1)
    session_id = uuid.uuid4().hex
    _sessions[session_id] = controller
    _last_active[session_id] = _clock()
    log.info("Session %s started on deck %s (%d cards)", session_id, profile.name, len(parsed.entries))
    return {"session_id": session_id, **controller.snapshot()}


@app.get("/api/session/{session_id}")
async def api_session_state(session_id: str):
    return get_session(session_id).snapshot()


@app.post("/api/session/{session_id}/answer")
async def api_session_answer(session_id: str, request: Request):
    controller = get_session(session_id)
    body = await _require_object(request)
    result = controller.submit(body.get("answer", ""))
    return {
        "accepted": result is not None,
        "correct": result.correct if result else None,
        "feedback_delay_ms": round(controller.feedback_delay * 1000),
        **controller.snapshot(),
    }


@app.post("/api/session/{session_id}/hint")
async def api_session_hint(session_id: str):
    controller = get_session(session_id)
    controller.hint()
    return controller.snapshot()


@app.post("/api/session/{session_id}/next")
async def api_session_next(session_id: str):
    controller = get_session(session_id)
    controller.next_card()
    return controller.snapshot()


@app.post("/api/session/{session_id}/composition")
async def api_session_composition(session_id: str, request: Request):
    controller = get_session(session_id)
    body = await _require_object(request)
    if body.get("composing"):
        controller.composition_start()
    else:
        controller.composition_end()
    return controller.snapshot()


@app.delete("/api/session/{session_id}")
async def api_session_end(session_id: str):
    controller = _drop_session(session_id)
    if controller is None:
        raise HTTPException(404, "Session not found")
    return {"ended": session_id, "score": controller.state.score_text}


# ── API: Settings ─────────────────────────────────────────────────────────

@app.get("/api/settings")
async def api_get_settings():
    return get_settings().to_dict()


@app.put("/api/settings")
async def api_update_settings(request: Request):
    body = await _require_object(request)
    s = get_settings()
    known = {f.name for f in Settings.__dataclass_fields__.values()}
    for k, v in body.items():
        if k in known:
            setattr(s, k, v)
    save_settings(s)
    return s.to_dict()
