from __future__ import annotations

import logging
import os
import random
import sqlite3
import threading
import uuid
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Tuple

from flask import Flask, jsonify, request

from game import (
    DEFAULT_DB,
    GameConfig,
    GameController,
    GameMode,
    GameOver,
    Tile,
    fetch_leaderboard_or_placeholder,
    max_sessions_from_env,
    state_summary,
    submit_score,
    submit_score_quietly,
    validate_submission,
)

log = logging.getLogger(__name__)

LEADERBOARD_DB = DEFAULT_DB
MAX_SESSIONS = max_sessions_from_env()

app = Flask(__name__)

# Live games, keyed by an opaque session id handed to the client; least recently used first.
_SESSIONS: "OrderedDict[str, GameController]" = OrderedDict()
_SESSIONS_LOCK = threading.Lock()


def tile_to_json(t: Tile) -> Dict[str, Any]:
    return {
        "id": t.id,
        "type": t.type,
        "x": float(t.x),
        "y": float(t.y),
        "layer": int(t.layer),
        "hidden": bool(t.hidden),
    }


def state_to_json(c: GameController) -> Dict[str, Any]:
    summary = state_summary(c)
    return {
        "mode": c.mode.value,
        "phase": c.phase.value,
        "score": int(c.score),
        "combo": int(c.combo),
        "capacity": summary["capacity"],
        "player": c.player,
        "tiles": [tile_to_json(t) for t in c.board_tiles()],
        "collection": [{"id": t.id, "type": t.type} for t in c.collection],
    }


def _body() -> Dict[str, Any]:
    body = request.get_json(force=True, silent=True)
    return body if isinstance(body, dict) else {}


def _new_session() -> Tuple[str, GameController]:
    sid = uuid.uuid4().hex
    controller = GameController(GameConfig.from_env())
    _SESSIONS[sid] = controller
    while len(_SESSIONS) > MAX_SESSIONS:
        evicted, _ = _SESSIONS.popitem(last=False)
        log.info("Evicted idle session %s", evicted)
    return sid, controller


def _lookup(sid: Any) -> Optional[GameController]:
    if not isinstance(sid, str):
        return None
    controller = _SESSIONS.get(sid)
    if controller is not None:
        _SESSIONS.move_to_end(sid)
    return controller


def _not_found() -> Any:
    return jsonify({"ok": False, "error": "unknown session"}), 404


def _dispatch(events: List[GameOver]) -> None:
    """Hands finished-game events to the leaderboard; never affects the game."""
    for event in events:
        if event.should_submit and event.player:
            submit_score_quietly(LEADERBOARD_DB, event.player, event.score)


# ---------- Game API ----------

@app.post("/api/new")
def api_new() -> Any:
    body = _body()
    try:
        mode = GameMode(str(body.get("mode", "normal")))
    except ValueError:
        return jsonify({"ok": False, "error": f"unknown mode: {body.get('mode')!r}"}), 400
    seed = body.get("seed", None)
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, (int, str))):
        return jsonify({"ok": False, "error": "seed must be an integer or a string"}), 400
    name = body.get("name", None)

    with _SESSIONS_LOCK:
        sid = body.get("session")
        controller = _lookup(sid)
        if controller is None:
            sid, controller = _new_session()
        if seed is not None:
            controller.rng = random.Random(seed)
        if isinstance(name, str) and name.strip():
            controller.login(name)
        controller.init_game(mode)
        state = state_to_json(controller)
        events = controller.drain_events()
    _dispatch(events)
    return jsonify({"ok": True, "session": sid, "state": state})


@app.post("/api/click")
def api_click() -> Any:
    body = _body()
    tile_id = body.get("tileId")
    if not isinstance(tile_id, str) or not tile_id:
        return jsonify({"ok": False, "error": "tileId required"}), 400
    with _SESSIONS_LOCK:
        controller = _lookup(body.get("session"))
        if controller is None:
            return _not_found()
        result = controller.click(tile_id)
        state = state_to_json(controller)
        events = controller.drain_events()
    _dispatch(events)
    return jsonify({"ok": True, "result": result.value, "state": state})


@app.post("/api/state")
def api_state() -> Any:
    body = _body()
    with _SESSIONS_LOCK:
        controller = _lookup(body.get("session"))
        if controller is None:
            return _not_found()
        state = state_to_json(controller)
    return jsonify({"ok": True, "state": state})


@app.post("/api/menu")
def api_menu() -> Any:
    body = _body()
    with _SESSIONS_LOCK:
        controller = _lookup(body.get("session"))
        if controller is None:
            return _not_found()
        controller.return_to_menu()
        state = state_to_json(controller)
    return jsonify({"ok": True, "state": state})


@app.post("/api/login")
def api_login() -> Any:
    body = _body()
    name = body.get("name")
    if not isinstance(name, str) or not name.strip():
        return jsonify({"ok": False, "error": "name required"}), 400
    with _SESSIONS_LOCK:
        sid = body.get("session")
        controller = _lookup(sid)
        if controller is None:
            sid, controller = _new_session()
        controller.login(name)
        state = state_to_json(controller)
    return jsonify({"ok": True, "session": sid, "state": state})


@app.post("/api/logout")
def api_logout() -> Any:
    body = _body()
    with _SESSIONS_LOCK:
        controller = _lookup(body.get("session"))
        if controller is None:
            return _not_found()
        controller.logout()
        state = state_to_json(controller)
    return jsonify({"ok": True, "state": state})


# ---------- Leaderboard API ----------

@app.get("/api/leaderboard")
def api_leaderboard() -> Any:
    entries = fetch_leaderboard_or_placeholder(LEADERBOARD_DB)
    return jsonify([entry.to_json() for entry in entries])


@app.post("/api/leaderboard")
def api_leaderboard_submit() -> Any:
    body = _body()
    name = body.get("name")
    score = body.get("score")
    try:
        validate_submission(name, score)
    except ValueError as e:
        return jsonify({"ok": False, "error": f"Invalid data: {e}"}), 400
    try:
        top = submit_score(LEADERBOARD_DB, name, score)
    except (sqlite3.Error, OSError) as e:
        log.error("Error writing leaderboard: %s", e)
        return jsonify({"ok": False, "error": "Internal Server Error"}), 500
    return jsonify([entry.to_json() for entry in top])


# Entrypoint for "python app.py"
if __name__ == "__main__":
    logging.basicConfig(
        level=os.getenv("TILESTACK_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    debug = os.getenv("FLASK_DEBUG", os.getenv("DEBUG", "0")).lower() in ("1", "true", "yes", "on")
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")), debug=debug)
