from __future__ import annotations

import logging
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List

log = logging.getLogger(__name__)

DEFAULT_DB = os.getenv('TILESTACK_DB', os.path.join('data', 'leaderboard.db'))
TOP_N = 10

# Seeded into a brand-new table so the board never opens empty.
DEFAULT_ENTRIES = (
    ('阿米大魔王', 99999),
    ('Kittymi', 88888),
    ('消除大師', 77777),
    ('咩咩', 66666),
)


@dataclass(frozen=True)
class LeaderboardEntry:
    name: str
    score: int
    timestamp: str = ''

    def to_json(self) -> dict:
        return {'name': self.name, 'score': int(self.score), 'timestamp': self.timestamp}


PLACEHOLDER = LeaderboardEntry(name='connection failed', score=0)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='seconds').replace('+00:00', 'Z')


def _ensure_db_dir(db_path: str) -> None:
    """Creates the folder that will hold the score file, if it is missing."""
    directory = os.path.dirname(db_path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def _resolve_db_path(db_path: str) -> str:
    """Picks where the score file lives.

    The configured path wins when its folder can be created. Otherwise the
    file keeps its name and moves to TILESTACK_DB_DIR, ./data or /tmp, in that
    order, so a read-only deploy still records scores somewhere.
    """
    try:
        _ensure_db_dir(db_path)
        return db_path
    except PermissionError:
        log.warning("Leaderboard path %s is not writable, looking elsewhere", db_path)
    base = os.path.basename(db_path) or 'leaderboard.db'
    for d in (os.getenv('TILESTACK_DB_DIR'), os.path.join(os.getcwd(), 'data'), '/tmp'):
        if not d:
            continue
        try:
            os.makedirs(d, exist_ok=True)
        except OSError:
            continue
        return os.path.join(d, base)
    return base


def _connect(db_path: str) -> sqlite3.Connection:
    resolved = _resolve_db_path(db_path)
    conn = sqlite3.connect(resolved)
    try:
        _ensure_db(conn)
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def _ensure_db(conn: sqlite3.Connection) -> None:
    """Creates the scores table if needed and seeds defaults into an empty one."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS scores (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            score INTEGER NOT NULL,
            created_at TEXT NOT NULL
        )
        """
    )
    (count,) = conn.execute("SELECT COUNT(*) FROM scores").fetchone()
    if count == 0:
        stamp = _now_iso()
        conn.executemany(
            "INSERT INTO scores (name, score, created_at) VALUES (?, ?, ?)",
            [(name, score, stamp) for name, score in DEFAULT_ENTRIES],
        )
    conn.commit()


def _top(conn: sqlite3.Connection, limit: int) -> List[LeaderboardEntry]:
    cur = conn.execute(
        "SELECT name, score, created_at FROM scores ORDER BY score DESC, id ASC LIMIT ?",
        (int(limit),),
    )
    return [LeaderboardEntry(name=n, score=int(s), timestamp=t) for n, s, t in cur.fetchall()]


def validate_submission(name: object, score: object) -> None:
    if not isinstance(name, str) or not name.strip():
        raise ValueError('name must be a non-empty string')
    if isinstance(score, bool) or not isinstance(score, int):
        raise ValueError('score must be an integer')


def fetch_leaderboard(db_path: str = DEFAULT_DB, limit: int = TOP_N) -> List[LeaderboardEntry]:
    """Highest scores first."""
    conn = _connect(db_path)
    try:
        return _top(conn, limit)
    finally:
        conn.close()


def submit_score(db_path: str, name: str, score: int) -> List[LeaderboardEntry]:
    """Records a score, trims the table to the top 10, and returns them."""
    validate_submission(name, score)
    conn = _connect(db_path)
    try:
        conn.execute(
            "INSERT INTO scores (name, score, created_at) VALUES (?, ?, ?)",
            (name.strip(), int(score), _now_iso()),
        )
        keep = [row[0] for row in conn.execute(
            "SELECT id FROM scores ORDER BY score DESC, id ASC LIMIT ?", (TOP_N,)
        )]
        conn.execute(
            f"DELETE FROM scores WHERE id NOT IN ({','.join('?' * len(keep))})",
            keep,
        )
        conn.commit()
        return _top(conn, TOP_N)
    finally:
        conn.close()


def fetch_leaderboard_or_placeholder(db_path: str = DEFAULT_DB, limit: int = TOP_N) -> List[LeaderboardEntry]:
    """Leaderboard for display; a single placeholder row if the store cannot be read."""
    try:
        return fetch_leaderboard(db_path, limit)
    except (sqlite3.Error, OSError) as e:
        log.error("Error reading leaderboard %s: %s", db_path, e)
        return [PLACEHOLDER]


def submit_score_quietly(db_path: str, name: str, score: int) -> bool:
    """Fire-and-forget submission: failures are logged, never raised."""
    try:
        submit_score(db_path, name, score)
        return True
    except (sqlite3.Error, OSError, ValueError) as e:
        log.error("Failed to save score for %r: %s", name, e)
        return False
