from __future__ import annotations

import json
import os
import sqlite3
import threading
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

from app.core.config import settings

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        external_id TEXT NOT NULL UNIQUE,
        email TEXT,
        name TEXT,
        image_url TEXT,
        industry TEXT,
        experience INTEGER,
        bio TEXT,
        skills_json TEXT NOT NULL DEFAULT '[]',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS assessments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL REFERENCES users (id),
        score REAL NOT NULL,
        questions_json TEXT NOT NULL,
        category TEXT NOT NULL,
        improvement_tip TEXT,
        created_at TEXT NOT NULL
    );
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_assessments_user_created
    ON assessments (user_id, created_at);
    """,
)

_USER_COLUMNS = (
    "id, external_id, email, name, image_url, industry, experience, bio, skills_json, created_at, updated_at"
)
_ASSESSMENT_COLUMNS = "id, user_id, score, questions_json, category, improvement_tip, created_at"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _row_to_user(row: tuple) -> dict[str, Any]:
    return {
        "id": row[0],
        "external_id": row[1],
        "email": row[2],
        "name": row[3],
        "image_url": row[4],
        "industry": row[5],
        "experience": row[6],
        "bio": row[7],
        "skills": json.loads(row[8]) if row[8] else [],
        "created_at": datetime.fromisoformat(row[9]),
        "updated_at": datetime.fromisoformat(row[10]),
    }


def _row_to_assessment(row: tuple) -> dict[str, Any]:
    return {
        "id": row[0],
        "user_id": row[1],
        "score": row[2],
        "questions": json.loads(row[3]) if row[3] else [],
        "category": row[4],
        "improvement_tip": row[5],
        "created_at": datetime.fromisoformat(row[6]),
    }


class SqliteStore:
    """Users and assessment records in one sqlite file.

    One connection per store, shared across threads behind a lock.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def _get_connection(self) -> sqlite3.Connection:
        with self._lock:
            if self._conn is not None:
                return self._conn

            directory = os.path.dirname(self.db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            conn = sqlite3.connect(
                self.db_path,
                check_same_thread=False,
                timeout=5,
                isolation_level=None,
            )
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
            conn.execute("PRAGMA busy_timeout=5000;")
            conn.execute("PRAGMA foreign_keys=ON;")
            for statement in _SCHEMA:
                conn.execute(statement)
            self._conn = conn
            return conn

    def init_db(self) -> None:
        self._get_connection()

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def get_user_by_external_id(self, external_id: str) -> dict[str, Any] | None:
        conn = self._get_connection()
        with self._lock:
            cur = conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE external_id = ?",
                (external_id,),
            )
            row = cur.fetchone()
        return _row_to_user(row) if row else None

    def create_user(
        self,
        *,
        external_id: str,
        email: str | None = None,
        name: str | None = None,
        image_url: str | None = None,
    ) -> dict[str, Any]:
        conn = self._get_connection()
        now_iso = _utc_now().isoformat()
        with self._lock:
            conn.execute(
                """
                INSERT INTO users (external_id, email, name, image_url, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT (external_id) DO NOTHING
                """,
                (external_id, email, name, image_url, now_iso, now_iso),
            )
            cur = conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE external_id = ?",
                (external_id,),
            )
            row = cur.fetchone()
        return _row_to_user(row)

    def update_user_profile(
        self,
        user_id: int,
        *,
        industry: str,
        experience: int | None,
        bio: str | None,
        skills: list[str],
    ) -> dict[str, Any]:
        conn = self._get_connection()
        with self._lock:
            conn.execute(
                """
                UPDATE users
                SET industry = ?, experience = ?, bio = ?, skills_json = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    industry,
                    experience,
                    bio,
                    json.dumps(skills, ensure_ascii=False),
                    _utc_now().isoformat(),
                    user_id,
                ),
            )
            cur = conn.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?", (user_id,))
            row = cur.fetchone()
        if not row:
            raise sqlite3.IntegrityError(f"user {user_id} vanished during update")
        return _row_to_user(row)

    def create_assessment(
        self,
        *,
        user_id: int,
        score: float,
        questions: list[dict[str, Any]],
        category: str,
        improvement_tip: str | None,
    ) -> dict[str, Any]:
        conn = self._get_connection()
        created_at = _utc_now()
        with self._lock:
            cur = conn.execute(
                """
                INSERT INTO assessments (
                    user_id, score, questions_json, category, improvement_tip, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    score,
                    json.dumps(questions, ensure_ascii=False),
                    category,
                    improvement_tip,
                    created_at.isoformat(),
                ),
            )
            assessment_id = cur.lastrowid
        return {
            "id": assessment_id,
            "user_id": user_id,
            "score": score,
            "questions": questions,
            "category": category,
            "improvement_tip": improvement_tip,
            "created_at": created_at,
        }

    def list_assessments(self, user_id: int) -> list[dict[str, Any]]:
        conn = self._get_connection()
        with self._lock:
            cur = conn.execute(
                f"""
                SELECT {_ASSESSMENT_COLUMNS}
                FROM assessments
                WHERE user_id = ?
                ORDER BY created_at ASC, id ASC
                """,
                (user_id,),
            )
            rows = cur.fetchall()
        return [_row_to_assessment(row) for row in rows]


@lru_cache(maxsize=1)
def get_store() -> SqliteStore:
    return SqliteStore(settings.database_path)
