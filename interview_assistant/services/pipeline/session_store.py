"""
SQLite-backed storage of the resume and job-description text per session.

Both documents of a session are written in one transaction: a reader sees
either the previous pair or the new pair, never a mix.
"""
import asyncio
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Optional, Union

from interview_assistant.core.config import settings
from interview_assistant.schemas.interview import SessionDocuments

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS interview_sessions (
    session_id TEXT PRIMARY KEY,
    resume_text TEXT NOT NULL,
    job_description_text TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

UPSERT_SQL = """
INSERT INTO interview_sessions (session_id, resume_text, job_description_text, updated_at)
VALUES (?, ?, ?, strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
ON CONFLICT(session_id) DO UPDATE SET
    resume_text = excluded.resume_text,
    job_description_text = excluded.job_description_text,
    updated_at = excluded.updated_at;
"""

SELECT_SQL = """
SELECT resume_text, job_description_text
FROM interview_sessions
WHERE session_id = ?;
"""


class SessionStore:
    """
    Session documents keyed by session id. Last write wins.

    The sqlite3 calls are blocking, so the async methods run them in a worker
    thread. Each call opens its own connection.
    """

    def __init__(self, db_path: Union[str, Path] = settings.SESSION_DB_PATH):
        self.db_path = Path(db_path)
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        if not self._initialized:
            conn.execute(CREATE_TABLE_SQL)
            conn.commit()
            self._initialized = True
        return conn

    def save_sync(self, session_id: str, resume_text: str, job_description_text: str) -> None:
        with closing(self._connect()) as conn:
            # The connection context manager commits, or rolls back on error
            with conn:
                conn.execute(UPSERT_SQL, (session_id, resume_text, job_description_text))
        logger.info(
            f"Saved session documents for {session_id} "
            f"(resume {len(resume_text)} chars, job description {len(job_description_text)} chars)"
        )

    def get_sync(self, session_id: str) -> Optional[SessionDocuments]:
        with closing(self._connect()) as conn:
            row = conn.execute(SELECT_SQL, (session_id,)).fetchone()
        if row is None:
            return None
        return SessionDocuments(
            resume_text=row["resume_text"],
            job_description_text=row["job_description_text"],
        )

    async def save(self, session_id: str, resume_text: str, job_description_text: str) -> None:
        """Replace both documents of a session atomically."""
        await asyncio.to_thread(self.save_sync, session_id, resume_text, job_description_text)

    async def get(self, session_id: str) -> Optional[SessionDocuments]:
        """Documents for a session, or None when nothing was stored."""
        return await asyncio.to_thread(self.get_sync, session_id)
