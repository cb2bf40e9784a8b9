"""Durable session storage.

Keeps the bearer token and the minimal profile (display name, email) in a
SQLite database so that a session survives process restarts. Rows are keyed
by backend origin, so sessions for different servers never mix.

Storage failures are never surfaced: they are logged and read back as an
absent session, which leaves the user unauthenticated.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import aiosqlite
import httpx

from ..models import Session, UserProfile

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS session (
    origin TEXT PRIMARY KEY,
    token TEXT NOT NULL,
    display_name TEXT,
    email TEXT,
    saved_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


def origin_of(url: str) -> str:
    """Return the ``scheme://host[:port]`` origin of ``url``."""
    parsed = httpx.URL(url)
    origin = f"{parsed.scheme}://{parsed.host}"
    if parsed.port is not None:
        origin += f":{parsed.port}"
    return origin


class SessionStore:
    """Session persistence for a single backend origin.

    Usage::

        async with SessionStore("session.db", origin_of(base_url)) as store:
            await store.save(token, UserProfile(name="A", email="a@b.com"))
            session = await store.load()

    Args:
        db_path: Path to the SQLite file. Use ":memory:" for testing.
        origin: Backend origin the stored session belongs to.
    """

    def __init__(self, db_path: str | Path, origin: str) -> None:
        if isinstance(db_path, str) and db_path != ":memory:":
            db_path = Path(db_path)
        self.db_path = db_path
        self.origin = origin
        self._conn: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()

    async def __aenter__(self) -> SessionStore:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    async def connect(self) -> None:
        """Open the database and create the session table if needed."""
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug("Session store: %s (origin %s)", self.db_path, self.origin)
        self._conn = await aiosqlite.connect(str(self.db_path))
        self._conn.row_factory = aiosqlite.Row
        await self._conn.executescript(_SCHEMA)
        await self._conn.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def _ensure_connected(self) -> aiosqlite.Connection:
        if self._conn is None:
            await self.connect()
        assert self._conn is not None
        return self._conn

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def load(self) -> Session:
        """Read the persisted session.

        Returns:
            The stored session, or an empty (unauthenticated) session when
            nothing is stored or storage cannot be read.
        """
        try:
            conn = await self._ensure_connected()
            async with conn.execute(
                "SELECT token, display_name, email FROM session WHERE origin = ?",
                (self.origin,),
            ) as cursor:
                row = await cursor.fetchone()
        except (aiosqlite.Error, OSError) as e:
            logger.warning("Session storage unreadable, treating as logged out: %s", e)
            return Session()

        if row is None:
            return Session()
        return Session(
            token=row["token"],
            display_name=row["display_name"],
            email=row["email"],
        )

    async def save(self, token: str, profile: UserProfile) -> None:
        """Persist ``token`` and ``profile``, replacing any prior session."""
        try:
            conn = await self._ensure_connected()
            async with self._write_lock:
                await conn.execute(
                    """
                    INSERT INTO session (origin, token, display_name, email, saved_at)
                    VALUES (?, ?, ?, ?, datetime('now'))
                    ON CONFLICT(origin) DO UPDATE SET
                        token = excluded.token,
                        display_name = excluded.display_name,
                        email = excluded.email,
                        saved_at = excluded.saved_at
                    """,
                    (self.origin, token, profile.name, profile.email),
                )
                await conn.commit()
        except (aiosqlite.Error, OSError) as e:
            logger.warning("Failed to persist session for %s: %s", self.origin, e)
            return
        logger.info("Session saved for %s", profile.email or self.origin)

    async def clear(self) -> None:
        """Remove the token and profile fields for this origin."""
        try:
            conn = await self._ensure_connected()
            async with self._write_lock:
                await conn.execute("DELETE FROM session WHERE origin = ?", (self.origin,))
                await conn.commit()
        except (aiosqlite.Error, OSError) as e:
            logger.warning("Failed to clear session for %s: %s", self.origin, e)
            return
        logger.info("Session cleared for %s", self.origin)
