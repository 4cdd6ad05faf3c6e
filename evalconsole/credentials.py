"""
Persisted credential storage (token, refresh token, last known user).

The session manager is the only writer; every write is a full
replace or a clear.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

import jwt
from sqlalchemy import create_engine, text

from evalconsole.config import STATE_DB_URI
from evalconsole.models import StoredCredentials

logger = logging.getLogger(__name__)


# ── Token inspection ─────────────────────────────────────────────────

def credential_expiry(token: str) -> Optional[datetime]:
    """Expiry of a JWT bearer token, or None for opaque / exp-less tokens."""
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return None
    exp = claims.get("exp")
    if exp is None:
        return None
    try:
        return datetime.fromtimestamp(int(exp), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        return None


def is_expired(token: str, now: Optional[datetime] = None) -> bool:
    expiry = credential_expiry(token)
    if expiry is None:
        return False
    now = now or datetime.now(timezone.utc)
    return expiry <= now


# ── Stores ───────────────────────────────────────────────────────────

class MemoryCredentialStore:
    """Keeps credentials for the lifetime of the process only."""

    def __init__(self, initial: Optional[StoredCredentials] = None):
        self._creds = initial

    def load(self) -> Optional[StoredCredentials]:
        return self._creds

    def save(self, creds: StoredCredentials) -> None:
        self._creds = creds

    def clear(self) -> None:
        self._creds = None


class SqlCredentialStore:
    """Single-row credential table in any SQLAlchemy database (SQLite by default)."""

    def __init__(self, engine):
        self.engine = engine
        with self.engine.begin() as conn:
            conn.execute(text("""
                CREATE TABLE IF NOT EXISTS console_credentials (
                    id INTEGER PRIMARY KEY,
                    token TEXT NOT NULL,
                    refresh_token TEXT,
                    user_json TEXT,
                    saved_at TEXT
                )
            """))

    def load(self) -> Optional[StoredCredentials]:
        sql = text("""
            SELECT token, refresh_token, user_json
            FROM console_credentials
            WHERE id = 1
        """)
        with self.engine.connect() as conn:
            row = conn.execute(sql).mappings().first()
        if not row:
            return None

        user = None
        if row["user_json"]:
            try:
                user = json.loads(row["user_json"])
            except ValueError:
                logger.warning("Stored user payload is not valid JSON, ignoring it")
        return StoredCredentials(token=row["token"], refresh_token=row["refresh_token"], user=user)

    def save(self, creds: StoredCredentials) -> None:
        with self.engine.begin() as conn:
            conn.execute(text("DELETE FROM console_credentials"))
            conn.execute(
                text("""
                    INSERT INTO console_credentials (id, token, refresh_token, user_json, saved_at)
                    VALUES (1, :token, :refresh_token, :user_json, :saved_at)
                """),
                {
                    "token": creds.token,
                    "refresh_token": creds.refresh_token,
                    "user_json": json.dumps(creds.user) if creds.user is not None else None,
                    "saved_at": datetime.now(timezone.utc).isoformat(),
                },
            )

    def clear(self) -> None:
        with self.engine.begin() as conn:
            conn.execute(text("DELETE FROM console_credentials"))


def init_credential_store(db_uri: str = STATE_DB_URI) -> SqlCredentialStore:
    """Create the SQL-backed store for *db_uri*."""
    engine = create_engine(db_uri, echo=False, future=True)
    return SqlCredentialStore(engine)
