"""
Session lifecycle – restore on start, login, logout and change notification.

States: uninitialized -> restoring -> authenticated | anonymous.
``is_loading`` is only ever true while restore() runs.
"""

import logging
from typing import Callable, List, Optional

from evalconsole.credentials import is_expired
from evalconsole.models import Session, StoredCredentials

logger = logging.getLogger(__name__)

UNINITIALIZED = "uninitialized"
RESTORING = "restoring"
AUTHENTICATED = "authenticated"
ANONYMOUS = "anonymous"

Subscriber = Callable[[Session], None]


class SessionManager:
    """Owns the Session; everything else reads snapshots of it."""

    def __init__(self, client, store):
        self.client = client
        self.store = store
        self.state = UNINITIALIZED
        self._session = Session()
        self._subscribers: List[Subscriber] = []

    # ── Read side ────────────────────────────────────────────────────

    @property
    def session(self) -> Session:
        return self._session

    @property
    def token(self) -> Optional[str]:
        return self._session.token

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call *callback* with every new Session; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        return unsubscribe

    def _publish(self, session: Session) -> Session:
        self._session = session
        for callback in list(self._subscribers):
            callback(session)
        return session

    # ── Restore ──────────────────────────────────────────────────────

    def restore(self) -> Session:
        """Validate persisted credentials once per process."""
        if self.state != UNINITIALIZED:
            return self._session

        self.state = RESTORING
        self._publish(Session(is_loading=True))

        try:
            creds = self.store.load()
        except Exception as e:
            logger.warning("Could not read persisted credentials: %s", e)
            return self._finish_anonymous(clear=True)

        if creds is None or not creds.token:
            logger.info("No persisted credentials, starting anonymous")
            return self._finish_anonymous(clear=False)

        if is_expired(creds.token):
            logger.info("Persisted token has expired, discarding it")
            return self._finish_anonymous(clear=True)

        try:
            user = self.client.get_me(creds.token)
        except Exception as e:
            logger.warning("Session restore failed: %s", e)
            return self._finish_anonymous(clear=True)

        try:
            self.store.save(StoredCredentials(
                token=creds.token,
                refresh_token=creds.refresh_token,
                user=user.to_dict(),
            ))
        except Exception as e:
            logger.warning("Could not persist restored credentials: %s", e)
            return self._finish_anonymous(clear=True)

        self.state = AUTHENTICATED
        logger.info("Session restored for user %s (role=%s)", user.id, user.role_name or "-")
        return self._publish(Session(
            token=creds.token,
            refresh_token=creds.refresh_token,
            user=user,
            is_authenticated=True,
            is_loading=False,
        ))

    def _finish_anonymous(self, clear: bool) -> Session:
        if clear:
            try:
                self.store.clear()
            except Exception as e:
                logger.warning("Could not clear persisted credentials: %s", e)
        self.state = ANONYMOUS
        return self._publish(Session(is_loading=False))

    # ── Login / logout ───────────────────────────────────────────────

    def login(self, email: str, password: str) -> Session:
        """
        Authenticate and persist the credentials.
        On failure the current session is left as it was and the error propagates.
        """
        result = self.client.login(email, password)
        self.store.save(StoredCredentials(
            token=result.token,
            refresh_token=result.refresh_token,
            user=result.user.to_dict(),
        ))
        self.state = AUTHENTICATED
        logger.info("Logged in as user %s (role=%s)", result.user.id, result.user.role_name or "-")
        return self._publish(Session(
            token=result.token,
            refresh_token=result.refresh_token,
            user=result.user,
            is_authenticated=True,
            is_loading=False,
        ))

    def logout(self) -> Session:
        """Forget the session locally; the remote notification is best effort."""
        token = self._session.token
        if token:
            try:
                self.client.logout(token)
            except Exception as e:
                logger.warning("Logout notification failed, continuing locally: %s", e)
        try:
            self.store.clear()
        finally:
            self.state = ANONYMOUS
            self._publish(Session())
        return self._session
