"""Session lifecycle on top of a shared MindArtifactStore."""

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone

from phasegate.domain.interfaces import MetricsInterface, MindSourceInterface
from phasegate.domain.models import Session

from .mind_store import MindArtifactStore

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Hands out run-scoped sessions that share one mind store.

    Sessions never share identity; the only thing two sessions of the same
    manager share is the cached bundle, by reference. Separate managers own
    separate stores and therefore separate caches.
    """

    def __init__(self, store: MindArtifactStore) -> None:
        self._store = store
        self._sessions: dict[str, Session] = {}

    @classmethod
    def for_source(
        cls, source: MindSourceInterface, metrics: MetricsInterface | None = None
    ) -> "SessionManager":
        """Create a manager with its own private store."""
        return cls(MindArtifactStore(source, metrics))

    @property
    def store(self) -> MindArtifactStore:
        return self._store

    @property
    def active_sessions(self) -> tuple[str, ...]:
        return tuple(self._sessions)

    async def open_session(self, session_id: str | None = None) -> Session:
        """
        Create a session bound to the current mind state.

        Raises:
            ValueError: If ``session_id`` is already open
        """
        sid = session_id or str(uuid.uuid4())
        if sid in self._sessions:
            raise ValueError(f"Session already open: {sid}")
        mind = await self._store.load()
        session = Session(
            session_id=sid,
            mind=mind,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self._sessions[sid] = session
        logger.debug(
            "Opened session %s (mind available: %s)", sid, session.mind_available
        )
        return session

    async def refresh_session(self, session_id: str) -> Session:
        """Rebind a session to whatever the store holds now."""
        session = self.get_session(session_id)
        mind = await self._store.load()
        if mind is not session.mind:
            session = replace(session, mind=mind)
            self._sessions[session_id] = session
            logger.info(
                "Session %s rebound to new mind state (available: %s)",
                session_id,
                session.mind_available,
            )
        return session

    def get_session(self, session_id: str) -> Session:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise KeyError(f"No open session: {session_id}") from None

    def close_session(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is not None:
            logger.debug("Closed session %s", session_id)
