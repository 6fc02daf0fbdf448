"""Session service - in-memory registry of game sessions for the HTTP API.

Sessions live only as long as the process. Oldest sessions are evicted
once the configured limit is reached.
"""

import logging
from uuid import uuid4

from dataentry.config import settings
from dataentry.core.game_controller import GameController, StageStore
from dataentry.services.stage_service import stage_service

logger = logging.getLogger("dataentry.services.sessions")


class SessionService:
    def __init__(self, store: StageStore | None = None, limit: int | None = None, **controller_options):
        self.store = store or stage_service
        self.limit = limit or settings.SESSION_LIMIT
        self._controller_options = controller_options
        self._sessions: dict[str, GameController] = {}

    def create(self) -> tuple[str, GameController]:
        """Create a new game on the intro screen."""
        while len(self._sessions) >= self.limit:
            oldest = next(iter(self._sessions))
            self.delete(oldest)
            logger.info("Evicted session %s (limit %d)", oldest, self.limit)

        session_id = uuid4().hex
        controller = GameController(self.store, **self._controller_options)
        self._sessions[session_id] = controller
        logger.info("Created session %s", session_id)
        return session_id, controller

    def get(self, session_id: str) -> GameController | None:
        return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        """Drop a session, cancelling any pending stage result. Returns False if unknown."""
        controller = self._sessions.pop(session_id, None)
        if controller is None:
            return False
        if controller.active_stage is not None:
            controller.active_stage.cancel()
        return True

    def __len__(self) -> int:
        return len(self._sessions)


session_service = SessionService()


def get_session_service() -> SessionService:
    """FastAPI dependency that returns the session registry."""
    return session_service
