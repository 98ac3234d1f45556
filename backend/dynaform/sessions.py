"""
In-memory registry of mounted form engines, one per page view.
"""

import logging
from uuid import uuid4

from .catalog import FieldCatalog
from .engine import FormEngine
from .exceptions import HandoffStoreError, SessionNotFoundError
from .handoff import HandoffStore
from .views import FormPhase, SubmitResult

logger = logging.getLogger(__name__)


class SessionRegistry:
    def __init__(self, catalog: FieldCatalog) -> None:
        self.catalog = catalog
        self._engines: dict[str, FormEngine] = {}

    def mount(self) -> tuple[str, FormEngine]:
        session_id = uuid4().hex
        engine = FormEngine(self.catalog)
        self._engines[session_id] = engine
        logger.info("Mounted form session %s", session_id)
        return session_id, engine

    def get(self, session_id: str) -> FormEngine:
        engine = self._engines.get(session_id)
        if engine is None:
            raise SessionNotFoundError(f"No form session {session_id}")
        return engine

    def unmount(self, session_id: str) -> None:
        if self._engines.pop(session_id, None) is None:
            raise SessionNotFoundError(f"No form session {session_id}")
        logger.info("Unmounted form session %s", session_id)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._engines

    async def submit(self, session_id: str, store: HandoffStore) -> SubmitResult:
        """Validate the session's form and, when valid, hand its values off and unmount it."""
        engine = self.get(session_id)
        result = engine.submit()
        if not result.valid:
            return result

        try:
            await store.write(session_id, result.values or {})
        except HandoffStoreError:
            # Keep the form open so the user can submit again.
            engine.phase = FormPhase.editing
            logger.exception("Hand-off failed for session %s", session_id)
            raise
        self._engines.pop(session_id, None)
        return result
