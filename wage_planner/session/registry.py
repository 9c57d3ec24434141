"""
Per-session controllers. Sessions never share matrix state; a session's
actions are serialized through its controller's lock.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional

from .controller import StagingController

logger = logging.getLogger(__name__)

ControllerFactory = Callable[[str], StagingController]


class SessionRegistry:
    def __init__(self, factory: ControllerFactory):
        self._factory = factory
        self._lock = threading.Lock()
        self._sessions: Dict[str, StagingController] = {}

    def get_or_create(self, session_id: str) -> StagingController:
        with self._lock:
            controller = self._sessions.get(session_id)
            if controller is None:
                controller = self._factory(session_id)
                self._sessions[session_id] = controller
                logger.info(f"[SESSION] Created session '{session_id}'")
            return controller

    def get(self, session_id: str) -> Optional[StagingController]:
        with self._lock:
            return self._sessions.get(session_id)

    def drop(self, session_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info(f"[SESSION] Dropped session '{session_id}'")
        return removed

    def sessions(self) -> List[str]:
        with self._lock:
            return sorted(self._sessions)

    @contextmanager
    def session(self, session_id: str) -> Iterator[StagingController]:
        """Hold a session's lock across several actions (edit, then apply, ...)."""
        controller = self.get_or_create(session_id)
        with controller.lock:
            yield controller
