import uuid
import logging
import threading
from datetime import datetime, timezone
from typing import Optional

from sxew_app.models.schemas import ParameterSet, ResultSet
from sxew_app.services.economics import DEFAULT_REAGENT_BASES
from sxew_app.services.process_model import evaluate

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """
    In-process calculation sessions. Nothing is written to disk; a session
    lives as long as the process does.

    Every calculation request takes a revision number before it is evaluated.
    A finished evaluation is kept only if no newer revision has been stored
    for the session in the meantime (last write wins).
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: dict[str, dict] = {}
        self._revision = 0

    def _new_session(self, session_id: str) -> dict:
        params = ParameterSet()
        return {
            "id": session_id,
            "revision": 0,
            "inputs": params,
            "results": evaluate(params),
            "reagent_bases": dict(DEFAULT_REAGENT_BASES),
            "warnings": [],
            "analysis": None,
            "created_at": _now(),
            "updated_at": _now(),
        }

    # ========================================================================
    # SESSIONS
    # ========================================================================

    def create_session(self) -> dict:
        session_id = str(uuid.uuid4())
        session = self._new_session(session_id)
        with self._lock:
            self._sessions[session_id] = session
        logger.info("Created calculation session %s", session_id)
        return dict(session)

    def get_session(self, session_id: str) -> Optional[dict]:
        with self._lock:
            session = self._sessions.get(session_id)
            return dict(session) if session else None

    def get_or_create_session(self, session_id: Optional[str]) -> dict:
        if session_id:
            with self._lock:
                if session_id not in self._sessions:
                    self._sessions[session_id] = self._new_session(session_id)
                    logger.info("Created calculation session %s", session_id)
                return dict(self._sessions[session_id])
        return self.create_session()

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def reset_session(self, session_id: str) -> dict:
        fresh = self._new_session(session_id)
        with self._lock:
            self._revision += 1
            fresh["revision"] = self._revision
            self._sessions[session_id] = fresh
        logger.info("Reset calculation session %s to defaults", session_id)
        return dict(fresh)

    # ========================================================================
    # CALCULATIONS
    # ========================================================================

    def next_revision(self) -> int:
        with self._lock:
            self._revision += 1
            return self._revision

    def store_result(
        self,
        session_id: str,
        revision: int,
        inputs: ParameterSet,
        results: ResultSet,
        reagent_bases: dict,
        warnings: list,
    ) -> bool:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = self._new_session(session_id)
                self._sessions[session_id] = session
            if revision <= session["revision"]:
                logger.info(
                    "Discarding stale result for session %s (revision %d <= %d)",
                    session_id, revision, session["revision"],
                )
                return False
            session.update({
                "revision": revision,
                "inputs": inputs,
                "results": results,
                "reagent_bases": dict(reagent_bases),
                "warnings": list(warnings),
                "analysis": None,
                "updated_at": _now(),
            })
            return True

    def store_analysis(self, session_id: str, revision: int, analysis: dict) -> bool:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session["revision"] != revision:
                return False
            session["analysis"] = analysis
            return True


storage = SessionStore()
