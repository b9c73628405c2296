"""JSON-file-backed implementation of SessionStore."""

from __future__ import annotations

import json
from pathlib import Path

from pob.application.session import BuilderState, SessionStore
from pob.infrastructure.persistence.atomic_file import ensure_json_file, write_json_atomic


class JsonSessionStore(SessionStore):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- SessionStore interface -----------------------------------------------

    def get(self, session_id: str) -> BuilderState | None:
        raw = self._load_raw().get(session_id)
        if raw is None:
            return None
        return BuilderState.from_dict(raw)

    def save(self, session_id: str, state: BuilderState) -> None:
        sessions = self._load_raw()
        sessions[session_id] = state.to_dict()
        self._persist_raw(sessions)

    def delete(self, session_id: str) -> None:
        sessions = self._load_raw()
        if sessions.pop(session_id, None) is not None:
            self._persist_raw(sessions)

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict[str, dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, sessions: dict[str, dict]) -> None:
        write_json_atomic(self._file_path, sessions)

    def _ensure_file(self) -> None:
        ensure_json_file(self._file_path, {})
