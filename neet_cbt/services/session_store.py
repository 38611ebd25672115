"""
services/session_store.py

시험 세션 영속화.

SessionState 전체를 하나의 JSON 레코드로 저장한다. 필드 단위로 나눠 쓰지 않으므로
저장 도중 중단되어도 답안과 deadline이 어긋난 상태가 남지 않는다.
"""

import base64
import logging
import os
import tempfile
import threading
from typing import Dict, Optional, Protocol

from pydantic import ValidationError as SchemaError

from neet_cbt.errors import StorageCorruption
from neet_cbt.models.session_state import SessionState

logger = logging.getLogger(__name__)

STORAGE_KEY_PREFIX = "neet_session_"


class SessionStore(Protocol):
    def load(self, roll: str) -> Optional[SessionState]: ...

    def save(self, state: SessionState) -> None: ...

    def clear(self, roll: str) -> None: ...


def _decode(raw: str, roll: str) -> SessionState:
    """
    저장 레코드 해석.

    생성 시 기본값이 있는 필드도 저장 레코드에서는 모두 필수. 빠진 필드가 있으면 손상으로 본다.
    """
    try:
        state = SessionState.model_validate_json(raw)
    except SchemaError as e:
        raise StorageCorruption(f"Stored session for {roll!r} is unreadable: {e}") from e

    missing = set(SessionState.model_fields) - state.model_fields_set
    if missing:
        raise StorageCorruption(f"Stored session for {roll!r} is missing fields: {sorted(missing)}")
    if state.roll != roll:
        raise StorageCorruption(f"Stored session belongs to {state.roll!r}, expected {roll!r}")
    return state


class MemorySessionStore:
    """프로세스 메모리에 JSON 문자열로 보관 (테스트 / 단일 프로세스용)."""

    def __init__(self):
        self._lock = threading.Lock()
        self._records: Dict[str, str] = {}

    def load(self, roll: str) -> Optional[SessionState]:
        with self._lock:
            raw = self._records.get(roll)
        if raw is None:
            return None
        return _decode(raw, roll)

    def save(self, state: SessionState) -> None:
        raw = state.model_dump_json()
        with self._lock:
            self._records[state.roll] = raw

    def clear(self, roll: str) -> None:
        with self._lock:
            self._records.pop(roll, None)


class JsonFileSessionStore:
    """
    수험번호별 JSON 파일 저장소.

    파일명: neet_session_<urlsafe base64(roll)>.json (수험번호마다 서로 다른 파일)
    임시 파일에 먼저 쓰고 os.replace로 교체하여 원자적으로 기록한다.
    """

    def __init__(self, directory: str):
        self.directory = directory
        os.makedirs(directory, exist_ok=True)

    def _path(self, roll: str) -> str:
        key = base64.urlsafe_b64encode(roll.encode("utf-8")).decode("ascii").rstrip("=")
        return os.path.join(self.directory, f"{STORAGE_KEY_PREFIX}{key}.json")

    def load(self, roll: str) -> Optional[SessionState]:
        path = self._path(roll)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = f.read()
        except OSError as e:
            raise StorageCorruption(f"Cannot read stored session {path}: {e}") from e
        return _decode(raw, roll)

    def save(self, state: SessionState) -> None:
        path = self._path(state.roll)
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(state.model_dump_json())
            os.replace(tmp_path, path)
        except OSError as e:
            # 이번 저장만 실패, 다음 상태 변경 시 다시 기록된다
            logger.error(f"세션 저장 실패 ({state.roll}): {e}")
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def clear(self, roll: str) -> None:
        try:
            os.remove(self._path(roll))
        except FileNotFoundError:
            pass
