"""
api/session.py — 멀티유저 인메모리 브라우저 세션 (쿠키 기반)

각 브라우저에 UUID 세션 ID를 발급하고, 세션별로 로그인한 수험번호와 시험 엔진을 보관.
TTL 경과 시 자동 만료되며, 만료된 세션의 엔진 타이머는 해제된다.
시험 진행 상태 자체는 SessionStore에 저장되므로 재로그인하면 복원된다.
"""

import threading
import time
import uuid
from typing import Any

from config import SESSION_TTL

_lock = threading.Lock()
_sessions: dict[str, dict[str, Any]] = {}
_timestamps: dict[str, float] = {}


def _new_state() -> dict[str, Any]:
    return {
        "roll": "",
        "engine": None,
    }


def _close_engine(state: dict[str, Any]) -> None:
    engine = state.get("engine")
    if engine is not None:
        engine.close()


def create_session() -> str:
    """새 세션을 생성하고 세션 ID를 반환."""
    sid = uuid.uuid4().hex
    with _lock:
        _sessions[sid] = _new_state()
        _timestamps[sid] = time.time()
    return sid


def get_session(sid: str) -> dict[str, Any] | None:
    """세션 ID로 세션 데이터를 가져옴. 만료되었거나 없으면 None."""
    expired = None
    with _lock:
        if sid not in _sessions:
            return None
        if time.time() - _timestamps[sid] > SESSION_TTL:
            expired = _sessions.pop(sid)
            del _timestamps[sid]
        else:
            _timestamps[sid] = time.time()  # 접근 시 갱신
            return _sessions[sid]
    _close_engine(expired)
    return None


def get(sid: str, key: str, default=None):
    """세션에서 값 읽기."""
    session = get_session(sid)
    if session is None:
        return default
    return session.get(key, default)


def put(sid: str, key: str, value) -> None:
    """세션에 값 쓰기."""
    with _lock:
        if sid in _sessions:
            _sessions[sid][key] = value
            _timestamps[sid] = time.time()


def reset(sid: str) -> None:
    """세션 초기화 (로그아웃). 엔진 타이머 해제."""
    old = None
    with _lock:
        if sid in _sessions:
            old = _sessions[sid]
            _sessions[sid] = _new_state()
            _timestamps[sid] = time.time()
    if old is not None:
        _close_engine(old)


def cleanup_expired() -> int:
    """만료된 세션을 정리. 제거된 수 반환."""
    now = time.time()
    removed: list[dict[str, Any]] = []
    with _lock:
        expired = [sid for sid, ts in _timestamps.items() if now - ts > SESSION_TTL]
        for sid in expired:
            removed.append(_sessions.pop(sid))
            del _timestamps[sid]
    for state in removed:
        _close_engine(state)
    return len(removed)
