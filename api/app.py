"""
api/app.py — FastAPI 앱 인스턴스 + 세션 미들웨어 + static 파일 서빙
"""

import logging
import os
import threading
import time
from typing import Iterable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse

from config import (
    ALLOWED_ROLLS, QUESTION_BANK_FILE, SESSION_COOKIE, SESSION_DIR, SESSION_TTL, STATIC_DIR,
)
from api.routes import router
from api.sample_questions import load_question_bank
import api.session as session
from neet_cbt.services.question_bank import QuestionBank
from neet_cbt.services.session_store import JsonFileSessionStore, SessionStore

logger = logging.getLogger(__name__)


def create_app(
    bank: Optional[QuestionBank] = None,
    store: Optional[SessionStore] = None,
    allowed_rolls: Optional[Iterable[str]] = None,
    use_timers: bool = True,
    cleanup_interval: float = 300,
) -> FastAPI:
    app = FastAPI(title="NEET CBT", docs_url=None, redoc_url=None)

    # 앱 전역 의존성: 라우터에서 request.app.state로 접근
    app.state.bank = bank if bank is not None else load_question_bank(QUESTION_BANK_FILE)
    app.state.store = store if store is not None else JsonFileSessionStore(SESSION_DIR)
    app.state.allowed_rolls = list(allowed_rolls if allowed_rolls is not None else ALLOWED_ROLLS)
    app.state.use_timers = use_timers

    # CORS (모바일 브라우저 등 다양한 출처 허용)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 세션 미들웨어: 쿠키에서 세션 ID를 읽고, 없으면 새로 발급
    @app.middleware("http")
    async def session_middleware(request: Request, call_next):
        sid = request.cookies.get(SESSION_COOKIE)
        if not sid or session.get_session(sid) is None:
            sid = session.create_session()

        request.state.session_id = sid
        response: Response = await call_next(request)
        response.set_cookie(
            key=SESSION_COOKIE,
            value=sid,
            httponly=True,
            samesite="lax",
            max_age=SESSION_TTL,
        )
        return response

    app.include_router(router)

    # static 파일 마운트
    if os.path.isdir(STATIC_DIR):
        app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    # 루트 → index.html
    @app.get("/")
    async def serve_index():
        index_path = os.path.join(STATIC_DIR, "index.html")
        if os.path.exists(index_path):
            return FileResponse(index_path)
        return {"error": "index.html not found"}

    # 만료 세션 주기적 정리 (기본 5분마다)
    def _cleanup_loop():
        while True:
            time.sleep(cleanup_interval)
            removed = session.cleanup_expired()
            if removed:
                logger.info(f"만료 세션 {removed}개 정리")

    t = threading.Thread(target=_cleanup_loop, daemon=True)
    t.start()

    logger.info(
        f"NEET CBT 앱 생성: 문제 {app.state.bank.length()}개, 허용 수험번호 {len(app.state.allowed_rolls)}개"
    )
    return app
