"""
api/routes.py — FastAPI 엔드포인트
"""

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

import api.session as session
from neet_cbt.errors import IndexOutOfRange
from neet_cbt.models.question_model import QuestionRecord
from neet_cbt.models.session_state import ExamPhase
from neet_cbt.services.auth import MSG_ROLL_REQUIRED, authenticate
from neet_cbt.services.exam_engine import ExamEngine
from neet_cbt.services.exam_service import format_hhmmss

router = APIRouter()

# ── Pydantic request bodies ──────────────────────────────────────────────────

class LoginBody(BaseModel):
    roll: str = ""

class SelectOptionBody(BaseModel):
    question_id: int
    option: int

class ReviewBody(BaseModel):
    question_id: int

class NavigateBody(BaseModel):
    index: int = 0

class SubjectBody(BaseModel):
    subject: str


# ── 헬퍼 ─────────────────────────────────────────────────────────────────────

def _question_to_dict(q: QuestionRecord) -> dict:
    return {
        "id": q.id,
        "subject": q.subject.value,
        "prompt": q.prompt,
        "options": list(q.options),
        "placeholder": q.is_placeholder,
    }


def _engine(request: Request) -> ExamEngine:
    engine: ExamEngine | None = session.get(request.state.session_id, "engine")
    if engine is None:
        raise HTTPException(status_code=401, detail="Login required.")
    return engine


def _exam_state(engine: ExamEngine) -> dict:
    state = engine.snapshot()
    time_left = engine.time_left_seconds()
    return {
        "roll": state.roll,
        "phase": engine.phase.value,
        "current_index": state.current_index,
        "time_left": time_left,
        "time_left_display": format_hhmmss(time_left),
        "deadline": state.deadline,
        "answers": {str(k): v for k, v in state.answers.items()},
        "marked": sorted(state.marked),
        "statuses": [s.value for s in engine.statuses()],
        "question_ids": [q.id for q in engine.bank],
        "total": engine.bank.length(),
        "answered_count": len(state.answers),
        "subjects": [s.value for s in engine.subjects()],
    }


def _action_result(engine: ExamEngine, accepted: bool) -> dict:
    state = engine.snapshot()
    return {
        "ok": accepted,
        "notice": engine.last_notice,
        "phase": engine.phase.value,
        "current_index": state.current_index,
        "answered_count": len(state.answers),
        "marked_count": len(state.marked),
    }


# ── 엔드포인트 ───────────────────────────────────────────────────────────────

@router.post("/login")
async def login(body: LoginBody, request: Request):
    result = authenticate(body.roll, request.app.state.allowed_rolls)
    if not result.success:
        status = 400 if result.message == MSG_ROLL_REQUIRED else 403
        return JSONResponse(status_code=status, content={"success": False, "message": result.message})

    sid = request.state.session_id
    engine: ExamEngine | None = session.get(sid, "engine")
    reuse = (
        engine is not None
        and engine.roll == result.roll
        and engine.phase in (ExamPhase.IN_PROGRESS, ExamPhase.TIME_EXPIRED)
    )
    if not reuse:
        session.reset(sid)
        engine = ExamEngine(
            request.app.state.bank,
            request.app.state.store,
            use_timer=request.app.state.use_timers,
        )
        engine.login(result.roll)
        session.put(sid, "roll", result.roll)
        session.put(sid, "engine", engine)

    time_left = engine.time_left_seconds()
    return {
        "success": True,
        "roll": result.roll,
        "phase": engine.phase.value,
        "time_left": time_left,
        "time_left_display": format_hhmmss(time_left),
    }


@router.post("/logout")
async def logout(request: Request):
    sid = request.state.session_id
    engine: ExamEngine | None = session.get(sid, "engine")
    if engine is not None:
        engine.logout()
    session.reset(sid)
    return {"ok": True}


@router.get("/api/exam-state")
async def get_exam_state(request: Request):
    return _exam_state(_engine(request))


@router.get("/api/question/{index}")
async def get_question(index: int, request: Request):
    engine = _engine(request)
    try:
        q = engine.bank.get(index)
    except IndexOutOfRange:
        raise HTTPException(status_code=404, detail="Question not found.")

    state = engine.snapshot()
    d = _question_to_dict(q)
    d.update({
        "saved_answer": state.answers.get(q.id),
        "marked": q.id in state.marked,
        "status": engine.question_status(q.id).value,
        "index": index,
        "total": engine.bank.length(),
    })
    return d


@router.post("/api/select-option")
async def select_option(body: SelectOptionBody, request: Request):
    engine = _engine(request)
    accepted = engine.select_option(body.question_id, body.option)
    return _action_result(engine, accepted)


@router.post("/api/toggle-review")
async def toggle_review(body: ReviewBody, request: Request):
    engine = _engine(request)
    accepted = engine.toggle_review(body.question_id)
    return _action_result(engine, accepted)


@router.post("/api/navigate")
async def navigate(body: NavigateBody, request: Request):
    engine = _engine(request)
    accepted = engine.navigate(body.index)
    return _action_result(engine, accepted)


@router.post("/api/navigate-subject")
async def navigate_subject(body: SubjectBody, request: Request):
    engine = _engine(request)
    accepted = engine.navigate_to_subject(body.subject)
    return _action_result(engine, accepted)


@router.post("/api/submit")
async def submit_exam(request: Request):
    engine = _engine(request)
    summary = engine.submit()
    if summary is not None:
        return {"ok": True, "already_submitted": False, "summary": summary.model_dump()}
    if engine.summary is not None:
        return {"ok": True, "already_submitted": True, "summary": engine.summary.model_dump()}
    raise HTTPException(status_code=400, detail=engine.last_notice or "No exam in progress.")


@router.get("/api/results")
async def get_results(request: Request):
    engine = _engine(request)
    if engine.summary is None:
        raise HTTPException(status_code=400, detail="The exam has not been submitted yet.")
    return engine.summary.model_dump()
