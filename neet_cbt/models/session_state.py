"""
models/session_state.py

시험 진행 상태를 담는 OMR 카드 모델.
Pydantic BaseModel 기반 — 직렬화/역직렬화 및 타입 안전성 확보.
UI 코드 없음.
"""

import time
from enum import Enum
from typing import Dict, List, Set

from pydantic import BaseModel, Field


class ExamPhase(str, Enum):
    LOGGED_OUT = "logged_out"
    IN_PROGRESS = "in_progress"
    TIME_EXPIRED = "time_expired"
    SUBMITTED = "submitted"


class QuestionStatus(str, Enum):
    UNANSWERED = "unanswered"
    ANSWERED = "answered"
    MARKED = "marked"
    ANSWERED_AND_MARKED = "answered_and_marked"


class SessionState(BaseModel):
    """
    사용자의 시험 세션 전체 상태를 표현하는 모델.
    저장소에는 이 모델 전체가 하나의 JSON 레코드로 기록된다.

    Attributes:
        roll:          세션 소유자의 수험번호. 저장 키로 사용.
        answers:       사용자 답안지. {question.id: 선택한 보기 인덱스(0-based)}
        marked:        검토 표시한 문제 id 집합. 답안 여부와 무관.
        current_index: 현재 보고 있는 문제의 인덱스 (0-based).
        started_at:    시험 시작 시각 (Unix timestamp).
        deadline:      시험 종료 시각 (Unix timestamp). 한 번 정해지면 변경되지 않는다.
    """

    roll: str = Field(
        ...,
        min_length=1,
        description="수험번호"
    )
    answers: Dict[int, int] = Field(
        default_factory=dict,
        description="사용자 답안지. key: question.id, value: 선택한 보기 인덱스"
    )
    marked: Set[int] = Field(
        default_factory=set,
        description="검토 표시(mark for review)한 문제 id"
    )
    current_index: int = Field(
        default=0,
        ge=0,
        description="현재 문제 인덱스 (0-based)"
    )
    started_at: float = Field(
        default_factory=time.time,
        description="시험 시작 시각 (Unix timestamp)"
    )
    deadline: float = Field(
        ...,
        description="시험 종료 시각 (Unix timestamp)"
    )


class SubjectBreakdown(BaseModel):
    subject: str
    total: int = 0
    answered: int = 0
    marked: int = 0
    unanswered: int = 0


class SubmissionSummary(BaseModel):
    """
    최종 제출 결과. 채점은 하지 않고 응답 현황만 집계한다.
    answers / marked 는 제출 시점의 사본 (감사용).
    """

    roll: str
    total: int
    answered: int
    marked: int
    answered_and_marked: int
    unanswered: int
    subjects: List[SubjectBreakdown] = Field(default_factory=list)
    answers: Dict[int, int] = Field(default_factory=dict)
    marked_ids: List[int] = Field(default_factory=list)
    started_at: float
    submitted_at: float
    time_used_seconds: int
    after_expiry: bool = False
