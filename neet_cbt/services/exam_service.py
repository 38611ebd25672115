"""
services/exam_service.py

시험 응답 현황 집계 로직.
순수 Python 함수로 구성 — UI 코드, 전역 상태 변경 없음.
채점은 하지 않는다 (정답 정보 없음).
"""

import math
from typing import Dict, Iterable, List, Set

from neet_cbt.models.question_model import QuestionRecord
from neet_cbt.models.session_state import (
    QuestionStatus,
    SessionState,
    SubjectBreakdown,
    SubmissionSummary,
)


def time_left_seconds(deadline: float, now: float) -> int:
    """남은 시간(초). deadline 이후에는 0."""
    return max(0, math.floor(deadline - now))


def format_hhmmss(seconds: int) -> str:
    """
    남은 시간을 HH:MM:SS 문자열로 변환한다.

    >>> format_hhmmss(10800)
    '03:00:00'
    """
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def question_status(question_id: int, answers: Dict[int, int], marked: Set[int]) -> QuestionStatus:
    answered = question_id in answers
    is_marked = question_id in marked
    if answered and is_marked:
        return QuestionStatus.ANSWERED_AND_MARKED
    if answered:
        return QuestionStatus.ANSWERED
    if is_marked:
        return QuestionStatus.MARKED
    return QuestionStatus.UNANSWERED


def subject_breakdown(
    questions: Iterable[QuestionRecord],
    answers: Dict[int, int],
    marked: Set[int],
) -> List[SubjectBreakdown]:
    """
    과목별 응답 현황.

    Returns:
        문제 은행에 처음 등장한 과목 순서대로 정렬된 SubjectBreakdown 리스트.
    """
    buckets: Dict[str, SubjectBreakdown] = {}

    for q in questions:
        subj = q.subject.value
        b = buckets.setdefault(subj, SubjectBreakdown(subject=subj))
        b.total += 1
        if q.id in answers:
            b.answered += 1
        else:
            b.unanswered += 1
        if q.id in marked:
            b.marked += 1

    return list(buckets.values())


def build_summary(
    questions: List[QuestionRecord],
    state: SessionState,
    submitted_at: float,
    after_expiry: bool = False,
) -> SubmissionSummary:
    """
    제출 시점의 SessionState로 SubmissionSummary를 만든다.

    answered / marked / unanswered는 문제 은행에 존재하는 문제만 센다.
    """
    ids = {q.id for q in questions}
    answers = {qid: opt for qid, opt in state.answers.items() if qid in ids}
    marked = {qid for qid in state.marked if qid in ids}

    answered = len(answers)
    both = len(set(answers) & marked)
    end = min(submitted_at, state.deadline)

    return SubmissionSummary(
        roll=state.roll,
        total=len(questions),
        answered=answered,
        marked=len(marked),
        answered_and_marked=both,
        unanswered=len(questions) - answered,
        subjects=subject_breakdown(questions, answers, marked),
        answers=dict(sorted(answers.items())),
        marked_ids=sorted(marked),
        started_at=state.started_at,
        submitted_at=submitted_at,
        time_used_seconds=max(0, math.floor(end - state.started_at)),
        after_expiry=after_expiry,
    )
