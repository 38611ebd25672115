"""
services/exam_engine.py

시험 세션 상태 머신.

    LOGGED_OUT ──login──▶ IN_PROGRESS ──(남은 시간 0)──▶ TIME_EXPIRED
                              │                              │
                              └────────────submit────────────┴──▶ SUBMITTED (종료)

- 답안 선택 / 검토 표시 / 문제 이동 세 가지 사용자 이벤트와 1초 타이머 틱만 상태를 바꾼다.
- 남은 시간은 항상 deadline과 현재 시각으로 다시 계산한다 (누적 카운터 없음).
- 상태가 바뀔 때마다 SessionState 전체를 저장소에 기록한다.
- 시간 종료 후에는 답안 변경만 막고, 검토 표시와 이동은 허용한다.
- 거부된 동작은 예외 대신 False를 반환하고 last_notice에 안내 문구를 남긴다.
"""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from config import EXAM_DURATION_SECONDS, TICK_INTERVAL_SECONDS
from neet_cbt.errors import ExamError, ExpiryRejection, StorageCorruption, ValidationError
from neet_cbt.models.question_model import QuestionRecord, Subject
from neet_cbt.models.session_state import (
    ExamPhase,
    QuestionStatus,
    SessionState,
    SubmissionSummary,
)
from neet_cbt.services.countdown import Countdown
from neet_cbt.services.exam_service import build_summary, question_status, time_left_seconds
from neet_cbt.services.question_bank import QuestionBank
from neet_cbt.services.session_store import SessionStore

logger = logging.getLogger(__name__)

MSG_TIME_EXPIRED = "Time expired: answers can no longer be changed"
MSG_NOT_ACTIVE = "No exam in progress"
MSG_ALREADY_SUBMITTED = "Exam already submitted"
MSG_OUT_OF_RANGE = "Question index out of range"

_BROWSABLE = (ExamPhase.IN_PROGRESS, ExamPhase.TIME_EXPIRED)


class ExamEngine:
    """
    한 수험생의 시험 세션을 소유하는 엔진.

    Args:
        bank:          읽기 전용 문제 은행
        store:         세션 저장소 (load / save / clear)
        duration:      시험 시간 (초)
        clock:         현재 시각 함수 (테스트에서 교체)
        tick_interval: 타이머 주기 (초)
        use_timer:     False이면 타이머 스레드를 만들지 않는다. 만료 판정은 매 호출 시 수행.
    """

    def __init__(
        self,
        bank: QuestionBank,
        store: SessionStore,
        duration: int = EXAM_DURATION_SECONDS,
        clock: Callable[[], float] = time.time,
        tick_interval: float = TICK_INTERVAL_SECONDS,
        use_timer: bool = True,
    ):
        self.bank = bank
        self.store = store
        self.duration = duration
        self._clock = clock
        self._tick_interval = tick_interval
        self._use_timer = use_timer

        self._lock = threading.RLock()
        self._phase = ExamPhase.LOGGED_OUT
        self._state: Optional[SessionState] = None
        self._summary: Optional[SubmissionSummary] = None
        self._timer: Optional[Countdown] = None
        self._retired: List[Countdown] = []
        self.last_notice: Optional[str] = None

    # ── 내부 헬퍼 ────────────────────────────────────────────────────────────

    @contextmanager
    def _guard(self) -> Iterator[None]:
        """잠금 + 만료 판정. 해제할 타이머는 잠금을 놓은 뒤 정리한다."""
        stale: List[Countdown] = []
        try:
            with self._lock:
                self._refresh()
                try:
                    yield
                finally:
                    stale, self._retired = self._retired, []
        finally:
            for timer in stale:
                timer.cancel()

    def _refresh(self) -> None:
        if self._phase is ExamPhase.IN_PROGRESS and self._time_left() == 0:
            self._phase = ExamPhase.TIME_EXPIRED
            self._retire_timer()
            logger.info(f"[{self._state.roll}] 시험 시간 종료")

    def _time_left(self) -> int:
        if self._state is None:
            return 0
        return time_left_seconds(self._state.deadline, self._clock())

    def _retire_timer(self) -> None:
        if self._timer is not None:
            self._retired.append(self._timer)
            self._timer = None

    def _start_timer(self) -> None:
        if not self._use_timer or self._timer is not None:
            return
        self._timer = Countdown(self._tick_interval, self.tick)
        self._timer.start()

    def _persist(self) -> None:
        self.store.save(self._state)

    def _reject(self, message: str) -> bool:
        self.last_notice = message
        return False

    def _accept(self) -> bool:
        self.last_notice = None
        self._persist()
        return True

    def _restore(self, roll: str) -> Optional[SessionState]:
        try:
            state = self.store.load(roll)
        except StorageCorruption as e:
            # 손상 레코드는 새 세션 저장 시 같은 키로 덮어쓴다
            logger.warning(f"[{roll}] 저장된 세션 손상 → 새 세션 시작: {e}")
            return None
        if state is None:
            return None

        stale = [qid for qid in list(state.answers) + list(state.marked) if not self.bank.contains(qid)]
        if stale:
            logger.warning(f"[{roll}] 문제 은행에 없는 문제 id 제거: {sorted(set(stale))}")
            state.answers = {k: v for k, v in state.answers.items() if self.bank.contains(k)}
            state.marked = {k for k in state.marked if self.bank.contains(k)}
        state.current_index = min(state.current_index, self.bank.length() - 1)

        logger.info(f"[{roll}] 이전 세션 복원 (답안 {len(state.answers)}개, 검토 {len(state.marked)}개)")
        return state

    def _check_answerable(self, question_id: int, option: int) -> None:
        if self._phase is ExamPhase.TIME_EXPIRED:
            raise ExpiryRejection(MSG_TIME_EXPIRED)
        if self._phase is not ExamPhase.IN_PROGRESS:
            raise ValidationError(MSG_NOT_ACTIVE)
        if not self.bank.contains(question_id):
            raise ValidationError(f"Unknown question {question_id}")
        question = self.bank.by_id(question_id)
        if question.is_placeholder:
            raise ValidationError(f"Question {question_id} is not available")
        if not question.option_available(option):
            raise ValidationError(f"Option {option} is not available for question {question_id}")

    # ── 상태 전이 ────────────────────────────────────────────────────────────

    def login(self, roll: str) -> ExamPhase:
        """
        LOGGED_OUT → IN_PROGRESS.

        저장된 세션이 있으면 deadline을 그대로 복원하고, 없으면 지금부터 duration 뒤로 고정한다.
        복원한 deadline이 이미 지났으면 곧바로 TIME_EXPIRED가 된다.

        Raises:
            ValidationError: 빈 수험번호이거나 이미 세션이 진행/종료된 경우
        """
        roll = (roll or "").strip()
        if not roll:
            raise ValidationError("Roll number is required")

        with self._guard():
            if self._phase is not ExamPhase.LOGGED_OUT:
                raise ValidationError(f"Session is already {self._phase.value}")

            state = self._restore(roll)
            if state is None:
                now = self._clock()
                state = SessionState(roll=roll, started_at=now, deadline=now + self.duration)
                logger.info(f"[{roll}] 새 시험 세션 시작 (제한 시간 {self.duration}초)")

            self._state = state
            self._phase = ExamPhase.IN_PROGRESS
            self._summary = None
            self.last_notice = None
            self._persist()

            self._refresh()
            if self._phase is ExamPhase.IN_PROGRESS:
                self._start_timer()
            return self._phase

    def select_option(self, question_id: int, option: int) -> bool:
        with self._guard():
            try:
                self._check_answerable(question_id, option)
            except ExamError as e:
                return self._reject(str(e))
            self._state.answers[question_id] = option
            return self._accept()

    def toggle_review(self, question_id: int) -> bool:
        with self._guard():
            if self._phase not in _BROWSABLE:
                return self._reject(MSG_NOT_ACTIVE)
            if not self.bank.contains(question_id):
                return self._reject(f"Unknown question {question_id}")
            if question_id in self._state.marked:
                self._state.marked.discard(question_id)
            else:
                self._state.marked.add(question_id)
            return self._accept()

    def navigate(self, index: int) -> bool:
        with self._guard():
            return self._move_to(index)

    def _move_to(self, index: int) -> bool:
        if self._phase not in _BROWSABLE:
            return self._reject(MSG_NOT_ACTIVE)
        if not (0 <= index < self.bank.length()):
            return self._reject(MSG_OUT_OF_RANGE)
        self._state.current_index = index
        return self._accept()

    def step(self, delta: int) -> bool:
        """현재 위치에서 delta만큼 이동 (이전/다음 버튼)."""
        with self._guard():
            if self._state is None:
                return self._reject(MSG_NOT_ACTIVE)
            return self._move_to(self._state.current_index + delta)

    def next(self) -> bool:
        return self.step(1)

    def previous(self) -> bool:
        return self.step(-1)

    def navigate_to_subject(self, subject) -> bool:
        """해당 과목의 첫 문제로 이동. 과목이 없으면 무시."""
        with self._guard():
            index = self.bank.find_first_index_by_subject(subject)
            if index is None:
                return self._reject(f"No questions for subject {subject}")
            return self._move_to(index)

    def tick(self) -> None:
        """타이머 콜백. 만료 판정만 수행한다."""
        with self._guard():
            pass

    def submit(self) -> Optional[SubmissionSummary]:
        """
        (IN_PROGRESS | TIME_EXPIRED) → SUBMITTED.

        Returns:
            SubmissionSummary. 이미 제출했거나 로그인 전이면 None (아무 변화 없음).
        """
        with self._guard():
            if self._phase is ExamPhase.SUBMITTED:
                self._reject(MSG_ALREADY_SUBMITTED)
                return None
            if self._phase not in _BROWSABLE:
                self._reject(MSG_NOT_ACTIVE)
                return None

            summary = build_summary(
                list(self.bank),
                self._state,
                submitted_at=self._clock(),
                after_expiry=self._phase is ExamPhase.TIME_EXPIRED,
            )
            self._summary = summary
            self._phase = ExamPhase.SUBMITTED
            self._retire_timer()
            self.store.clear(self._state.roll)
            self.last_notice = None
            logger.info(
                f"[{summary.roll}] 제출 완료: 응답 {summary.answered} / 검토 {summary.marked} "
                f"/ 미응답 {summary.unanswered}"
            )
            return summary

    def logout(self) -> bool:
        """진행 중인 세션을 버리고 저장 레코드를 삭제한다."""
        with self._guard():
            if self._phase not in _BROWSABLE:
                return self._reject(MSG_NOT_ACTIVE)
            roll = self._state.roll
            self.store.clear(roll)
            self._retire_timer()
            self._state = None
            self._phase = ExamPhase.LOGGED_OUT
            self.last_notice = None
            logger.info(f"[{roll}] 로그아웃")
            return True

    def close(self) -> None:
        """타이머만 해제 (브라우저 세션 정리 시). 상태와 저장 레코드는 유지."""
        with self._guard():
            self._retire_timer()

    # ── 읽기 전용 조회 ───────────────────────────────────────────────────────

    @property
    def phase(self) -> ExamPhase:
        with self._guard():
            return self._phase

    @property
    def summary(self) -> Optional[SubmissionSummary]:
        return self._summary

    @property
    def timer_active(self) -> bool:
        return self._timer is not None and self._timer.active

    @property
    def roll(self) -> Optional[str]:
        with self._lock:
            return self._state.roll if self._state else None

    def time_left_seconds(self) -> int:
        with self._guard():
            return self._time_left()

    def snapshot(self) -> Optional[SessionState]:
        with self._guard():
            return self._state.model_copy(deep=True) if self._state else None

    def current_question(self) -> Optional[QuestionRecord]:
        with self._lock:
            if self._state is None:
                return None
            return self.bank.get(self._state.current_index)

    def question_status(self, question_id: int) -> QuestionStatus:
        with self._lock:
            if self._state is None:
                return QuestionStatus.UNANSWERED
            return question_status(question_id, self._state.answers, self._state.marked)

    def statuses(self) -> List[QuestionStatus]:
        """문제 은행 순서대로 각 문제의 상태."""
        with self._lock:
            if self._state is None:
                return [QuestionStatus.UNANSWERED] * self.bank.length()
            return [question_status(q.id, self._state.answers, self._state.marked) for q in self.bank]

    def subjects(self) -> List[Subject]:
        return self.bank.subjects()
