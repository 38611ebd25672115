import time

import pytest

from conftest import START, THREE_HOURS, FakeClock, make_question
from neet_cbt.errors import ValidationError
from neet_cbt.models.question_model import Subject
from neet_cbt.models.session_state import ExamPhase, QuestionStatus, SessionState
from neet_cbt.services.exam_engine import MSG_OUT_OF_RANGE, MSG_TIME_EXPIRED, ExamEngine
from neet_cbt.services.question_bank import QuestionBank
from neet_cbt.services.session_store import JsonFileSessionStore, MemorySessionStore


# ── 로그인 / 복원 ────────────────────────────────────────────────────────────

def test_starts_logged_out(make_engine):
    engine = make_engine()
    assert engine.phase is ExamPhase.LOGGED_OUT
    assert engine.snapshot() is None
    assert engine.time_left_seconds() == 0


def test_login_fixes_deadline_and_persists(engine, store):
    state = engine.snapshot()
    assert engine.phase is ExamPhase.IN_PROGRESS
    assert state.roll == "ROLL001"
    assert state.deadline == START + THREE_HOURS
    assert engine.time_left_seconds() == THREE_HOURS
    assert store.load("ROLL001").deadline == state.deadline


@pytest.mark.parametrize("roll", ["", "   ", None])
def test_login_rejects_empty_roll(make_engine, roll):
    engine = make_engine()
    with pytest.raises(ValidationError):
        engine.login(roll)
    assert engine.phase is ExamPhase.LOGGED_OUT


def test_login_twice_is_rejected(engine):
    with pytest.raises(ValidationError):
        engine.login("ROLL001")


def test_reload_restores_deadline_instead_of_resetting(make_engine, engine, clock):
    engine.select_option(1, 2)
    engine.toggle_review(3)
    engine.navigate(2)
    clock.advance(3600)

    reloaded = make_engine()
    reloaded.login("ROLL001")
    state = reloaded.snapshot()

    assert state.deadline == START + THREE_HOURS
    assert state.answers == {1: 2}
    assert state.marked == {3}
    assert state.current_index == 2
    assert reloaded.time_left_seconds() == THREE_HOURS - 3600


def test_restore_with_past_deadline_is_expired(make_engine, store, clock):
    store.save(SessionState(roll="ROLL002", started_at=clock() - THREE_HOURS, deadline=clock() - 5))
    engine = make_engine()

    assert engine.login("ROLL002") is ExamPhase.TIME_EXPIRED
    assert engine.time_left_seconds() == 0
    assert engine.phase is ExamPhase.TIME_EXPIRED


def test_corrupted_record_falls_back_to_fresh_session(make_engine, store, clock):
    store.put_raw("ROLL003", '{"roll": "ROLL003", "answers": "oops"')
    engine = make_engine()

    assert engine.login("ROLL003") is ExamPhase.IN_PROGRESS
    state = engine.snapshot()
    assert state.answers == {}
    assert state.deadline == clock() + THREE_HOURS


def test_record_missing_deadline_is_treated_as_corrupt(make_engine, store, clock):
    store.put_raw("ROLL003", '{"roll": "ROLL003", "answers": {"1": 0}}')
    engine = make_engine()
    engine.login("ROLL003")
    assert engine.snapshot().answers == {}
    assert engine.snapshot().deadline == clock() + THREE_HOURS


def test_record_missing_defaulted_fields_is_treated_as_corrupt(make_engine, store, clock):
    store.put_raw("ROLL001", f'{{"roll": "ROLL001", "deadline": {clock() + 100}}}')
    engine = make_engine()
    engine.login("ROLL001")
    state = engine.snapshot()

    assert engine.time_left_seconds() == THREE_HOURS
    assert state.started_at == clock()
    assert store.load("ROLL001").deadline == clock() + THREE_HOURS


def test_similar_roll_does_not_reset_other_candidate(bank, clock, tmp_path):
    store = JsonFileSessionStore(str(tmp_path))

    first = ExamEngine(bank, store, duration=THREE_HOURS, clock=clock, use_timer=False)
    first.login("ROLL.1")
    first.select_option(1, 0)
    first.close()
    clock.advance(3600)

    second = ExamEngine(bank, store, duration=THREE_HOURS, clock=clock, use_timer=False)
    second.login("ROLL_1")
    assert second.snapshot().answers == {}
    second.close()

    again = ExamEngine(bank, store, duration=THREE_HOURS, clock=clock, use_timer=False)
    again.login("ROLL.1")
    state = again.snapshot()
    assert state.answers == {1: 0}
    assert state.deadline == START + THREE_HOURS


def test_restore_drops_unknown_question_ids(make_engine, store, clock):
    store.save(SessionState(
        roll="ROLL001", answers={1: 0, 99: 1}, marked={2, 77}, current_index=40, deadline=clock() + 60,
    ))
    engine = make_engine()
    engine.login("ROLL001")
    state = engine.snapshot()

    assert state.answers == {1: 0}
    assert state.marked == {2}
    assert state.current_index == 4


# ── 답안 선택 ────────────────────────────────────────────────────────────────

def test_select_option_records_answer_and_is_idempotent(engine, store):
    assert engine.select_option(1, 3)
    assert engine.select_option(1, 3)
    assert engine.snapshot().answers == {1: 3}
    assert store.load("ROLL001").answers == {1: 3}
    assert engine.last_notice is None


def test_select_option_can_change_answer(engine):
    engine.select_option(1, 0)
    engine.select_option(1, 1)
    assert engine.snapshot().answers[1] == 1


@pytest.mark.parametrize("qid, option", [
    (99, 0),   # 없는 문제
    (5, 0),    # 자리 표시 문제
    (2, 2),    # 비어 있는 보기
    (1, 4),    # 범위 밖 보기
    (1, -1),
])
def test_select_option_rejects_invalid_targets(engine, qid, option):
    assert engine.select_option(qid, option) is False
    assert engine.snapshot().answers == {}
    assert engine.last_notice


def test_notice_clears_after_accepted_action(engine):
    engine.select_option(99, 0)
    assert engine.last_notice
    engine.select_option(1, 0)
    assert engine.last_notice is None


# ── 검토 표시 ────────────────────────────────────────────────────────────────

def test_toggle_review_is_its_own_inverse(engine):
    assert engine.toggle_review(3)
    assert engine.snapshot().marked == {3}
    assert engine.toggle_review(3)
    assert engine.snapshot().marked == set()


def test_question_can_be_answered_and_marked(engine):
    engine.select_option(1, 0)
    engine.toggle_review(1)
    engine.toggle_review(4)

    assert engine.question_status(1) is QuestionStatus.ANSWERED_AND_MARKED
    assert engine.question_status(4) is QuestionStatus.MARKED
    assert engine.question_status(3) is QuestionStatus.UNANSWERED
    assert engine.statuses() == [
        QuestionStatus.ANSWERED_AND_MARKED,
        QuestionStatus.UNANSWERED,
        QuestionStatus.UNANSWERED,
        QuestionStatus.MARKED,
        QuestionStatus.UNANSWERED,
    ]


def test_toggle_review_unknown_question_is_noop(engine):
    assert engine.toggle_review(42) is False
    assert engine.snapshot().marked == set()


# ── 이동 ─────────────────────────────────────────────────────────────────────

def test_navigate_out_of_range_is_noop(engine):
    engine.navigate(2)
    assert engine.navigate(-1) is False
    assert engine.navigate(engine.bank.length()) is False
    assert engine.snapshot().current_index == 2
    assert engine.last_notice == MSG_OUT_OF_RANGE


def test_next_and_previous_stop_at_bounds(engine):
    assert engine.previous() is False
    assert engine.next()
    assert engine.snapshot().current_index == 1
    engine.navigate(4)
    assert engine.next() is False
    assert engine.snapshot().current_index == 4


def test_navigate_to_subject(engine):
    assert engine.navigate_to_subject(Subject.BIOLOGY)
    assert engine.snapshot().current_index == 3
    assert engine.navigate_to_subject("Chemistry")
    assert engine.current_question().id == 3
    assert engine.navigate_to_subject("Mathematics") is False
    assert engine.snapshot().current_index == 2


def test_two_question_scenario(store, clock):
    bank = QuestionBank([make_question(1), make_question(2, Subject.BIOLOGY)])
    engine = ExamEngine(bank, store, clock=clock, use_timer=False)
    engine.login("ROLL001")

    engine.select_option(1, 1)
    engine.toggle_review(2)
    engine.navigate(1)

    state = engine.snapshot()
    assert state.answers == {1: 1}
    assert state.marked == {2}
    assert state.current_index == 1


def test_mutations_before_login_are_noops(make_engine):
    engine = make_engine()
    assert engine.select_option(1, 0) is False
    assert engine.toggle_review(1) is False
    assert engine.navigate(1) is False
    assert engine.submit() is None


# ── 시간 ─────────────────────────────────────────────────────────────────────

def test_time_left_is_non_increasing_and_reaches_zero(engine, clock):
    readings = []
    for _ in range(6):
        readings.append(engine.time_left_seconds())
        clock.advance(THREE_HOURS / 5)
    readings.append(engine.time_left_seconds())

    assert readings == sorted(readings, reverse=True)
    assert readings[0] == THREE_HOURS
    assert readings[-1] == 0
    assert min(readings) >= 0


def test_time_left_floors_partial_seconds(engine, clock):
    clock.advance(0.4)
    assert engine.time_left_seconds() == THREE_HOURS - 1


def test_expires_exactly_at_deadline(engine, clock):
    clock.advance(THREE_HOURS - 1)
    assert engine.phase is ExamPhase.IN_PROGRESS
    assert engine.time_left_seconds() == 1
    clock.advance(1)
    assert engine.time_left_seconds() == 0
    assert engine.phase is ExamPhase.TIME_EXPIRED


def test_deadline_three_hours_ago_blocks_answers(make_engine, store):
    clock = FakeClock()
    store.save(SessionState(roll="ROLL001", started_at=clock() - THREE_HOURS, deadline=clock()))
    engine = make_engine(clock=clock)
    engine.login("ROLL001")

    assert engine.time_left_seconds() == 0
    assert engine.phase is ExamPhase.TIME_EXPIRED
    assert engine.select_option(1, 0) is False
    assert engine.last_notice == MSG_TIME_EXPIRED
    assert engine.snapshot().answers == {}


def test_after_expiry_review_and_navigation_still_work(engine, clock):
    engine.select_option(1, 0)
    clock.advance(THREE_HOURS + 10)

    assert engine.select_option(1, 1) is False
    assert engine.toggle_review(1)
    assert engine.navigate(3)

    state = engine.snapshot()
    assert state.answers == {1: 0}
    assert state.marked == {1}
    assert state.current_index == 3


def test_tick_transitions_once(engine, clock, caplog):
    clock.advance(THREE_HOURS)
    with caplog.at_level("INFO", logger="neet_cbt.services.exam_engine"):
        engine.tick()
        engine.tick()
    assert engine.phase is ExamPhase.TIME_EXPIRED
    assert sum("시험 시간 종료" in r.getMessage() for r in caplog.records) == 1


# ── 제출 ─────────────────────────────────────────────────────────────────────

def test_submit_summarizes_and_clears_store(engine, store, clock):
    engine.select_option(1, 0)
    engine.select_option(3, 2)
    engine.toggle_review(3)
    engine.toggle_review(4)
    clock.advance(1800)

    summary = engine.submit()

    assert engine.phase is ExamPhase.SUBMITTED
    assert summary.total == 5
    assert summary.answered == 2
    assert summary.marked == 2
    assert summary.answered_and_marked == 1
    assert summary.unanswered == 3
    assert summary.answers == {1: 0, 3: 2}
    assert summary.marked_ids == [3, 4]
    assert summary.time_used_seconds == 1800
    assert summary.after_expiry is False
    assert store.load("ROLL001") is None


def test_submit_is_idempotent(engine):
    engine.select_option(1, 0)
    first = engine.submit()
    second = engine.submit()

    assert first is not None
    assert second is None
    assert engine.summary == first


def test_no_mutation_after_submit(engine, store):
    engine.submit()
    assert engine.select_option(1, 0) is False
    assert engine.toggle_review(1) is False
    assert engine.navigate(1) is False
    assert engine.logout() is False
    assert engine.phase is ExamPhase.SUBMITTED
    assert store.load("ROLL001") is None


def test_submit_after_expiry_is_flagged(engine, clock):
    clock.advance(THREE_HOURS + 100)
    summary = engine.submit()
    assert summary.after_expiry is True
    assert summary.time_used_seconds == THREE_HOURS


def test_logout_clears_persisted_session(engine, store):
    engine.select_option(1, 0)
    assert engine.logout()
    assert engine.phase is ExamPhase.LOGGED_OUT
    assert store.load("ROLL001") is None


# ── 타이머 스레드 ────────────────────────────────────────────────────────────

def test_timer_is_cancelled_on_submit(bank):
    engine = ExamEngine(bank, MemorySessionStore(), tick_interval=0.01)
    engine.login("ROLL001")
    assert engine.timer_active

    engine.submit()
    assert not engine.timer_active


def test_timer_tick_expires_session(bank):
    engine = ExamEngine(bank, MemorySessionStore(), duration=1, tick_interval=0.05)
    engine.login("ROLL001")

    deadline = time.time() + 5
    while engine._phase is not ExamPhase.TIME_EXPIRED and time.time() < deadline:
        time.sleep(0.05)

    assert engine._phase is ExamPhase.TIME_EXPIRED
    assert not engine.timer_active
