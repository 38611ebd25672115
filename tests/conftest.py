import pytest

from neet_cbt.models.question_model import QuestionRecord, Subject
from neet_cbt.services.exam_engine import ExamEngine
from neet_cbt.services.question_bank import QuestionBank
from neet_cbt.services.session_store import MemorySessionStore

THREE_HOURS = 3 * 3600
START = 1_700_000_000.0


class FakeClock:
    """수동으로 진행시키는 시계."""

    def __init__(self, now: float = START):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RawMemorySessionStore(MemorySessionStore):
    """저장 레코드 원문을 직접 넣을 수 있는 메모리 저장소."""

    def put_raw(self, roll: str, raw: str) -> None:
        with self._lock:
            self._records[roll] = raw


def make_question(qid: int, subject: Subject = Subject.PHYSICS, prompt: str = "Prompt", options=None):
    return QuestionRecord(
        id=qid,
        subject=subject,
        prompt=prompt,
        options=options or [f"A{qid}", f"B{qid}", f"C{qid}", f"D{qid}"],
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return RawMemorySessionStore()


@pytest.fixture
def bank():
    return QuestionBank([
        make_question(1, Subject.PHYSICS),
        make_question(2, Subject.PHYSICS, options=["A2", "B2", "", "D2"]),
        make_question(3, Subject.CHEMISTRY),
        make_question(4, Subject.BIOLOGY),
        make_question(5, Subject.BIOLOGY, prompt="", options=["", "", "", ""]),
    ])


@pytest.fixture
def make_engine(bank, store, clock):
    def _make(**kwargs):
        kwargs.setdefault("bank", bank)
        kwargs.setdefault("store", store)
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("duration", THREE_HOURS)
        kwargs.setdefault("use_timer", False)
        return ExamEngine(**kwargs)
    return _make


@pytest.fixture
def engine(make_engine):
    e = make_engine()
    e.login("ROLL001")
    yield e
    e.close()
