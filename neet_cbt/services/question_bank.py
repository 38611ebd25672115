"""
services/question_bank.py

읽기 전용 문제 은행.
시작 시 한 번 구성되어 시험 엔진에 넘겨지며, 실행 중 변경되지 않는다.
"""

import json
import logging
from typing import Iterable, Iterator, List, Optional, Union

from neet_cbt.errors import IndexOutOfRange
from neet_cbt.models.question_model import QuestionRecord, Subject

logger = logging.getLogger(__name__)


class QuestionBank:
    """순서가 고정된 QuestionRecord 모음."""

    def __init__(self, questions: Iterable[QuestionRecord]):
        self._questions: tuple[QuestionRecord, ...] = tuple(questions)
        if not self._questions:
            raise ValueError("Question bank must contain at least one question.")

        self._index_by_id: dict[int, int] = {}
        for idx, q in enumerate(self._questions):
            if q.id in self._index_by_id:
                raise ValueError(f"Duplicate question id in bank: {q.id}")
            self._index_by_id[q.id] = idx

    @classmethod
    def from_json(cls, path: str) -> "QuestionBank":
        """
        JSON 파일에서 문제 은행을 읽는다.

        허용 형식: {"questions": [...]} 또는 문제 객체 리스트.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        items = data.get("questions", []) if isinstance(data, dict) else data
        bank = cls(QuestionRecord.model_validate(item) for item in items)
        logger.info(f"문제 은행 로드 완료: {path} ({bank.length()}문제)")
        return bank

    def get(self, index: int) -> QuestionRecord:
        if not (0 <= index < len(self._questions)):
            raise IndexOutOfRange(index, len(self._questions))
        return self._questions[index]

    def length(self) -> int:
        return len(self._questions)

    def find_first_index_by_subject(self, subject: Union[Subject, str]) -> Optional[int]:
        """해당 과목의 첫 문제 인덱스. 없으면 None."""
        try:
            subject = Subject(subject)
        except ValueError:
            return None
        for idx, q in enumerate(self._questions):
            if q.subject == subject:
                return idx
        return None

    def index_of(self, question_id: int) -> Optional[int]:
        return self._index_by_id.get(question_id)

    def contains(self, question_id: int) -> bool:
        return question_id in self._index_by_id

    def by_id(self, question_id: int) -> QuestionRecord:
        idx = self._index_by_id.get(question_id)
        if idx is None:
            raise KeyError(question_id)
        return self._questions[idx]

    def subjects(self) -> List[Subject]:
        """문제 은행에 등장하는 과목 (등장 순서 유지)."""
        seen: List[Subject] = []
        for q in self._questions:
            if q.subject not in seen:
                seen.append(q.subject)
        return seen

    def __iter__(self) -> Iterator[QuestionRecord]:
        return iter(self._questions)

    def __len__(self) -> int:
        return len(self._questions)
