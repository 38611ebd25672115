from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import OPTIONS_PER_QUESTION


class Subject(str, Enum):
    """NEET 과목 구분."""

    PHYSICS = "Physics"
    CHEMISTRY = "Chemistry"
    BIOLOGY = "Biology"


class QuestionRecord(BaseModel):
    """
    NEET CBT 문제 모델
    Pydantic v2 적용, 생성 후 변경 불가 (frozen)
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(
        ...,
        description="문제 번호 (고유 식별자)"
    )
    subject: Subject = Field(
        ...,
        description="과목 (Physics / Chemistry / Biology)"
    )
    prompt: str = Field(
        default="",
        description="문제 내용. 빈 문자열이면 자리만 잡아 둔 문제(placeholder)"
    )
    options: Tuple[str, ...] = Field(
        ...,
        description="보기 리스트. 빈 문자열인 보기는 선택 불가"
    )

    @field_validator('options')
    @classmethod
    def validate_options_length(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        """
        검증 로직: 보기는 정확히 4개여야 한다.
        """
        if len(v) != OPTIONS_PER_QUESTION:
            raise ValueError(
                f"options must contain exactly {OPTIONS_PER_QUESTION} entries (got {len(v)})"
            )
        return v

    @property
    def is_placeholder(self) -> bool:
        """문제 본문이 비어 있으면 풀 수 없는 문제."""
        return not self.prompt.strip()

    def option_available(self, option: int) -> bool:
        return 0 <= option < len(self.options) and bool(self.options[option].strip())
