"""
errors.py

시험 세션 예외 계층.
어떤 예외도 프로세스를 종료시키지 않는다. 호출 측에서 복구하거나 안내 메시지로 노출.
"""


class ExamError(Exception):
    """시험 엔진 예외의 기본 클래스."""


class ValidationError(ExamError):
    """잘못된 입력 (빈 수험번호 등). 사용자에게 인라인 메시지로 노출."""


class IndexOutOfRange(ExamError, IndexError):
    """문제 은행 범위를 벗어난 인덱스."""

    def __init__(self, index: int, length: int):
        super().__init__(f"Question index {index} is out of range (0..{length - 1})")
        self.index = index
        self.length = length


class ExpiryRejection(ExamError):
    """시험 시간 종료 후 답안 변경 시도."""


class StorageCorruption(ExamError):
    """저장된 세션 레코드를 해석할 수 없음. 새 세션으로 복구한다."""
