"""
services/auth.py

수험번호 허용 목록 확인. 호출마다 독립적이며 세션 정보를 갖지 않는다.
"""

from typing import Iterable, Optional

from pydantic import BaseModel

MSG_ROLL_REQUIRED = "Roll number is required"
MSG_INVALID_ROLL = "Invalid roll number"


class AuthResult(BaseModel):
    success: bool
    roll: str = ""
    message: Optional[str] = None


def authenticate(roll: Optional[str], allowed_rolls: Iterable[str]) -> AuthResult:
    roll = (roll or "").strip()
    if not roll:
        return AuthResult(success=False, message=MSG_ROLL_REQUIRED)
    if roll not in set(allowed_rolls):
        return AuthResult(success=False, roll=roll, message=MSG_INVALID_ROLL)
    return AuthResult(success=True, roll=roll)
