"""
services/countdown.py

시험 엔진이 소유하는 1초 주기 타이머.
cancel() 이후에는 콜백이 다시 호출되지 않는다.
"""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Countdown:
    """
    취소 가능한 반복 작업.

    Args:
        interval: 호출 주기 (초)
        callback: 매 주기마다 호출할 함수. 예외는 로그만 남기고 다음 주기로 넘어간다.
    """

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "exam-countdown"):
        self.interval = interval
        self._callback = callback
        self._name = name
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def active(self) -> bool:
        return self._thread is not None and not self._stopped.is_set()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stopped.wait(self.interval):
            try:
                self._callback()
            except Exception:
                logger.exception("타이머 콜백 오류")

    def cancel(self) -> None:
        """타이머 중지. 여러 번 호출해도 되고, 콜백 내부에서 호출해도 된다."""
        self._stopped.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval + 1.0)

    def __enter__(self) -> "Countdown":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()
