"""
views/components/timer.py

남은 시험 시간을 HH:MM:SS로 렌더링하는 컴포넌트.
st.fragment(run_every=1)로 1초마다 이 부분만 다시 그린다.
남은 시간은 엔진이 deadline 기준으로 계산한다.
"""

import streamlit as st

from config import TIME_WARNING_SECONDS
from neet_cbt.models.session_state import ExamPhase
from neet_cbt.services.exam_engine import ExamEngine
from neet_cbt.services.exam_service import format_hhmmss


@st.fragment(run_every=1)
def render(engine: ExamEngine) -> None:
    """
    남은 시간 표시.

    시간이 0이 되는 순간 전체 화면을 한 번 다시 그려 답안 입력을 잠근다.
    """
    remaining = engine.time_left_seconds()
    phase = engine.phase

    is_warning = remaining < TIME_WARNING_SECONDS

    css_class = "timer-display timer-warning" if is_warning else "timer-display"
    icon = "⚠️ " if is_warning else "⏱ "

    st.markdown(
        f'<div class="{css_class}">{icon}{format_hhmmss(remaining)}</div>',
        unsafe_allow_html=True,
    )

    if phase is ExamPhase.TIME_EXPIRED:
        st.warning("⏰ Time is up. Answers are locked. Review and submit.")
        if not st.session_state.get("expiry_rendered"):
            st.session_state.expiry_rendered = True
            st.rerun()
