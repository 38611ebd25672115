"""
views/home_view.py — 로그인 화면

기능:
  - 수험번호 입력 → 허용 목록 확인
  - 저장된 세션이 있으면 남은 시간 그대로 이어서 응시
"""

from __future__ import annotations

import streamlit as st

from config import ALLOWED_ROLLS
from neet_cbt.errors import ValidationError
from neet_cbt.services.auth import authenticate
from neet_cbt.services.exam_engine import ExamEngine
from neet_cbt.services.question_bank import QuestionBank
from neet_cbt.services.session_store import SessionStore


def _clear_widget_state() -> None:
    for k in [k for k in st.session_state if k.startswith("radio_")]:
        del st.session_state[k]
    for key in ["confirm_submit", "expiry_rendered"]:
        st.session_state.pop(key, None)


def _new_engine(bank: QuestionBank, store: SessionStore) -> ExamEngine:
    # 만료 감지는 타이머 프래그먼트(run_every=1)가 맡으므로 별도 스레드를 두지 않는다
    return ExamEngine(bank, store, use_timer=False)


def _login(bank: QuestionBank, store: SessionStore) -> None:
    result = authenticate(st.session_state.get("roll_input", ""), ALLOWED_ROLLS)
    if not result.success:
        st.session_state.login_error = result.message
        return

    old: ExamEngine | None = st.session_state.get("engine")
    if old is not None:
        old.close()

    engine = _new_engine(bank, store)
    try:
        engine.login(result.roll)
    except ValidationError as e:
        st.session_state.login_error = str(e)
        return

    _clear_widget_state()
    st.session_state.engine = engine
    st.session_state.login_error = None
    st.session_state.page = "exam"


def render(bank: QuestionBank, store: SessionStore) -> None:
    """로그인 화면 렌더링."""
    _, col, _ = st.columns([1, 2, 1])

    with col:
        st.markdown('<div class="cbt-card">', unsafe_allow_html=True)
        st.markdown("<h2 style='text-align:center;'>NEET Test Login</h2>", unsafe_allow_html=True)
        st.markdown(
            f"<p class='cbt-subtitle' style='text-align:center;'>"
            f"{bank.length()} questions · {', '.join(s.value for s in bank.subjects())}</p>",
            unsafe_allow_html=True,
        )

        st.text_input(
            "Roll Number",
            placeholder="Enter Roll Number",
            key="roll_input",
        )
        st.button(
            "Start Test",
            key="start_test",
            type="primary",
            use_container_width=True,
            on_click=_login,
            args=(bank, store),
        )

        if st.session_state.get("login_error"):
            st.error(st.session_state.login_error)

        st.markdown("</div>", unsafe_allow_html=True)  # cbt-card 닫기
