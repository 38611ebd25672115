"""
views/exam_view.py — 시험 풀기 화면

레이아웃:
  - st.sidebar : 타이머 + 과목 이동 + 문제 번호 팔레트 + 최종 제출
  - 메인 영역  : 현재 문제 카드 + 검토 표시 + 이전/다음

상태 관리:
  - st.session_state.engine (ExamEngine): 모든 변경은 엔진의 전이 메서드로만
"""

from __future__ import annotations

import streamlit as st

from neet_cbt.models.session_state import ExamPhase
from neet_cbt.services.exam_engine import ExamEngine
from neet_cbt.views.components import question_card as qcard
from neet_cbt.views.components import sidebar as nav
from neet_cbt.views.components import timer as tmr


def _go_to_result(engine: ExamEngine) -> None:
    """제출 후 결과 페이지로 이동."""
    engine.submit()
    st.session_state.confirm_submit = False
    st.session_state.page = "result"
    st.rerun()


def _render_submit(engine: ExamEngine, unanswered: int) -> None:
    if unanswered > 0:
        st.markdown(
            f"<p style='font-size:0.8rem; color:#f59e0b; margin-bottom:8px;'>"
            f"⚠️ Unanswered questions: {unanswered}</p>",
            unsafe_allow_html=True,
        )

    if st.button("Submit Test", key="submit_sidebar", type="primary", use_container_width=True):
        if unanswered > 0:
            st.session_state.confirm_submit = True
            st.rerun()
        else:
            _go_to_result(engine)

    # 미응답 상태에서 제출 확인
    if st.session_state.get("confirm_submit"):
        st.warning(f"{unanswered} question(s) are unanswered. Submit anyway?")
        col_yes, col_no = st.columns(2)
        with col_yes:
            if st.button("Submit", key="confirm_yes", type="primary"):
                _go_to_result(engine)
        with col_no:
            if st.button("Cancel", key="confirm_no"):
                st.session_state.confirm_submit = False
                st.rerun()


def render() -> None:
    """시험 화면 렌더링."""

    # ── 세션 가드 ──────────────────────────────────────────────────────────
    engine: ExamEngine | None = st.session_state.get("engine")
    if engine is None or engine.phase not in (ExamPhase.IN_PROGRESS, ExamPhase.TIME_EXPIRED):
        st.warning("No exam in progress. Please log in again.")
        if st.button("Back to login", type="primary"):
            st.session_state.page = "login"
            st.rerun()
        return

    state = engine.snapshot()
    total = engine.bank.length()
    current_idx = state.current_index
    current_q = engine.bank.get(current_idx)

    # ── 사이드바 ───────────────────────────────────────────────────────────
    with st.sidebar:
        st.markdown(f"**Roll No:** {state.roll}")
        tmr.render(engine)
        st.markdown('<hr class="cbt-divider">', unsafe_allow_html=True)
        nav.render(engine)
        st.markdown('<hr class="cbt-divider">', unsafe_allow_html=True)
        _render_submit(engine, total - len(state.answers))

    # ── 메인 영역 ─────────────────────────────────────────────────────────
    st.markdown(
        "<h2 style='font-size:1.3rem; font-weight:700; margin-bottom:4px;'>NEET Mock Test</h2>",
        unsafe_allow_html=True,
    )
    st.markdown('<hr class="cbt-divider">', unsafe_allow_html=True)

    qcard.render(engine, current_q, current_idx + 1, total)

    if engine.last_notice:
        st.info(engine.last_notice)

    # ── 검토 표시 / 이전 / 다음 ───────────────────────────────────────────
    st.markdown("<br>", unsafe_allow_html=True)
    nav_left, nav_center, nav_right = st.columns([1, 2, 1])

    with nav_left:
        if current_idx > 0:
            if st.button("← Previous", key="prev_btn", use_container_width=True):
                engine.previous()
                st.rerun()

    with nav_center:
        is_marked = current_q.id in state.marked
        label = "Unmark review" if is_marked else "Mark for review"
        if st.button(label, key=f"review_{current_q.id}", use_container_width=True):
            engine.toggle_review(current_q.id)
            st.rerun()
        st.markdown(
            f"<p style='text-align:center; font-size:0.85rem; color:#9ca3af; "
            f"padding-top:8px;'>{current_idx + 1} / {total}</p>",
            unsafe_allow_html=True,
        )

    with nav_right:
        if current_idx < total - 1:
            if st.button("Next →", key="next_btn", type="primary", use_container_width=True):
                engine.next()
                st.rerun()
