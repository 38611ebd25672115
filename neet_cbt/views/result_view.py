"""
views/result_view.py — 제출 결과 화면

표시 내용:
  - 응답 / 검토 / 미응답 통계
  - 과목별 응답 현황
  - 사용 시간, 시간 종료 후 제출 여부
채점은 하지 않는다.
"""

from __future__ import annotations

import streamlit as st

from neet_cbt.models.session_state import SubmissionSummary
from neet_cbt.services.exam_engine import ExamEngine
from neet_cbt.services.exam_service import format_hhmmss


def _go_home() -> None:
    """로그인 화면으로 이동하며 세션 정리."""
    for key in ["engine", "confirm_submit", "expiry_rendered", "roll_input"]:
        st.session_state.pop(key, None)
    for k in [k for k in st.session_state if k.startswith("radio_")]:
        del st.session_state[k]
    st.session_state.page = "login"


def _stat_card(col, label: str, value: str, color: str) -> None:
    with col:
        st.markdown(
            f"""
            <div style="text-align:center; padding:12px; border-radius:10px;
                        background:#f8fafc; border:1px solid #e5eaf2;">
                <div style="font-size:1.6rem; font-weight:700; color:{color};">{value}</div>
                <div style="font-size:0.8rem; color:#6b7280;">{label}</div>
            </div>
            """,
            unsafe_allow_html=True,
        )


def _render_subjects(summary: SubmissionSummary) -> None:
    st.markdown("#### Subject-wise summary")
    st.table(
        [
            {
                "Subject": s.subject,
                "Total": s.total,
                "Answered": s.answered,
                "Marked": s.marked,
                "Unanswered": s.unanswered,
            }
            for s in summary.subjects
        ]
    )


def render() -> None:
    """결과 화면 렌더링."""

    # ── 세션 가드 ──────────────────────────────────────────────────────────
    engine: ExamEngine | None = st.session_state.get("engine")
    summary = engine.summary if engine is not None else None
    if summary is None:
        st.warning("No submission found.")
        st.button("Back to login", type="primary", on_click=_go_home)
        return

    _, col, _ = st.columns([0.8, 2.5, 0.8])

    with col:
        st.markdown('<div class="cbt-card">', unsafe_allow_html=True)
        st.markdown(
            f"<h2 style='text-align:center;'>Test submitted</h2>"
            f"<p style='text-align:center; color:#6b7280;'>Roll No: {summary.roll} · "
            f"time used {format_hhmmss(summary.time_used_seconds)}</p>",
            unsafe_allow_html=True,
        )
        if summary.after_expiry:
            st.info("Submitted after the time limit; answers were locked at expiry.")

        # ── 통계 4분할 ────────────────────────────────────────────────────
        s1, s2, s3, s4 = st.columns(4)
        _stat_card(s1, "Answered", str(summary.answered), "#10b981")
        _stat_card(s2, "Marked", str(summary.marked), "#8b5cf6")
        _stat_card(s3, "Answered & marked", str(summary.answered_and_marked), "#4a7fcb")
        _stat_card(s4, "Unanswered", str(summary.unanswered), "#f59e0b")

        st.markdown('<hr class="cbt-divider">', unsafe_allow_html=True)
        _render_subjects(summary)

        st.button(
            "Back to login",
            key="home_btn",
            type="primary",
            use_container_width=True,
            on_click=_go_home,
        )
        st.markdown("</div>", unsafe_allow_html=True)  # cbt-card 닫기
