"""
views/components/sidebar.py

문제 번호 팔레트 컴포넌트.
각 번호를 클릭하면 해당 문제로 바로 이동한다.
"""

from __future__ import annotations

import streamlit as st

from neet_cbt.models.session_state import QuestionStatus
from neet_cbt.services.exam_engine import ExamEngine

_STATUS_ICON = {
    QuestionStatus.UNANSWERED: "⬜",
    QuestionStatus.ANSWERED: "🟩",
    QuestionStatus.MARKED: "🟪",
    QuestionStatus.ANSWERED_AND_MARKED: "✅",
}

_LEGEND = [
    (QuestionStatus.ANSWERED, "Answered"),
    (QuestionStatus.MARKED, "Marked for review"),
    (QuestionStatus.ANSWERED_AND_MARKED, "Answered & marked"),
    (QuestionStatus.UNANSWERED, "Not answered"),
]


def render(engine: ExamEngine) -> None:
    """
    사이드바에 과목 이동 버튼, 진행 현황, 문제 번호 그리드, 범례를 렌더링한다.
    """
    state = engine.snapshot()
    statuses = engine.statuses()
    total = len(statuses)
    answered = len(state.answers)
    current_idx = state.current_index

    # ── 과목 이동 ──────────────────────────────────────────────────────────
    subjects = engine.subjects()
    if len(subjects) > 1:
        cols = st.columns(len(subjects))
        for col, subj in zip(cols, subjects):
            with col:
                if st.button(subj.value, key=f"subject_{subj.value}", use_container_width=True):
                    engine.navigate_to_subject(subj)
                    st.rerun()

    # ── 진행 현황 ──────────────────────────────────────────────────────────
    st.markdown(
        f"<div style='display:flex; justify-content:space-between; font-size:0.8rem; "
        f"color:#6b7280; margin:8px 0 4px 0;'><span>Answered</span>"
        f"<span><b>{answered}</b> / {total}</span></div>",
        unsafe_allow_html=True,
    )
    st.progress(answered / total if total > 0 else 0)

    # ── 문제 번호 그리드 (5열) ─────────────────────────────────────────────
    cols_per_row = 5
    question_ids = [q.id for q in engine.bank]

    for row_start in range(0, total, cols_per_row):
        cols = st.columns(cols_per_row)
        for col_idx, qid in enumerate(question_ids[row_start : row_start + cols_per_row]):
            q_idx = row_start + col_idx
            label = f"{_STATUS_ICON[statuses[q_idx]]}{qid}"
            with cols[col_idx]:
                if st.button(
                    label,
                    key=f"nav_{q_idx}",
                    type="primary" if q_idx == current_idx else "secondary",
                    help=f"Go to question {qid}",
                ):
                    engine.navigate(q_idx)
                    st.rerun()

    # ── 범례 ──────────────────────────────────────────────────────────────
    st.caption("  \n".join(f"{_STATUS_ICON[s]} {text}" for s, text in _LEGEND))
