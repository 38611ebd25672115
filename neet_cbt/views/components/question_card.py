"""
views/components/question_card.py

단일 문제(QuestionRecord)를 카드 형태로 렌더링하는 컴포넌트.
보기를 고르면 on_change 콜백에서 엔진에 바로 기록한다.
"""

from __future__ import annotations

import html

import streamlit as st

from neet_cbt.models.question_model import QuestionRecord
from neet_cbt.models.session_state import ExamPhase
from neet_cbt.services.exam_engine import ExamEngine

_OPTION_LABELS = "ABCD"


def _prompt_html(question: QuestionRecord) -> str:
    return (
        f'<div class="question-card"><p style="font-size:1.05rem; font-weight:600; '
        f'line-height:1.7; margin:0;">{html.escape(question.prompt)}</p></div>'
    )


def _on_select(engine: ExamEngine, question_id: int, radio_key: str) -> None:
    option = st.session_state.get(radio_key)
    if option is None:
        return
    if not engine.select_option(question_id, option):
        # 거부된 선택은 위젯 값을 저장된 답으로 되돌린다
        st.session_state[radio_key] = engine.snapshot().answers.get(question_id)


def render(engine: ExamEngine, question: QuestionRecord, question_number: int, total: int) -> None:
    """
    문제 카드를 렌더링한다.

    Args:
        engine:          시험 엔진 (답안 기록 대상)
        question:        렌더링할 QuestionRecord
        question_number: 전체 문제 중 몇 번째 문제인지 (1-based 표시용)
        total:           전체 문제 수
    """

    # ── 문제 헤더 ──────────────────────────────────────────────────────────
    st.markdown(
        f"""
        <div style="display:flex; align-items:center; gap:10px; margin-bottom:12px;">
            <span class="question-number-badge">Question {question_number} / {total}</span>
            <span style="font-size:0.8rem; color:#9ca3af;">{question.subject.value}</span>
        </div>
        """,
        unsafe_allow_html=True,
    )

    if question.is_placeholder:
        st.info("This question is not available. Move on to the next question.")
        return

    st.markdown(_prompt_html(question), unsafe_allow_html=True)

    # ── 보기 선택 (Radio) ─────────────────────────────────────────────────
    available = [i for i in range(len(question.options)) if question.option_available(i)]
    saved = engine.snapshot().answers.get(question.id)
    radio_key = f"radio_{question.id}"

    # 위젯 키가 없을 때만 저장된 답으로 초기화 (재렌더 시 기존 값 유지)
    if radio_key not in st.session_state:
        st.session_state[radio_key] = saved if saved in available else None

    st.radio(
        "Choose an option",
        options=available,
        format_func=lambda i: f"({_OPTION_LABELS[i]}) {question.options[i]}",
        key=radio_key,
        label_visibility="collapsed",
        disabled=engine.phase is not ExamPhase.IN_PROGRESS,
        on_change=_on_select,
        args=(engine, question.id, radio_key),
    )

    if len(available) < len(question.options):
        st.caption("Some options for this question are unavailable.")
