"""
streamlit_app.py — Streamlit 시험 화면 진입점

  streamlit run neet_cbt/streamlit_app.py   (또는 python main.py --ui streamlit)

페이지 전환: st.session_state.page ∈ {"login", "exam", "result"}
"""

import os
import sys

# streamlit run은 스크립트 디렉토리만 모듈 경로에 넣으므로 프로젝트 루트를 추가
_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _ROOT not in sys.path:
    sys.path.insert(0, _ROOT)

import streamlit as st

from config import QUESTION_BANK_FILE, SESSION_DIR
from api.sample_questions import load_question_bank
from neet_cbt.services.question_bank import QuestionBank
from neet_cbt.services.session_store import JsonFileSessionStore
from neet_cbt.views import exam_view, home_view, result_view

st.set_page_config(page_title="NEET CBT", page_icon="📝", layout="wide")

st.markdown(
    """
    <style>
    .timer-display { font-size:1.6rem; font-weight:700; text-align:center;
                     padding:8px; border-radius:10px; background:#eef2ff; color:#1a1a2e; }
    .timer-warning { background:#fee2e2; color:#b91c1c; }
    .question-card { background:#ffffff; border:1px solid #e5eaf2; border-radius:12px;
                     padding:18px 20px; margin-bottom:12px; }
    .question-number-badge { background:#1a1a2e; color:white; border-radius:12px;
                             padding:2px 12px; font-size:0.8rem; }
    .cbt-divider { border:none; border-top:1px solid #e5eaf2; margin:14px 0; }
    .cbt-subtitle { color:#6b7280; font-size:0.9rem; }
    </style>
    """,
    unsafe_allow_html=True,
)


@st.cache_resource
def _bank() -> QuestionBank:
    return load_question_bank(QUESTION_BANK_FILE)


@st.cache_resource
def _store() -> JsonFileSessionStore:
    return JsonFileSessionStore(SESSION_DIR)


page = st.session_state.setdefault("page", "login")

if page == "exam":
    exam_view.render()
elif page == "result":
    result_view.render()
else:
    home_view.render(_bank(), _store())
