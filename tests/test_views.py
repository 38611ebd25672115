from conftest import make_question
from neet_cbt.models.question_model import Subject
from neet_cbt.models.session_state import ExamPhase
from neet_cbt.views import home_view
from neet_cbt.views.components import question_card


def test_streamlit_login_engine_has_no_timer_thread(bank, store):
    engine = home_view._new_engine(bank, store)
    engine.login("ROLL001")
    try:
        assert engine.phase is ExamPhase.IN_PROGRESS
        assert not engine.timer_active
    finally:
        engine.close()


def test_prompt_markup_is_escaped():
    question = make_question(1, Subject.PHYSICS, prompt='<script>alert("x")</script> & <b>F</b>')
    markup = question_card._prompt_html(question)

    assert "<script>" not in markup
    assert "<b>" not in markup
    assert "&lt;script&gt;" in markup
    assert "&amp;" in markup
    assert markup.startswith('<div class="question-card">')
