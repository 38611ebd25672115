"""
api/sample_questions.py — 내장 샘플 문제 (NEET 형식)

QUESTION_BANK_FILE 설정이 없을 때 사용된다.
마지막 문제는 본문이 비어 있는 자리 표시 문제이며 선택할 수 없다.
"""

from neet_cbt.models.question_model import QuestionRecord, Subject
from neet_cbt.services.question_bank import QuestionBank

SAMPLE_QUESTIONS: list[QuestionRecord] = [
    QuestionRecord(
        id=1, subject=Subject.PHYSICS,
        prompt="The dimensional formula of Planck's constant is:",
        options=["[ML2T-1]", "[MLT-1]", "[ML2T-2]", "[M0L0T0]"],
    ),
    QuestionRecord(
        id=2, subject=Subject.PHYSICS,
        prompt="A body moving in a circle at constant speed has:",
        options=["Constant velocity", "Constant acceleration", "Constant kinetic energy", "Zero acceleration"],
    ),
    QuestionRecord(
        id=3, subject=Subject.PHYSICS,
        prompt="The SI unit of magnetic flux is:",
        options=["Tesla", "Weber", "Gauss", "Henry"],
    ),
    QuestionRecord(
        id=4, subject=Subject.PHYSICS,
        prompt="For an ideal transformer, which quantity is conserved between primary and secondary?",
        options=["Voltage", "Current", "Power", "Number of turns"],
    ),
    QuestionRecord(
        id=5, subject=Subject.CHEMISTRY,
        prompt="What is H2O?",
        options=["Oxygen", "Hydrogen", "Water", "Carbon Dioxide"],
    ),
    QuestionRecord(
        id=6, subject=Subject.CHEMISTRY,
        prompt="The hybridisation of carbon in methane is:",
        options=["sp", "sp2", "sp3", "dsp2"],
    ),
    QuestionRecord(
        id=7, subject=Subject.CHEMISTRY,
        prompt="Which of the following is a noble gas?",
        options=["Nitrogen", "Argon", "Chlorine", ""],
    ),
    QuestionRecord(
        id=8, subject=Subject.CHEMISTRY,
        prompt="The pH of a neutral aqueous solution at 25 °C is:",
        options=["0", "7", "14", "1"],
    ),
    QuestionRecord(
        id=9, subject=Subject.BIOLOGY,
        prompt="What is the powerhouse of the cell?",
        options=["Nucleus", "Mitochondria", "Ribosome", "Chloroplast"],
    ),
    QuestionRecord(
        id=10, subject=Subject.BIOLOGY,
        prompt="Which blood cells are primarily responsible for immunity?",
        options=["Erythrocytes", "Leucocytes", "Platelets", "Plasma cells only"],
    ),
    QuestionRecord(
        id=11, subject=Subject.BIOLOGY,
        prompt="Photosynthesis takes place in which organelle?",
        options=["Mitochondria", "Golgi body", "Chloroplast", "Lysosome"],
    ),
    QuestionRecord(
        id=12, subject=Subject.BIOLOGY,
        prompt="",
        options=["", "", "", ""],
    ),
]


def load_question_bank(path: str = "") -> QuestionBank:
    """path가 주어지면 JSON 파일에서, 아니면 내장 샘플에서 문제 은행을 만든다."""
    if path:
        return QuestionBank.from_json(path)
    return QuestionBank(SAMPLE_QUESTIONS)
