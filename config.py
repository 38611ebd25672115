import os

# 기본 디렉토리 설정
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# 경로 설정
STATIC_DIR = os.path.join(BASE_DIR, "static")
LOG_FILE = os.path.join(BASE_DIR, "launch.log")
SESSION_DIR = os.getenv("SESSION_DIR", os.path.join(BASE_DIR, "sessions"))
QUESTION_BANK_FILE = os.getenv("QUESTION_BANK_FILE", "")  # 비어 있으면 내장 샘플 문제 사용

# 서버 설정
DEFAULT_HOST = os.getenv("HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("PORT", "8000"))
DEFAULT_TIMEOUT = 15.0

# 브라우저 세션 설정
SESSION_COOKIE = "neet_session"
SESSION_TTL = int(os.getenv("SESSION_TTL", str(4 * 3600)))  # 시험 시간(3시간)보다 길게

# 시험 설정
EXAM_DURATION_SECONDS = int(os.getenv("EXAM_DURATION_SECONDS", str(3 * 3600)))  # 3시간
TICK_INTERVAL_SECONDS = 1.0
TIME_WARNING_SECONDS = 600  # 10분 미만이면 경고 표시
OPTIONS_PER_QUESTION = 4

# 로그인 허용 목록 (쉼표 구분)
ALLOWED_ROLLS = [
    r.strip()
    for r in os.getenv("ALLOWED_ROLLS", "ROLL001,ROLL002,ROLL003").split(",")
    if r.strip()
]
