"""
main.py — NEET CBT 데스크톱 앱 진입점

  python main.py           Streamlit 시험 화면 실행
  python main.py --ui api  FastAPI 서버 실행 (static/index.html이 있을 때만 브라우저를 연다)
"""

import argparse
import os
import socket
import subprocess
import sys
import time
import threading
import logging
import traceback
import webbrowser

# ── 패키지 경로 설정 (반드시 최상단) ──────────────────────────────────────────
_BASE_DIR = os.path.dirname(os.path.abspath(__file__))
if _BASE_DIR not in sys.path:
    sys.path.insert(0, _BASE_DIR)

from config import BASE_DIR, LOG_FILE, DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT, STATIC_DIR

logger = logging.getLogger(__name__)

STREAMLIT_ENTRY = os.path.join(BASE_DIR, "neet_cbt", "streamlit_app.py")
INDEX_HTML = os.path.join(STATIC_DIR, "index.html")

# ── 로깅 설정 ────────────────────────────────────────────────────────────────

def _setup_logging() -> None:
    try:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            handlers=[
                logging.FileHandler(LOG_FILE, encoding='utf-8'),
                logging.StreamHandler(sys.stdout)
            ]
        )
    except PermissionError:
        # 로그 파일 점유 시 콘솔 출력만 사용
        logging.basicConfig(level=logging.INFO)

# ── 서버 및 네트워크 유틸 ───────────────────────────────────────────────────

def _port_is_free(port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind((DEFAULT_HOST, port))
        except OSError:
            return False
        return True

def _pick_port(preferred: int) -> int:
    if _port_is_free(preferred):
        return preferred
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((DEFAULT_HOST, 0))
        port = s.getsockname()[1]
    logger.info(f"포트 {preferred} 사용 중 → {port} 사용")
    return port

def _wait_for_server(port: int, timeout: float = DEFAULT_TIMEOUT) -> bool:
    deadline = time.time() + timeout
    while time.time() < deadline:
        try:
            with socket.create_connection((DEFAULT_HOST, port), timeout=0.5):
                return True
        except OSError:
            time.sleep(0.1)
    return False

def _open_browser(url: str) -> None:
    candidates = [
        r"C:\Program Files\Google\Chrome\Application\chrome.exe",
        r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
        r"C:\Program Files\Microsoft\Edge\Application\msedge.exe",
        r"C:\Program Files (x86)\Microsoft\Edge\Application\msedge.exe",
    ]
    flags = [f"--app={url}", "--no-first-run", "--window-size=1280,800"]

    for path in candidates:
        if os.path.exists(path):
            logger.info(f"브라우저 실행 시도: {path}")
            subprocess.Popen([path] + flags)
            return

    webbrowser.open(url)

def _start_server(port: int) -> None:
    try:
        import uvicorn
        from api.app import create_app
        logger.info(f"Uvicorn 서버 시작 - Port: {port}")
        app = create_app()
        uvicorn.run(app, host=DEFAULT_HOST, port=port, log_level="warning")
    except Exception:
        logger.error(f"서버 오류 발생:\n{traceback.format_exc()}")

def _run_api(port: int, open_browser: bool) -> int:
    server_thread = threading.Thread(target=_start_server, args=(port,), daemon=True)
    server_thread.start()

    if not _wait_for_server(port):
        logger.error("서버 시작 제한 시간을 초과했습니다. 이미 실행 중인 프로세스가 있는지 확인해 주세요.")
        return 1

    url = f"http://{DEFAULT_HOST}:{port}"
    logger.info(f"서버 준비 완료: {url}")
    if open_browser and os.path.exists(INDEX_HTML):
        _open_browser(url)
    elif open_browser:
        logger.warning(f"{INDEX_HTML} 없음: 브라우저를 열지 않습니다. JSON API만 제공합니다.")

    # 메인 스레드 유지
    try:
        while server_thread.is_alive():
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("사용자에 의해 종료되었습니다.")
    return 0

def _run_streamlit(port: int, open_browser: bool) -> int:
    cmd = [
        sys.executable, "-m", "streamlit", "run", STREAMLIT_ENTRY,
        "--server.address", DEFAULT_HOST,
        "--server.port", str(port),
        "--server.headless", "false" if open_browser else "true",
    ]
    logger.info(f"Streamlit 실행: {' '.join(cmd)}")
    try:
        return subprocess.call(cmd, cwd=BASE_DIR)
    except KeyboardInterrupt:
        logger.info("사용자에 의해 종료되었습니다.")
        return 0

def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="NEET CBT launcher")
    parser.add_argument("--ui", choices=["api", "streamlit"], default="streamlit")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--no-browser", action="store_true")
    return parser.parse_args(argv)

# ── 메인 실행 ────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    _setup_logging()
    args = _parse_args()
    logger.info(f"=== NEET CBT Application Started ({args.ui}) ===")
    os.chdir(BASE_DIR)

    port = _pick_port(args.port)
    if args.ui == "streamlit":
        sys.exit(_run_streamlit(port, not args.no_browser))
    sys.exit(_run_api(port, not args.no_browser))
