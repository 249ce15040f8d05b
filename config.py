# filename: config.py

# -----------------------------------------------------------------------------
# [설정 모듈]
# 앱 전체에서 쓰는 고정값(모델 이름, 안내 문구, 업로드 확장자 등)과
# 환경 변수 기반 설정을 한 곳에 모아둔다.
# -----------------------------------------------------------------------------

import logging
import os

from dotenv import load_dotenv

# 프로젝트 루트의 .env 파일이 있으면 환경 변수로 올린다. 이미 설정된 값은 덮어쓰지 않는다.
load_dotenv()

# --- 화면 ---
PAGE_TITLE = "SRT Perfector"
PAGE_ICON = "✨"
PAGE_CAPTION = "Powered by Gemini 2.5"
CREDITS = "Gemini 2.5 Flash • Streamlit"

# --- Gemini ---
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "API_KEY")
DEFAULT_MODEL = "gemini-2.5-flash"
TEMPERATURE = 0.1

# --- 업로드 / 다운로드 ---
CONTENT_FILE_TYPES = ["txt", "md"]
SUBTITLE_FILE_TYPES = ["srt", "txt"]
DOWNLOAD_FILE_NAME = "perfected_subtitle.srt"
DOWNLOAD_MIME = "text/plain"

# --- 대화 문구 ---
GREETING = (
    "Hi! I'm an AI assistant for subtitle clean-up.\n\n"
    "First, please send me your original Content (the ground-truth script)."
)
SOURCE_RECEIVED = "Sent the original Content."
DRAFT_REQUEST = (
    "Ok. I've received the original Content.\n\n"
    "Next, please give me the unfinished SRT file."
)
DRAFT_RECEIVED = "Sent the unfinished SRT."
PROCESSING = (
    "Ok, thank you. I now have both the original Content and the unfinished SRT.\n\n"
    "I'll build the PERFECTED SRT using the text from the original Content..."
)
COMPLETED = (
    "Ok, thank you. I now have both the original Content and the unfinished SRT.\n\n"
    "Task: match the original Content into the unfinished SRT and rebuild it "
    "with the exact timestamps of the unfinished SRT.\n\n"
    "PERFECTED SRT:"
)
FAILURE = "Sorry, something went wrong while processing with Gemini. Please start over and try again."
BLANK_INPUT_WARNING = "The submitted text is empty. Please upload a file or paste some text."

# 단계별 입력창 안내 문구. 키는 session.Phase 의 value.
INPUT_PLACEHOLDERS = {
    "awaiting_source": "Paste the Content text, or upload a file above...",
    "awaiting_draft": "Paste the SRT text, or upload a file above...",
    "correcting": "AI is thinking...",
    "done": "Processing complete.",
}

# --- 로깅 ---
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def get_api_key(override=None):
    """
    Gemini API 키를 호출 시점에 읽어온다.
    사이드바에 직접 입력한 키가 있으면 그것을 우선하고, 없으면 환경 변수를 순서대로 확인한다.

    Returns:
        str | None: 찾은 키. 어디에도 없으면 None.
    """
    if override and override.strip():
        return override.strip()
    for name in API_KEY_ENV_VARS:
        value = os.getenv(name, "").strip()
        if value:
            return value
    return None


def get_model_name(override=None):
    """사이드바 선택값 → GEMINI_MODEL 환경 변수 → 기본 모델 순으로 모델 이름을 결정한다."""
    if override:
        return override
    return os.getenv("GEMINI_MODEL", "").strip() or DEFAULT_MODEL


def setup_logging():
    """루트 로거에 콘솔 핸들러를 한 번만 붙인다. Streamlit 재실행 때 핸들러가 중복되지 않도록 한다."""
    # 잘못된 LOG_LEVEL 값(예: "LOUD")은 재실행마다 오류를 내지 않도록 INFO 로 대체한다.
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").strip().upper())
    if not isinstance(level, int):
        level = logging.INFO
    root = logging.getLogger()
    if not any(getattr(h, "_srt_perfector", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._srt_perfector = True
        root.addHandler(handler)
    root.setLevel(level)
    return level
