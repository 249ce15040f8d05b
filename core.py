# filename: core.py

# -----------------------------------------------------------------------------
# [1. 의존성 임포트]
# UI와 완전히 분리된 자막 보정 엔진. Streamlit을 모르는 순수 로직만 둔다.
# -----------------------------------------------------------------------------

import logging
import re
from dataclasses import dataclass

import google.generativeai as genai
from google.generativeai.types import HarmCategory, HarmBlockThreshold

import config

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# [2. 요청 / 결과 / 오류 타입]
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class CorrectionRequest:
    source_text: str
    draft_subtitle_text: str


@dataclass(frozen=True)
class CorrectionResult:
    corrected_text: str


class CorrectionError(Exception):
    """보정 호출이 실패했을 때의 공통 부모 예외."""


class RemoteError(CorrectionError):
    """Gemini 호출 자체가 실패했거나 빈 응답이 돌아온 경우."""

    def __init__(self, reason):
        super().__init__(reason)
        self.reason = reason


class ConfigurationError(RemoteError):
    """API 키가 설정되지 않은 경우. 호출 전에 바로 실패한다."""


# -----------------------------------------------------------------------------
# [3. 프롬프트 / 후처리]
# -----------------------------------------------------------------------------

PROMPT_TEMPLATE = """
I have two files.
1. A "Source Content" file which is the perfect, ground-truth text (script).
2. An "Unfinished SRT" file which has the correct timestamps but imperfect text (typos, wrong punctuation, missing words, or raw speech-to-text).

YOUR GOAL:
Create a "Perfect SRT" output.

STRICT RULES:
1. Keep every index line and every timecode line from the "Unfinished SRT" exactly as written. Do not change the timing even by a millisecond.
2. Do not add, remove, merge, split or reorder blocks. The output must have the same number of blocks in the same order.
3. Replace only the spoken-text lines inside each block with the corresponding wording from the "Source Content".
4. Use the "Source Content" to fix spelling, punctuation, capitalization and phrasing so the text flows naturally.
5. The output must be valid .srt text.

INPUT DATA:

=== SOURCE CONTENT (Perfect Text) ===
{source_text}

=== UNFINISHED SRT (Timestamps to keep, text to replace) ===
{draft_subtitle_text}

OUTPUT FORMAT:
Return ONLY the finalized SRT content as plain text. Do not wrap it in markdown code blocks (like ```srt).
"""

# 응답 맨 앞의 ``` 또는 ```srt 줄, 맨 뒤의 ```.
# 언어 태그는 정해진 이름만 인정한다. "```1" 처럼 인덱스가 붙어 나오면 ``` 만 떼고 인덱스는 남긴다.
_OPENING_FENCE = re.compile(r"\A\s*```(?:(?:srt|text|txt|plaintext)?[ \t]*(?:\r?\n|\Z))?", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"```\s*\Z")

SAFETY_SETTINGS = {
    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_NONE,
}


def build_prompt(source_text, draft_subtitle_text):
    """두 입력을 가공 없이 그대로 끼워 넣은 고정 지시문을 만든다."""
    return PROMPT_TEMPLATE.format(source_text=source_text, draft_subtitle_text=draft_subtitle_text)


def strip_code_fences(text):
    """
    모델이 지시를 어기고 결과를 마크다운 코드 블록으로 감싼 경우 그 울타리만 벗겨낸다.
    본문 안쪽은 건드리지 않고, 앞뒤 공백은 제거한다.

    Args:
        text (str): 모델의 원본 응답.

    Returns:
        str: 울타리와 앞뒤 공백이 제거된 텍스트.
    """
    text = _OPENING_FENCE.sub("", text, count=1)
    text = _CLOSING_FENCE.sub("", text, count=1)
    return text.strip()


# -----------------------------------------------------------------------------
# [4. Gemini 호출]
# -----------------------------------------------------------------------------

def _configure(api_key):
    key = config.get_api_key(api_key)
    if not key:
        raise ConfigurationError(
            "API key is missing. Set GEMINI_API_KEY (or API_KEY) or enter it in the sidebar."
        )
    genai.configure(api_key=key)


def list_models(api_key=None):
    """generateContent 를 지원하는 모델 이름 목록을 조회한다."""
    _configure(api_key)
    try:
        return [m.name for m in genai.list_models() if "generateContent" in m.supported_generation_methods]
    except Exception as e:
        raise RemoteError(f"Could not list models: {e}") from e


def generate_perfect_srt(source_text, draft_subtitle_text, api_key=None, model_name=None):
    """
    원본 Content 와 미완성 SRT 를 Gemini 에 한 번 보내고, 보정된 SRT 텍스트를 돌려받는다.
    재시도하지 않으며, 결과가 올바른 SRT 인지도 검사하지 않는다.

    Args:
        source_text (str): 정답 대본 텍스트.
        draft_subtitle_text (str): 타임코드는 맞지만 텍스트가 부정확한 자막.
        api_key (str, optional): 직접 지정한 키. 없으면 환경 변수에서 읽는다.
        model_name (str, optional): 사용할 모델. 없으면 설정의 기본 모델.

    Returns:
        str: 코드 블록 울타리가 제거된 보정 자막.

    Raises:
        ConfigurationError: API 키가 없을 때.
        RemoteError: 네트워크/SDK 오류, 차단되었거나 비어 있는 응답.
    """
    _configure(api_key)
    model_name = config.get_model_name(model_name)
    prompt = build_prompt(source_text, draft_subtitle_text)
    logger.info("Requesting correction from %s (source=%d chars, draft=%d chars)",
                model_name, len(source_text), len(draft_subtitle_text))

    try:
        model = genai.GenerativeModel(model_name)
        response = model.generate_content(
            prompt,
            safety_settings=SAFETY_SETTINGS,
            generation_config={"temperature": config.TEMPERATURE},
        )
        # 응답이 차단되면 .text 접근 자체가 ValueError 를 던진다.
        raw_text = response.text
    except Exception as e:
        raise RemoteError(f"Gemini request failed: {e}") from e

    if not raw_text or not raw_text.strip():
        raise RemoteError("No response generated from Gemini.")

    return strip_code_fences(raw_text)


def correct(request, api_key=None, model_name=None):
    """Session 이 사용하는 어댑터 진입점. CorrectionRequest 를 받아 CorrectionResult 를 돌려준다."""
    text = generate_perfect_srt(request.source_text, request.draft_subtitle_text,
                                api_key=api_key, model_name=model_name)
    return CorrectionResult(corrected_text=text)
