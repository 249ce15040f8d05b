# filename: intake.py

# -----------------------------------------------------------------------------
# [입력 수집 계층]
# 업로드 파일 또는 붙여넣은 텍스트를 받아 세션에 넘기기 전에 거르는 곳.
# 빈 입력은 여기서 막는다. 세션은 비어 있지 않은 텍스트만 받는다고 가정한다.
# -----------------------------------------------------------------------------

import logging

import chardet

logger = logging.getLogger(__name__)


def detect_encoding(file_byte):
    """
    파일의 인코딩을 자동으로 감지한다.
    Windows 에서 만든 CP949, Mac/Linux 의 UTF-8 등 어떤 파일이 올라와도 글자가 깨지지 않게 한다.
    """
    return chardet.detect(file_byte)["encoding"]


def decode_upload(bytes_data):
    """
    업로드된 바이트를 문자열로 바꾼다.
    감지 실패 시 utf-8 로 대체하고, 그래도 실패하면 손상된 문자는 버리고 강제로 디코딩한다.

    Returns:
        tuple: (텍스트, 사용한 인코딩 이름)
    """
    encoding = detect_encoding(bytes_data) or "utf-8"
    try:
        return bytes_data.decode(encoding), encoding
    except (UnicodeDecodeError, LookupError):
        logger.warning("Could not decode upload as %s, falling back to utf-8", encoding)
        return bytes_data.decode("utf-8", errors="ignore"), "utf-8"


def is_blank(text):
    return text is None or not text.strip()


def submit_text(session, text, attachment_label=None):
    """
    빈 텍스트(공백만 있는 경우 포함)는 거절하고, 그렇지 않으면 세션에 넘긴다.

    Returns:
        bool: 세션이 입력을 받아들여 다음 단계로 넘어갔으면 True.
    """
    if is_blank(text):
        logger.info("Rejected blank submission in %s", session.phase.value)
        return False
    return session.submit(text, attachment_label=attachment_label)


def submit_upload(session, uploaded_file):
    """Streamlit UploadedFile 을 디코딩해 파일 이름을 첨부 표시로 삼아 세션에 넘긴다."""
    text, encoding = decode_upload(uploaded_file.getvalue())
    logger.info("Loaded %s (encoding: %s)", uploaded_file.name, encoding)
    return submit_text(session, text, attachment_label=uploaded_file.name)
