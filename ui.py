# filename: ui.py

# -----------------------------------------------------------------------------
# [UI 헬퍼 모듈]
# Streamlit 화면을 그리는 반복적인 코드를 함수로 묶어둔다.
# 세션 상태는 읽기만 하고, 사용자 행동은 반환값(이벤트)으로 app.py 에 돌려준다.
# -----------------------------------------------------------------------------

import html

import streamlit as st

import config
from session import InputKind, Origin, Phase

AVATARS = {Origin.SYSTEM: "🤖", Origin.USER: "🧑"}


def load_css():
    """애플리케이션 전체에 적용될 커스텀 CSS 를 로드한다."""
    st.markdown("""
    <style>
        /* 사이드바 너비 */
        [data-testid="stSidebar"] { min-width: 300px; max-width: 420px; }
        .stButton>button { border-radius: 8px; font-weight: bold; }
        /* 첨부 파일 표시 */
        .attachment { display: inline-block; margin-top: 6px; padding: 4px 10px; border-radius: 8px;
                      background: rgba(0, 0, 0, 0.2); font-size: 0.85em; }
        .footer { font-size: 0.75em; color: #888; text-align: center; }
    </style>
    """, unsafe_allow_html=True)


def render_header(phase):
    """
    제목과 'Start Over' 버튼을 그린다.

    Returns:
        str | None: 버튼이 눌리면 "reset".
    """
    col_title, col_button = st.columns([5, 1])
    col_title.title(f"{config.PAGE_ICON} {config.PAGE_TITLE}")
    col_title.caption(config.PAGE_CAPTION)
    if phase is Phase.DONE and col_button.button("🔄 Start Over"):
        return "reset"
    return None


def render_sidebar():
    """
    사이드바를 그리고 (이벤트, 설정) 을 반환한다.
    API 키는 비워두면 환경 변수(GEMINI_API_KEY / API_KEY)를 사용한다.
    """
    with st.sidebar:
        st.header("⚙️ Settings")
        api_key = st.text_input("Google API Key (optional)", type="password",
                                help="Leave empty to use GEMINI_API_KEY from the environment.")
        settings = {"api_key": api_key or None, "selected_model": None}

        models = st.session_state.get("fetched_models") or []
        if models:
            index = 0
            for i, m in enumerate(models):
                if config.DEFAULT_MODEL in m:
                    index = i
                    break
            settings["selected_model"] = st.selectbox(
                "Select Model", models, index=index, format_func=lambda x: x.replace("models/", ""))
        else:
            st.selectbox("Select Model", [config.get_model_name()], disabled=True)

        event = "update_settings"
        if st.button("🔍 Check Models"):
            event = "check_models"

        st.divider()
        st.markdown(f'<div class="footer">{config.CREDITS}</div>', unsafe_allow_html=True)
    return event, settings


def render_entry(entry):
    """로그 한 줄을 말풍선으로 그린다. 진행 중이면 스피너, 결과가 있으면 결과 뷰어까지."""
    role = "assistant" if entry.origin is Origin.SYSTEM else "user"
    with st.chat_message(role, avatar=AVATARS[entry.origin]):
        st.markdown(entry.display_text.replace("\n", "  \n"))
        if entry.attachment_label:
            st.markdown(f'<span class="attachment">📄 {html.escape(entry.attachment_label)}</span>', unsafe_allow_html=True)
        if entry.in_progress:
            st.caption("⏳ Working on it...")
        if entry.error_message:
            st.caption(f"Reason: {entry.error_message}")
        if entry.corrected_result is not None:
            render_result(entry)


def render_result(entry):
    """보정 결과 뷰어. 코드 블록의 복사 버튼과 .srt 다운로드 버튼을 제공한다."""
    st.code(entry.corrected_result, language="text")
    st.download_button(
        "⬇️ Download .srt",
        entry.corrected_result.encode("utf-8"),
        file_name=config.DOWNLOAD_FILE_NAME,
        mime=config.DOWNLOAD_MIME,
        key=f"download_{entry.entry_id}",
        type="primary",
    )


def render_upload(entry):
    """
    입력을 기다리는 마지막 말풍선 아래에 파일 업로더를 그린다.
    위젯 키가 말풍선마다 다르므로 단계가 바뀌면 업로더도 새로 만들어진다.

    Returns:
        UploadedFile | None
    """
    if entry.awaiting_input is InputKind.SUBTITLE:
        label, types = "Upload the unfinished SRT", config.SUBTITLE_FILE_TYPES
    else:
        label, types = "Upload the original Content", config.CONTENT_FILE_TYPES
    return st.file_uploader(label, type=types, key=f"upload_{entry.entry_id}")


def render_chat_input(phase):
    """붙여넣기 입력창. 입력 단계가 아니면 비활성화된다."""
    accepting = phase in (Phase.AWAITING_SOURCE, Phase.AWAITING_DRAFT)
    placeholder = config.INPUT_PLACEHOLDERS.get(phase.value, "")
    return st.chat_input(placeholder, disabled=not accepting)
