# filename: app.py

# -----------------------------------------------------------------------------
# [1. 의존성 임포트]
# -----------------------------------------------------------------------------

# --- 외부 라이브러리 ---
import logging
import time
from functools import partial

import streamlit as st                 # 웹 UI 프레임워크. 화면을 그리고 사용자 입력을 처리한다.

# --- 내부 모듈 ---
import config                          # 고정 설정값과 환경 변수.
import core                            # Gemini 보정 어댑터.
import intake                          # 업로드/붙여넣기 입력 검사.
import ui                              # 화면 구성 함수들.
from session import Phase, Session     # 대화 상태 머신.

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# [2. 애플리케이션 상태 관리]
# Streamlit 은 상호작용마다 스크립트 전체를 재실행하므로, 세션 객체는 st.session_state 에 보관한다.
# -----------------------------------------------------------------------------

def init_session_state():
    """
    애플리케이션의 상태 변수를 처음 한 번만 만든다.
    재실행마다 값이 초기화되지 않도록, 키가 없을 때만 기본값을 넣는다.
    """
    defaults = {
        "fetched_models": [],                                    # 'Check Models' 로 조회한 모델 목록.
        "settings": {"api_key": None, "selected_model": None},   # 사이드바 설정값.
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value

    # 대화 세션은 브라우저 세션마다 하나. 다른 사용자와 공유하지 않는다.
    if "session" not in st.session_state:
        st.session_state["session"] = new_session()


def new_session():
    """인사말까지 들어간 새 대화 세션을 만든다."""
    session = Session(corrector=core.correct)
    session.start()
    return session


def bind_corrector(session, settings):
    """
    사이드바 설정(API 키, 모델)을 이 세션의 보정 호출에 묶는다.
    보정은 별도 스레드에서 돌기 때문에 그 안에서는 st.session_state 를 읽을 수 없다.
    """
    session.corrector = partial(core.correct, api_key=settings.get("api_key"),
                                model_name=settings.get("selected_model"))


# -----------------------------------------------------------------------------
# [3. 메인 애플리케이션 로직]
# 재실행될 때마다 위에서 아래로 한 번씩 화면 전체를 다시 그린다.
# -----------------------------------------------------------------------------

def main():
    """메인 진입점. 사이드바 → 헤더 → 대화 로그 → 입력 → (필요하면) 보정 대기 순으로 그린다."""
    # st.set_page_config 는 반드시 가장 먼저 호출되어야 한다.
    st.set_page_config(page_title=config.PAGE_TITLE, page_icon=config.PAGE_ICON)
    config.setup_logging()
    ui.load_css()
    init_session_state()

    # --- 1. 사이드바 처리 ---
    event, settings = ui.render_sidebar()
    st.session_state["settings"] = settings
    if event == "check_models":
        handle_check_models(settings.get("api_key"))

    # --- 2. 세션 상태 갱신 ---
    # 지난 실행 사이에 끝난 보정 호출이 있으면 먼저 반영한다.
    session = st.session_state["session"]
    session.poll()

    # 'Start Over' 는 Done 단계에서만 보인다.
    if ui.render_header(session.phase) == "reset":
        session.reset()
        st.rerun()

    # --- 3. 대화 로그 ---
    for entry in session.log:
        ui.render_entry(entry)

    # --- 4. 입력 처리 ---
    # 마지막 말풍선이 입력을 기다리는 경우에만 업로더를 보여준다.
    latest = session.latest_entry
    if latest is not None and latest.awaiting_input is not None:
        uploaded_file = ui.render_upload(latest)
        if uploaded_file is not None:
            handle_submission(session, lambda: intake.submit_upload(session, uploaded_file))

    # 붙여넣기 입력창. 입력 단계가 아니면 비활성화된 채로 그려진다.
    pasted = ui.render_chat_input(session.phase)
    if pasted is not None:
        handle_submission(session, lambda: intake.submit_text(session, pasted))

    # --- 5. 보정 대기 ---
    # 진행 중 말풍선을 먼저 그린 뒤 여기서 기다리고, 끝나면 결과 화면으로 다시 그린다.
    if session.is_busy:
        with st.spinner("AI is thinking..."):
            settled = session.wait()
        if settled:
            st.rerun()


def handle_submission(session, submit):
    """입력을 세션에 넘기고, 받아들여졌으면 화면을 새로 그린다. 빈 입력이면 경고만 띄운다."""
    # 마지막 입력 직전에 현재 사이드바 설정을 보정 호출에 묶어둔다.
    if session.phase is Phase.AWAITING_DRAFT:
        bind_corrector(session, st.session_state["settings"])
    if submit():
        st.rerun()
    else:
        st.warning(config.BLANK_INPUT_WARNING)


def handle_check_models(api_key):
    """'모델 조회' 버튼 클릭 이벤트를 처리한다."""
    with st.spinner("Checking available models..."):
        try:
            models = core.list_models(api_key)
        except core.CorrectionError as e:
            st.sidebar.error(f"Error checking models: {e}")
            return
    logger.info("Fetched %d models", len(models))
    st.session_state["fetched_models"] = models
    st.sidebar.success(f"Found {len(models)} models!")
    time.sleep(1)  # 성공 메시지를 읽을 시간.
    st.rerun()


if __name__ == "__main__":
    main()
