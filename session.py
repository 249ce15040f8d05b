# filename: session.py

# -----------------------------------------------------------------------------
# [대화 세션 상태 머신]
# Idle → AwaitingSource → AwaitingDraft → Correcting → Done
# 화면이 무엇을 입력받을지, 입력 후 어디로 넘어갈지는 전부 여기서 결정한다.
# Streamlit 은 매 상호작용마다 스크립트를 재실행하므로, 이 객체 하나를 st.session_state 에 보관한다.
# -----------------------------------------------------------------------------

import enum
import logging
import uuid
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field, replace
from typing import Optional

import config
from core import CorrectionError, CorrectionRequest

logger = logging.getLogger(__name__)

class Phase(enum.Enum):
    IDLE = "idle"
    AWAITING_SOURCE = "awaiting_source"
    AWAITING_DRAFT = "awaiting_draft"
    CORRECTING = "correcting"
    DONE = "done"


class Origin(enum.Enum):
    SYSTEM = "system"
    USER = "user"


class InputKind(enum.Enum):
    CONTENT = "content"
    SUBTITLE = "subtitle"


class Trigger(enum.Enum):
    START = "start"
    SUBMIT = "submit"
    SUCCEED = "succeed"
    FAIL = "fail"
    RESET = "reset"


# 허용된 전이만 여기에 있다. 없는 (단계, 트리거) 조합은 무시된다.
TRANSITIONS = {
    (Phase.IDLE, Trigger.START): Phase.AWAITING_SOURCE,
    (Phase.AWAITING_SOURCE, Trigger.SUBMIT): Phase.AWAITING_DRAFT,
    (Phase.AWAITING_DRAFT, Trigger.SUBMIT): Phase.CORRECTING,
    (Phase.CORRECTING, Trigger.SUCCEED): Phase.DONE,
    (Phase.CORRECTING, Trigger.FAIL): Phase.DONE,
    (Phase.DONE, Trigger.RESET): Phase.IDLE,
}


@dataclass(frozen=True)
class LogEntry:
    """대화창 말풍선 하나."""
    origin: Origin
    display_text: str
    attachment_label: Optional[str] = None
    awaiting_input: Optional[InputKind] = None
    in_progress: bool = False
    corrected_result: Optional[str] = None
    error_message: Optional[str] = None
    entry_id: str = field(default_factory=lambda: uuid.uuid4().hex)


class Session:
    """
    한 브라우저 세션의 대화 상태.

    Args:
        corrector: CorrectionRequest 를 받아 CorrectionResult 를 돌려주는 호출 가능 객체.
            실패 시 CorrectionError 계열 예외를 던진다.
        executor: 보정 호출을 실행할 concurrent.futures 실행기.
            기본값은 이 세션 전용 1인 작업자 풀. 다른 세션과 절대 공유하지 않는다.
    """

    def __init__(self, corrector, executor=None):
        self.corrector = corrector                # 보정 어댑터. app.py 가 사이드바 설정을 묶어 교체할 수 있다.
        # 세션당 진행 중인 호출은 최대 1건. 다른 사용자의 멈춘 호출이 이 세션을 막지 못하도록 풀을 따로 둔다.
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="srt-correction")
        self._clear()

    def _clear(self):
        """처음 만들었을 때와 같은 Idle 상태로 되돌린다. 실행기는 그대로 재사용한다."""
        self.phase = Phase.IDLE                   # 현재 단계.
        self.source_text = None                   # 1단계에서 받은 원본 Content.
        self.draft_subtitle_text = None           # 2단계에서 받은 미완성 SRT.
        self.log = []                             # 화면에 그릴 말풍선 목록. 순서 = 표시 순서.
        self._future = None                       # 진행 중인 보정 호출.
        self._pending_entry_id = None             # 결과를 붙일 '진행 중' 말풍선의 id.

    def _fire(self, trigger):
        """전이표에 있는 조합이면 단계를 옮기고 True, 없으면 아무것도 하지 않고 False."""
        target = TRANSITIONS.get((self.phase, trigger))
        if target is None:
            logger.debug("Ignoring %s while in %s", trigger.value, self.phase.value)
            return False
        logger.info("Session %s --%s--> %s", self.phase.value, trigger.value, target.value)
        self.phase = target
        return True

    # --- 조회 ---

    @property
    def latest_entry(self):
        return self.log[-1] if self.log else None

    @property
    def in_progress_entry(self):
        for entry in self.log:
            if entry.in_progress:
                return entry
        return None

    @property
    def corrected_result(self):
        for entry in reversed(self.log):
            if entry.corrected_result is not None:
                return entry.corrected_result
        return None

    @property
    def is_busy(self):
        return self.phase is Phase.CORRECTING

    # --- 전이 ---

    def start(self):
        """Idle 에서만 동작한다. 인사말과 함께 원본 Content 를 요청한다."""
        if not self._fire(Trigger.START):
            return False
        # 첫 말풍선은 항상 Content 업로드를 요청하는 인사말.
        self.log.append(LogEntry(Origin.SYSTEM, config.GREETING, awaiting_input=InputKind.CONTENT))
        return True

    def submit(self, text, attachment_label=None):
        """
        사용자가 보낸 텍스트(파일 내용 또는 붙여넣기)를 현재 단계에 맞게 기록하고 다음 단계로 넘어간다.
        빈 텍스트 검사는 입력 계층(intake)의 몫이다.
        입력 단계가 아닐 때 호출되면 아무것도 하지 않고 False 를 돌려준다.
        """
        # [1단계] 원본 Content 수신 → 사용자 말풍선 + 다음 요청 말풍선.
        if self.phase is Phase.AWAITING_SOURCE:
            self._fire(Trigger.SUBMIT)
            self.source_text = text
            self.log.append(LogEntry(Origin.USER, config.SOURCE_RECEIVED, attachment_label=attachment_label))
            self.log.append(LogEntry(Origin.SYSTEM, config.DRAFT_REQUEST, awaiting_input=InputKind.SUBTITLE))
            return True

        # [2단계] 미완성 SRT 수신 → 곧바로 보정 호출 시작.
        if self.phase is Phase.AWAITING_DRAFT:
            self._fire(Trigger.SUBMIT)
            self.draft_subtitle_text = text
            self.log.append(LogEntry(Origin.USER, config.DRAFT_RECEIVED, attachment_label=attachment_label))
            self._begin_correction()
            return True

        # 그 밖의 단계에서는 조용히 무시한다. 입력창을 숨기는 것은 화면 쪽 책임.
        logger.debug("Ignoring submission while in %s", self.phase.value)
        return False

    def _begin_correction(self):
        # 진행 중 말풍선 추가와 호출 제출은 항상 함께 일어난다.
        entry = LogEntry(Origin.SYSTEM, config.PROCESSING, in_progress=True)
        self.log.append(entry)
        self._pending_entry_id = entry.entry_id
        request = CorrectionRequest(self.source_text, self.draft_subtitle_text)
        try:
            self._future = self._executor.submit(self.corrector, request)
        except Exception as e:
            # 제출조차 못 했으면(예: 종료된 실행기) 기다릴 호출이 없으므로 바로 실패로 마무리한다.
            logger.exception("Could not schedule correction")
            self._fail(str(e) or e.__class__.__name__)

    def poll(self):
        """보정 호출이 끝났으면 결과를 반영한다. 기다리지 않는다. 반영했으면 True."""
        if self._future is None or not self._future.done():
            return False
        self._settle()
        return True

    def wait(self, timeout=None):
        """보정 호출이 끝날 때까지 기다린 뒤 결과를 반영한다. 진행 중인 호출이 없으면 바로 False."""
        if self._future is None:
            return False
        try:
            # 결과 대신 예외 여부만 기다린다. 실제 결과/예외 처리는 _settle 에서 한 번만.
            self._future.exception(timeout=timeout)
        except FutureTimeoutError:
            return False
        self._settle()
        return True

    def _settle(self):
        future, self._future = self._future, None
        try:
            result = future.result()
        except CorrectionError as e:
            # 키 누락, 네트워크 오류, 빈 응답. 사과 문구로 바꿔 보여준다.
            logger.warning("Correction failed: %s", e)
            self._fail(str(e))
        except Exception as e:
            # 어댑터 밖의 예상치 못한 오류도 세션을 Correcting 에 묶어두지 않는다.
            logger.exception("Unexpected error during correction")
            self._fail(str(e) or e.__class__.__name__)
        else:
            self._update_pending(in_progress=False, display_text=config.COMPLETED,
                                 corrected_result=result.corrected_text)
            self._fire(Trigger.SUCCEED)

    def _fail(self, reason):
        self._update_pending(in_progress=False, display_text=config.FAILURE,
                             error_message=reason or "Unknown error")
        self._fire(Trigger.FAIL)

    def _update_pending(self, **changes):
        # LogEntry 는 불변이므로 같은 자리에 수정본을 끼워 넣는다.
        for i, entry in enumerate(self.log):
            if entry.entry_id == self._pending_entry_id:
                self.log[i] = replace(entry, **changes)
                break
        self._pending_entry_id = None

    def reset(self):
        """Done 에서만 동작한다. 모든 상태를 버리고 새 인사말로 다시 시작한다."""
        if not self._fire(Trigger.RESET):
            return False
        self._clear()
        self.start()
        return True
