import pytest

import config
import ui
from session import InputKind, LogEntry, Origin, Phase


class FakeStreamlit:
    """Records every st.* call made by the ui helpers."""

    def __init__(self, button_pressed=False):
        self.calls = []
        self.button_pressed = button_pressed

    def __getattr__(self, name):
        def record(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            if name == "button":
                return self.button_pressed
            return None
        return record

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def columns(self, widths):
        return [self, self]

    def chat_message(self, role, avatar=None):
        self.calls.append(("chat_message", (role,), {"avatar": avatar}))
        return self

    def named(self, name):
        return [(args, kwargs) for n, args, kwargs in self.calls if n == name]


@pytest.fixture
def fake_st(monkeypatch):
    fake = FakeStreamlit()
    monkeypatch.setattr(ui, "st", fake)
    return fake


def test_result_viewer_offers_srt_download(fake_st):
    entry = LogEntry(Origin.SYSTEM, config.COMPLETED, corrected_result="1\n00:00:00,000 --> 00:00:01,000\nHi")
    ui.render_result(entry)

    (code_args, _), = fake_st.named("code")
    assert code_args[0] == entry.corrected_result
    (args, kwargs), = fake_st.named("download_button")
    assert args[1] == entry.corrected_result.encode("utf-8")
    assert kwargs["file_name"] == "perfected_subtitle.srt"
    assert kwargs["file_name"].endswith(".srt")
    assert kwargs["mime"] == "text/plain"


@pytest.mark.parametrize("phase, disabled", [
    (Phase.IDLE, True),
    (Phase.AWAITING_SOURCE, False),
    (Phase.AWAITING_DRAFT, False),
    (Phase.CORRECTING, True),
    (Phase.DONE, True),
])
def test_chat_input_only_enabled_in_input_phases(fake_st, phase, disabled):
    ui.render_chat_input(phase)
    (args, kwargs), = fake_st.named("chat_input")
    assert kwargs["disabled"] is disabled


@pytest.mark.parametrize("kind, types", [
    (InputKind.CONTENT, config.CONTENT_FILE_TYPES),
    (InputKind.SUBTITLE, config.SUBTITLE_FILE_TYPES),
])
def test_uploader_accepts_types_for_requested_input(fake_st, kind, types):
    entry = LogEntry(Origin.SYSTEM, "send it", awaiting_input=kind)
    ui.render_upload(entry)
    (args, kwargs), = fake_st.named("file_uploader")
    assert kwargs["type"] == types
    assert kwargs["key"] == f"upload_{entry.entry_id}"


@pytest.mark.parametrize("phase", [Phase.AWAITING_SOURCE, Phase.AWAITING_DRAFT, Phase.CORRECTING])
def test_start_over_hidden_until_done(fake_st, phase):
    assert ui.render_header(phase) is None
    assert fake_st.named("button") == []


def test_start_over_in_done(monkeypatch):
    fake = FakeStreamlit(button_pressed=True)
    monkeypatch.setattr(ui, "st", fake)
    assert ui.render_header(Phase.DONE) == "reset"
    assert len(fake.named("button")) == 1


def test_attachment_label_is_escaped(fake_st):
    entry = LogEntry(Origin.USER, config.SOURCE_RECEIVED, attachment_label="<img src=x onerror=alert(1)>.txt")
    ui.render_entry(entry)
    html_calls = [args[0] for args, kwargs in fake_st.named("markdown") if kwargs.get("unsafe_allow_html")]
    assert len(html_calls) == 1
    assert "<img" not in html_calls[0]
    assert "&lt;img" in html_calls[0]


def test_in_progress_and_failure_captions(fake_st):
    ui.render_entry(LogEntry(Origin.SYSTEM, config.PROCESSING, in_progress=True))
    ui.render_entry(LogEntry(Origin.SYSTEM, config.FAILURE, error_message="network down"))
    captions = [args[0] for args, _ in fake_st.named("caption")]
    assert any("Working" in c for c in captions)
    assert any("network down" in c for c in captions)
    assert fake_st.named("download_button") == []
