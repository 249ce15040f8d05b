import pytest

import core
from core import ConfigurationError, CorrectionRequest, RemoteError

SOURCE = "Hello world."
DRAFT = "1\n00:00:00,000 --> 00:00:01,000\nHelo wrold\n"
INNER = "1\n00:00:00,000 --> 00:00:01,000\nHello world.\n"


class FakeResponse:
    def __init__(self, text):
        self._text = text

    @property
    def text(self):
        if isinstance(self._text, Exception):
            raise self._text
        return self._text


class FakeModel:
    instances = []

    def __init__(self, model_name):
        self.model_name = model_name
        self.prompts = []
        FakeModel.instances.append(self)

    def generate_content(self, prompt, **kwargs):
        self.prompts.append(prompt)
        return FakeResponse(FakeModel.reply)


@pytest.fixture
def gemini(monkeypatch):
    FakeModel.instances = []
    FakeModel.reply = INNER
    configured = {}
    monkeypatch.setattr(core.genai, "configure", lambda api_key: configured.update(api_key=api_key))
    monkeypatch.setattr(core.genai, "GenerativeModel", FakeModel)
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.delenv("GEMINI_MODEL", raising=False)
    FakeModel.configured = configured
    return FakeModel


def test_prompt_embeds_inputs_verbatim():
    prompt = core.build_prompt(SOURCE, DRAFT)
    assert SOURCE in prompt
    assert DRAFT in prompt
    assert "timecode" in prompt
    assert "same number of blocks" in prompt


@pytest.mark.parametrize("raw", [
    "```\n" + INNER + "```",
    "```srt\n" + INNER + "```\n",
    "  ```srt\n" + INNER + "\n```  ",
    "```1\n00:00:00,000 --> 00:00:01,000\nHello world.\n```",
    INNER,
])
def test_strip_code_fences(raw):
    assert core.strip_code_fences(raw) == INNER.strip()


def test_fence_glued_to_index_keeps_index_line():
    cleaned = core.strip_code_fences("```1\n00:00:00,000 --> 00:00:01,000\nHello world.\n```")
    assert cleaned.splitlines()[0] == "1"


@pytest.mark.parametrize("tag", ["SRT", "text", "plaintext"])
def test_known_fence_tags_are_removed(tag):
    assert core.strip_code_fences("```" + tag + "\n" + INNER + "```") == INNER.strip()


def test_strip_code_fences_leaves_body_untouched():
    body = "1\n00:00:00,000 --> 00:00:01,000\nshe said `hi`"
    assert core.strip_code_fences(body) == body


def test_correct_returns_cleaned_text(gemini):
    gemini.reply = "```\n" + INNER + "```"
    result = core.correct(CorrectionRequest(SOURCE, DRAFT))

    assert result.corrected_text == INNER.strip()
    assert len(gemini.instances) == 1
    model = gemini.instances[0]
    assert model.model_name == core.config.DEFAULT_MODEL
    assert DRAFT in model.prompts[0]
    assert gemini.configured["api_key"] == "test-key"


def test_explicit_key_and_model_win(gemini):
    core.generate_perfect_srt(SOURCE, DRAFT, api_key="sidebar-key", model_name="models/gemini-pro")
    assert gemini.configured["api_key"] == "sidebar-key"
    assert gemini.instances[0].model_name == "models/gemini-pro"


def test_missing_key_raises_configuration_error(gemini, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    with pytest.raises(ConfigurationError):
        core.generate_perfect_srt(SOURCE, DRAFT)
    assert gemini.instances == []


def test_fallback_env_var(gemini, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("API_KEY", "other-key")
    core.generate_perfect_srt(SOURCE, DRAFT)
    assert gemini.configured["api_key"] == "other-key"


@pytest.mark.parametrize("reply", ["", "   \n", None, ValueError("response was blocked")])
def test_empty_or_blocked_response_raises_remote_error(gemini, reply):
    gemini.reply = reply
    with pytest.raises(RemoteError):
        core.generate_perfect_srt(SOURCE, DRAFT)


def test_sdk_failure_is_wrapped(gemini, monkeypatch):
    def explode(self, prompt, **kwargs):
        raise ConnectionError("network unreachable")

    monkeypatch.setattr(FakeModel, "generate_content", explode)
    with pytest.raises(RemoteError) as excinfo:
        core.generate_perfect_srt(SOURCE, DRAFT)
    assert "network unreachable" in excinfo.value.reason
    assert isinstance(excinfo.value.__cause__, ConnectionError)


def test_list_models_filters_generate_content(gemini, monkeypatch):
    class M:
        def __init__(self, name, methods):
            self.name = name
            self.supported_generation_methods = methods

    monkeypatch.setattr(core.genai, "list_models", lambda: [
        M("models/gemini-2.5-flash", ["generateContent"]),
        M("models/embedding-001", ["embedContent"]),
    ])
    assert core.list_models() == ["models/gemini-2.5-flash"]
