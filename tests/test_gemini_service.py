from unittest.mock import Mock, PropertyMock, patch

import pytest

from edupal.exceptions import InvalidModelOutputError, UpstreamServiceError
from edupal.services.gemini_service import GeminiService, parse_model_output, strip_code_fence
from edupal.services.prompts import build_prompt


def test_strip_code_fence_removes_json_fence():
    assert strip_code_fence('```json\n[{"a": 1}]\n```') == '[{"a": 1}]'


def test_strip_code_fence_removes_bare_fence():
    assert strip_code_fence('```\n[1, 2]\n```\n') == '[1, 2]'


def test_strip_code_fence_is_idempotent():
    once = strip_code_fence('```json\n[{"front": "x", "back": "y"}]\n```')
    assert strip_code_fence(once) == once
    assert strip_code_fence('[{"front": "x"}]') == '[{"front": "x"}]'


def test_parse_model_output_accepts_fenced_json():
    assert parse_model_output('```json\n[{"front": "Q", "back": "A"}]\n```') == [
        {"front": "Q", "back": "A"}
    ]


def test_parse_model_output_rejects_prose():
    with pytest.raises(InvalidModelOutputError) as exc_info:
        parse_model_output("Sure! Here are your flashcards: ...")
    assert exc_info.value.status_code == 500
    assert "try again" in exc_info.value.message


def test_parse_model_output_rejects_non_array():
    with pytest.raises(InvalidModelOutputError):
        parse_model_output('{"flashcards": []}')


def test_build_prompt_embeds_text():
    flashcards = build_prompt("flashcards", "TEXT-MARKER {with braces}")
    quiz = build_prompt("quiz", "TEXT-MARKER")

    assert "generate 15 highly effective flashcards" in flashcards
    assert flashcards.rstrip().endswith("TEXT-MARKER {with braces}")
    assert "10-question multiple-choice quiz" in quiz
    assert '"correctAnswerIndex"' in quiz

    with pytest.raises(ValueError):
        build_prompt("essay", "text")


@patch("edupal.services.gemini_service.genai")
def test_generate_passes_temperature(mock_genai):
    model = mock_genai.GenerativeModel.return_value
    model.generate_content.return_value = Mock(text='[{"front": "a", "back": "b"}]')

    service = GeminiService(api_key="key", model_name="gemini-2.5-flash", temperature=0.2)
    assert service.generate("prompt") == '[{"front": "a", "back": "b"}]'

    mock_genai.configure.assert_called_once_with(api_key="key")
    mock_genai.GenerativeModel.assert_called_once_with("gemini-2.5-flash")
    model.generate_content.assert_called_once_with(
        "prompt", generation_config={"temperature": 0.2}
    )


@patch("edupal.services.gemini_service.genai")
def test_generate_wraps_api_errors(mock_genai):
    mock_genai.GenerativeModel.return_value.generate_content.side_effect = RuntimeError("quota")

    with pytest.raises(UpstreamServiceError) as exc_info:
        GeminiService(api_key="key").generate("prompt")
    assert "quota" in exc_info.value.message


@patch("edupal.services.gemini_service.genai")
def test_generate_rejects_blocked_response(mock_genai):
    response = Mock()
    type(response).text = PropertyMock(side_effect=ValueError("no candidates"))
    mock_genai.GenerativeModel.return_value.generate_content.return_value = response

    with pytest.raises(UpstreamServiceError) as exc_info:
        GeminiService(api_key="key").generate("prompt")
    assert exc_info.value.message == "Empty response from the AI model"


@patch("edupal.services.gemini_service.genai")
def test_generate_rejects_blank_text(mock_genai):
    mock_genai.GenerativeModel.return_value.generate_content.return_value = Mock(text="   ")

    with pytest.raises(UpstreamServiceError):
        GeminiService(api_key="key").generate("prompt")
