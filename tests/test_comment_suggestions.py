import pytest

from linkedin_growth.services import comment_suggestions
from linkedin_growth.services.comment_suggestions import (
    FALLBACK_COMMENTS,
    GENERIC_COMMENT,
    PADDING_COMMENTS,
    generate_comment_suggestions,
    generate_comment_texts,
    normalize_comments,
)
from linkedin_growth.services.openai_client import OpenAIError


def test_normalize_comments_object():
    parsed = {"comments": ["  One  ", "Two", "Three", "Four"]}
    assert normalize_comments(parsed) == ["One", "Two", "Three"]


def test_normalize_comments_accepts_suggestion_objects():
    parsed = {"suggestions": [{"text": "A"}, {"comment": "B"}, {"other": "C"}]}
    assert normalize_comments(parsed) == ["A", "B", GENERIC_COMMENT]


def test_normalize_comments_pads_short_lists():
    assert normalize_comments(["Only one"]) == ["Only one", PADDING_COMMENTS[1], PADDING_COMMENTS[2]]
    assert normalize_comments({"unexpected": True}) == list(PADDING_COMMENTS)


def test_normalize_comments_none_is_fallback():
    assert normalize_comments(None) == list(FALLBACK_COMMENTS)


@pytest.mark.parametrize("parsed", [None, [], {}, [""], {"comments": [1, 2, 3, 4, 5]}, "text"])
def test_normalize_comments_always_three(parsed):
    result = normalize_comments(parsed)
    assert len(result) == 3
    assert all(isinstance(c, str) and c for c in result)


@pytest.mark.asyncio
async def test_generate_comment_texts_falls_back_without_openai(monkeypatch: pytest.MonkeyPatch):
    async def failing_chat_completion(*args, **kwargs):
        raise OpenAIError("OpenAI API key not configured")

    monkeypatch.setattr(comment_suggestions, "chat_completion", failing_chat_completion)
    assert await generate_comment_texts("Great post") == list(FALLBACK_COMMENTS)


@pytest.mark.asyncio
async def test_generate_comment_texts_parses_model_output(monkeypatch: pytest.MonkeyPatch):
    async def fake_chat_completion(*args, **kwargs):
        return '{"comments": ["Insight", "Question?", "Compliment"]}'

    monkeypatch.setattr(comment_suggestions, "chat_completion", fake_chat_completion)
    assert await generate_comment_texts("Great post") == ["Insight", "Question?", "Compliment"]


@pytest.mark.asyncio
async def test_unregistered_caller_gets_temporary_ids(monkeypatch: pytest.MonkeyPatch):
    async def fake_chat_completion(*args, **kwargs):
        return '["a", "b", "c"]'

    monkeypatch.setattr(comment_suggestions, "chat_completion", fake_chat_completion)
    response = await generate_comment_suggestions("urn:li:activity:1", "Great post")
    assert response.post_urn == "urn:li:activity:1"
    assert [s.text for s in response.suggestions] == ["a", "b", "c"]
    assert all(s.id.startswith("temp-") for s in response.suggestions)
