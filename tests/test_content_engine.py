from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

from linkedin_growth.main import app
from linkedin_growth.models import ContentIdea, User
from linkedin_growth.routes import content as content_routes
from linkedin_growth.routes.deps import get_current_user, get_db_session
from linkedin_growth.schemas.content import ContentIdeasResponse
from linkedin_growth.services import content_engine
from linkedin_growth.services.content_engine import (
    ContentGenerationError,
    UnknownCreationTypeError,
    generate_creation_content,
    generate_hooks,
    generate_post,
    list_content_ideas,
)
from linkedin_growth.services.openai_client import OpenAIError
from linkedin_growth.settings import get_settings

AUTH = {"Authorization": "Bearer test-token"}


def _use_settings(monkeypatch: pytest.MonkeyPatch, **overrides) -> None:
    settings = get_settings().model_copy(update=overrides)
    monkeypatch.setattr(content_engine, "get_settings", lambda: settings)


@pytest.fixture
def captured(monkeypatch: pytest.MonkeyPatch) -> list[dict]:
    calls: list[dict] = []

    async def fake_chat_completion(messages, **kwargs):
        calls.append({"messages": messages, **kwargs})
        return "generated text"

    monkeypatch.setattr(content_engine, "chat_completion", fake_chat_completion)
    _use_settings(monkeypatch, openai_api_key="sk-test", openai_model_insights="insights-model")
    return calls


@pytest.mark.asyncio
async def test_unknown_creation_type():
    with pytest.raises(UnknownCreationTypeError):
        await generate_creation_content("memes", "Software")


@pytest.mark.asyncio
async def test_creation_prompt_uses_industry_and_profile(captured: list[dict]):
    result = await generate_creation_content("posting_strategy", "Fintech", {"headline": "CFO"})
    assert result.type == "posting_strategy"
    assert result.content == "generated text"

    call = captured[0]
    assert call["model"] == "insights-model"
    assert call["max_tokens"] == 1000
    assert call["temperature"] == 0.4
    assert "Fintech" in call["messages"][1]["content"]
    assert '"headline": "CFO"' in call["messages"][1]["content"]


@pytest.mark.asyncio
async def test_postgen_adds_house_style_context(captured: list[dict]):
    result = await generate_hooks("We shipped v2 today")
    assert result.type == "hooks"
    messages = captured[0]["messages"]
    assert [m["role"] for m in messages] == ["system", "system", "user"]
    assert messages[1]["content"].startswith("Context: ")
    assert "We shipped v2 today" in messages[2]["content"]


@pytest.mark.asyncio
async def test_missing_api_key_is_503(monkeypatch: pytest.MonkeyPatch):
    async def unconfigured(*args, **kwargs):
        raise OpenAIError("OpenAI API key not configured")

    monkeypatch.setattr(content_engine, "chat_completion", unconfigured)
    _use_settings(monkeypatch, openai_api_key="")

    with pytest.raises(ContentGenerationError) as exc_info:
        await generate_post("Remote teams")
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_upstream_failure_is_502(monkeypatch: pytest.MonkeyPatch):
    async def rate_limited(*args, **kwargs):
        raise OpenAIError("OpenAI API error: 429", status_code=429)

    monkeypatch.setattr(content_engine, "chat_completion", rate_limited)
    _use_settings(monkeypatch, openai_api_key="sk-test")

    with pytest.raises(ContentGenerationError) as exc_info:
        await generate_post("Remote teams")
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_creation_route_rejects_unknown_type(captured: list[dict]):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.post("/v1/creation/ai", json={"type": "memes"}, headers=AUTH)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "BAD_REQUEST"


@pytest.mark.asyncio
async def test_postgen_route(captured: list[dict]):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.post("/v1/postgen/generate", json={"topic": "Hiring"}, headers=AUTH)
    assert response.status_code == 200
    assert response.json()["type"] == "post"
    assert response.json()["content"] == "generated text"


@pytest.mark.asyncio
async def test_save_requires_database(captured: list[dict]):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.post("/v1/postgen/rewrite", json={"text": "Old post", "save": True}, headers=AUTH)
    assert response.status_code == 503


class _Scalars:
    def __init__(self, rows):
        self._rows = rows

    def scalars(self):
        return self

    def all(self):
        return list(self._rows)


class IdeasSession:
    def __init__(self, rows):
        self.rows = rows
        self.statements = []

    async def execute(self, statement):
        self.statements.append(statement)
        return _Scalars(self.rows)


@pytest.mark.asyncio
async def test_list_content_ideas():
    created = datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc)
    session = IdeasSession(
        [
            ContentIdea(
                id=7,
                user_id=1,
                content_type="content_ideas",
                industry_focus="Fintech",
                body="1. Open with a number",
                ai_model="insights-model",
                created_at=created,
            )
        ]
    )

    response = await list_content_ideas(session, User(id=1, user_id="user-1"), "content_ideas", limit=5)

    assert response.total == 1
    idea = response.ideas[0]
    assert (idea.id, idea.type, idea.industry, idea.content) == (7, "content_ideas", "Fintech", "1. Open with a number")
    assert idea.created_at == created

    sql = str(session.statements[0])
    assert "content_ideas.user_id =" in sql
    assert "content_ideas.content_type =" in sql
    assert "ORDER BY content_ideas.created_at DESC" in sql
    assert session.statements[0].compile().params["param_1"] == 5


@pytest.mark.asyncio
async def test_content_ideas_route(monkeypatch: pytest.MonkeyPatch):
    calls = []

    async def fake_session():
        yield SimpleNamespace()

    async def fake_user():
        return User(id=1, user_id="user-1")

    async def fake_list(session, user, content_type=None, limit=10):
        calls.append((user.user_id, content_type, limit))
        return ContentIdeasResponse(ideas=[], total=0)

    monkeypatch.setattr(content_routes, "list_content_ideas", fake_list)
    app.dependency_overrides[get_db_session] = fake_session
    app.dependency_overrides[get_current_user] = fake_user
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            ok = await ac.get("/v1/creation/ideas", params={"type": "posting_strategy", "limit": 3}, headers=AUTH)
            too_many = await ac.get("/v1/creation/ideas", params={"limit": 500}, headers=AUTH)
    finally:
        app.dependency_overrides.clear()

    assert ok.status_code == 200
    assert ok.json() == {"ideas": [], "total": 0}
    assert calls == [("user-1", "posting_strategy", 3)]
    assert too_many.status_code == 422
