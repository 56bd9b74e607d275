from datetime import datetime, timedelta, timezone

import httpx
import pytest

from linkedin_growth.schemas.postpulse import PostData, PostPulseFilters
from linkedin_growth.services.linkedin_client import LinkedInAPIError, LinkedInDMAClient
from linkedin_growth.services.post_pulse import (
    PostNotFoundError,
    build_repurpose_draft,
    filter_posts,
    get_post_pulse,
    get_repurpose_draft,
    is_repurpose_eligible,
    posts_from_snapshot,
    repurpose_status,
)

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def _ms(days_ago: float) -> int:
    return int((NOW - timedelta(days=days_ago)).timestamp() * 1000)


def _share(days_ago: int, **extra) -> dict:
    record = {"Date": (NOW - timedelta(days=days_ago)).strftime("%Y-%m-%d %H:%M:%S")}
    record.update(extra)
    return record


def _payload(records: list[dict]) -> dict:
    return {"elements": [{"snapshotDomain": "MEMBER_SHARE_INFO", "snapshotData": records}]}


@pytest.mark.parametrize(
    "days_ago,status,until_ready,can_repost",
    [
        (0, "too-soon", 46, False),
        (41, "too-soon", 5, False),
        (42, "close", 4, False),
        (45, "close", 1, False),
        (46, "ready", 0, True),
        (80, "ready", 0, True),
    ],
)
def test_repurpose_status_boundaries(days_ago, status, until_ready, can_repost):
    result = repurpose_status(_ms(days_ago), NOW)
    assert result.status == status
    assert result.days_since_posted == days_ago
    assert result.days_until_ready == until_ready
    assert result.can_repost is can_repost
    assert is_repurpose_eligible(_ms(days_ago), NOW) is can_repost


def test_repurpose_status_future_post_counts_as_today():
    result = repurpose_status(_ms(-2), NOW)
    assert result.days_since_posted == 0
    assert result.status == "too-soon"


def test_posts_from_snapshot_drops_old_posts_and_sorts_oldest_first():
    payload = _payload(
        [
            _share(3, ShareCommentary="newest", LikesCount="4"),
            _share(120, ShareCommentary="too old"),
            _share(30, ShareCommentary="older", ShareLink="https://www.linkedin.com/feed/update/urn:li:activity:123"),
        ]
    )
    posts = posts_from_snapshot(payload, NOW)
    assert [p.text for p in posts] == ["older", "newest"]
    assert posts[0].id == "urn:li:activity:123"
    assert posts[1].likes == 4
    assert posts[1].id.startswith("post_")


def test_posts_from_snapshot_media_type_defaults():
    posts = posts_from_snapshot(
        _payload([_share(1, MediaUrl="https://media.example/img.png"), _share(2)]),
        NOW,
    )
    by_type = {p.media_type for p in posts}
    assert by_type == {"IMAGE", "TEXT"}


def test_posts_from_snapshot_undated_post_is_stamped_now():
    posts = posts_from_snapshot(_payload([{"ShareCommentary": "no date"}]), NOW)
    assert len(posts) == 1
    assert posts[0].created_at == int(NOW.timestamp() * 1000)


def test_fallback_post_id_is_stable():
    records = [_share(5, ShareCommentary="dated"), {"ShareCommentary": "undated"}]
    first = posts_from_snapshot(_payload(records), NOW)
    later = posts_from_snapshot(_payload([_share(2, ShareCommentary="new")] + records), NOW + timedelta(hours=1))

    ids = {p.text: p.id for p in first}
    assert ids["dated"].startswith("post_")
    assert {p.text: p.id for p in later if p.text != "new"} == ids
    assert ids["dated"] != ids["undated"]


def test_posts_from_snapshot_unlabelled_element():
    payload = {"elements": [{"snapshotData": [_share(1, ShareCommentary="x")]}]}
    assert len(posts_from_snapshot(payload, NOW)) == 1


def _post(post_id: str, days_ago: float, **fields) -> PostData:
    return PostData(id=post_id, created_at=_ms(days_ago), **fields)


def test_filter_posts_time_window_and_default_sort():
    posts = [_post("a", 2), _post("b", 20), _post("c", 60)]
    assert [p.id for p in filter_posts(posts, "7d", now=NOW)] == ["a"]
    assert [p.id for p in filter_posts(posts, "30d", now=NOW)] == ["b", "a"]
    assert [p.id for p in filter_posts(posts, "all", now=NOW)] == ["c", "b", "a"]


def test_filter_posts_type_filters():
    posts = [
        _post("text", 1),
        _post("media", 2, media_url="https://media.example/v.mp4"),
        _post("doc", 3, document_url="https://media.example/d.pdf"),
    ]
    assert [p.id for p in filter_posts(posts, post_type="text", now=NOW)] == ["text"]
    assert [p.id for p in filter_posts(posts, post_type="image", now=NOW)] == ["media"]
    assert [p.id for p in filter_posts(posts, post_type="video", now=NOW)] == ["media"]
    assert [p.id for p in filter_posts(posts, post_type="document", now=NOW)] == ["doc"]


def test_filter_posts_sort_keys():
    posts = [_post("a", 1, likes=5, comments=1), _post("b", 2, likes=9, comments=0)]
    assert [p.id for p in filter_posts(posts, sort_by="recent", now=NOW)] == ["a", "b"]
    assert [p.id for p in filter_posts(posts, sort_by="likes", now=NOW)] == ["b", "a"]
    assert [p.id for p in filter_posts(posts, sort_by="comments", now=NOW)] == ["a", "b"]


def test_build_repurpose_draft():
    draft = build_repurpose_draft(_post("a", 50, text="Evergreen post", likes=3, shares=1), NOW)
    assert draft.text == "Evergreen post"
    assert draft.engagement.likes == 3
    assert draft.engagement.shares == 1
    assert draft.repurpose.can_repost is True


def _snapshot_client(records: list[dict]) -> LinkedInDMAClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_payload(records))

    return LinkedInDMAClient("token", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_get_post_pulse_without_cache():
    client = _snapshot_client([_share(50, ShareCommentary="old"), _share(5, ShareCommentary="new")])
    try:
        response = await get_post_pulse(client, PostPulseFilters(sort_by="recent"), now=NOW)
    finally:
        await client.close()

    assert response.total == 2
    assert response.is_cached is False
    assert response.metadata.data_source == "member_share_info"
    assert [p.text for p in response.posts] == ["new", "old"]
    assert response.posts[1].repurpose.status == "ready"


@pytest.mark.asyncio
async def test_get_post_pulse_upstream_failure():
    client = LinkedInDMAClient("token", transport=httpx.MockTransport(lambda r: httpx.Response(500)))
    try:
        with pytest.raises(LinkedInAPIError):
            await get_post_pulse(client, PostPulseFilters(), now=NOW)
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_get_repurpose_draft_lookup():
    records = [_share(60, ShareId="share-1", ShareCommentary="Worth another run")]
    client = _snapshot_client(records)
    try:
        draft = await get_repurpose_draft(client, "share-1", now=NOW)
        assert draft.text == "Worth another run"
        with pytest.raises(PostNotFoundError):
            await get_repurpose_draft(client, "missing", now=NOW)
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_repurpose_route_not_found(monkeypatch: pytest.MonkeyPatch):
    from httpx import ASGITransport, AsyncClient

    from linkedin_growth.main import app
    from linkedin_growth.routes import postpulse as postpulse_routes

    async def fake_get_repurpose_draft(client, post_id, **kwargs):
        raise PostNotFoundError(f"Post {post_id} not found")

    monkeypatch.setattr(postpulse_routes, "get_repurpose_draft", fake_get_repurpose_draft)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.post(
            "/v1/postpulse/repurpose",
            json={"postId": "urn:li:activity:1"},
            headers={"Authorization": "Bearer test-token"},
        )
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Post urn:li:activity:1 not found"


@pytest.mark.asyncio
async def test_postpulse_route_rejects_unknown_filter():
    from httpx import ASGITransport, AsyncClient

    from linkedin_growth.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get(
            "/v1/postpulse",
            params={"postType": "gif"},
            headers={"Authorization": "Bearer test-token"},
        )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_force_refresh_drops_cached_posts(monkeypatch: pytest.MonkeyPatch):
    from linkedin_growth.services import post_pulse

    dropped: list[str] = []

    async def fake_delete(user_key: str) -> None:
        dropped.append(user_key)

    async def unexpected_read(user_key: str):
        raise AssertionError("cache must not be read on force refresh")

    monkeypatch.setattr(post_pulse, "delete_post_pulse_cache", fake_delete)
    monkeypatch.setattr(post_pulse, "get_post_pulse_cache", unexpected_read)

    client = _snapshot_client([_share(5, ShareCommentary="fresh")])
    try:
        response = await get_post_pulse(client, PostPulseFilters(), user_key="user-1", force_refresh=True, now=NOW)
    finally:
        await client.close()

    assert dropped == ["user-1"]
    assert response.is_cached is False
    assert [p.text for p in response.posts] == ["fresh"]
