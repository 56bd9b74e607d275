from datetime import datetime, timedelta, timezone

import httpx
import pytest

from linkedin_growth.models import CommentCache, PostCache, SyncStatus, User
from linkedin_growth.services import post_sync
from linkedin_growth.services.linkedin_client import LinkedInDMAClient
from linkedin_growth.services.post_sync import (
    comment_keys,
    engagement_rate,
    extract_hashtags,
    get_sync_status,
    performance_tier,
    sync_user_posts,
)
from linkedin_growth.services.snapshot import MediaType

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


class _Result:
    def __init__(self, rows):
        self._rows = rows

    def scalars(self):
        return self

    def all(self):
        return list(self._rows)

    def one(self):
        return self._rows[0]


class FakeSession:
    """Just enough of AsyncSession for the sync upserts.

    Added rows are visible to later selects, like a real session after flush.
    """

    def __init__(self, existing=(), watch: User | None = None):
        self.rows = list(existing)
        self.added = []
        self.flushes = 0
        self.rollbacks = 0
        self.committed = []
        self.watch = watch

    async def execute(self, statement):
        entity = statement.column_descriptions[0]["entity"]
        return _Result([row for row in self.rows if isinstance(row, entity)])

    def add(self, row):
        self.added.append(row)
        self.rows.append(row)

    async def flush(self):
        self.flushes += 1

    async def commit(self):
        self.committed.append(self.watch.posts_sync_status if self.watch else None)

    async def rollback(self):
        self.rollbacks += 1


def _user() -> User:
    return User(id=1, user_id="user-1", linkedin_member_urn="urn:li:person:one")


def _client(handler) -> LinkedInDMAClient:
    return LinkedInDMAClient("token", transport=httpx.MockTransport(handler))


def _share_payload() -> dict:
    def date(days_ago: int) -> str:
        return (NOW - timedelta(days=days_ago)).strftime("%Y-%m-%d %H:%M:%S")

    return {
        "elements": [
            {
                "snapshotDomain": "MEMBER_SHARE_INFO",
                "snapshotData": [
                    {"ShareId": "a", "Date": date(10), "ShareCommentary": "Fresh #AI #ai", "LikesCount": "30"},
                    {"ShareId": "b", "Date": date(200), "ShareCommentary": "Older", "MediaType": "VIDEO"},
                    {"ShareId": "c", "Date": date(500), "ShareCommentary": "Too old to keep"},
                ],
            }
        ]
    }


def test_engagement_rate():
    assert engagement_rate(10, 5, 5, impressions=400) == 5.0
    assert engagement_rate(10, 5, 5) == 2.0
    assert engagement_rate(0, 0, 0) == 0.0


@pytest.mark.parametrize(
    "rate,tier",
    [(0, "low"), (1.99, "low"), (2, "average"), (5, "high"), (9.99, "high"), (10, "viral")],
)
def test_performance_tier(rate, tier):
    assert performance_tier(rate) == tier


def test_extract_hashtags_unique_lowercase():
    assert extract_hashtags("Ship it #AI #Growth #ai") == ["ai", "growth"]
    assert extract_hashtags("") == []


@pytest.mark.asyncio
async def test_sync_inserts_new_posts_within_a_year():
    user = _user()
    session = FakeSession(watch=user)
    async with _client(lambda r: httpx.Response(200, json=_share_payload())) as client:
        result = await sync_user_posts(session, user, client, now=NOW)

    assert result.status == "completed"
    assert result.posts_found == 2
    assert result.inserted == 2
    assert result.updated == 0
    assert user.posts_sync_status == SyncStatus.COMPLETED
    assert user.last_posts_sync == NOW
    assert session.committed == [SyncStatus.SYNCING]

    rows = {row.post_urn: row for row in session.added}
    assert set(rows) == {"a", "b"}
    assert rows["a"].likes == 30
    assert rows["a"].engagement_rate == 3.0
    assert rows["a"].performance_tier == "average"
    assert rows["a"].hashtags_json == '["ai"]'
    assert rows["b"].media_type == MediaType.VIDEO
    assert rows["a"].repurpose_eligible is False
    assert rows["b"].repurpose_eligible is True


@pytest.mark.asyncio
async def test_sync_updates_existing_rows():
    existing = PostCache(user_id=1, post_urn="a", likes=1)
    session = FakeSession(existing=[existing])
    async with _client(lambda r: httpx.Response(200, json=_share_payload())) as client:
        result = await sync_user_posts(session, _user(), client, now=NOW)

    assert result.inserted == 1
    assert result.updated == 1
    assert existing.likes == 30


@pytest.mark.asyncio
async def test_sync_marks_failure_when_snapshot_unavailable():
    session = FakeSession()
    user = _user()
    async with _client(lambda r: httpx.Response(500)) as client:
        result = await sync_user_posts(session, user, client, now=NOW)

    assert result.status == "failed"
    assert user.posts_sync_status == SyncStatus.FAILED
    assert session.rollbacks == 0
    assert session.added == []


@pytest.mark.asyncio
async def test_sync_skips_when_lock_is_held(monkeypatch: pytest.MonkeyPatch):
    async def held(key: str) -> bool:
        return False

    monkeypatch.setattr(post_sync, "acquire_lock", held)

    def unexpected(request: httpx.Request) -> httpx.Response:
        raise AssertionError("LinkedIn must not be called while a sync is running")

    async with _client(unexpected) as client:
        result = await sync_user_posts(FakeSession(), _user(), client, now=NOW)
    assert result.status == "in_progress"


def _unlinked_payload(*extra_records: dict) -> dict:
    records = list(extra_records) + [
        {"ShareCommentary": "No date on this one", "LikesCount": "2"},
        {"Date": (NOW - timedelta(days=3)).strftime("%Y-%m-%d %H:%M:%S"), "ShareCommentary": "Dated, no link"},
    ]
    return {"elements": [{"snapshotDomain": "MEMBER_SHARE_INFO", "snapshotData": records}]}


@pytest.mark.asyncio
async def test_sync_is_idempotent_for_posts_without_ids():
    session = FakeSession()
    user = _user()
    async with _client(lambda r: httpx.Response(200, json=_unlinked_payload())) as client:
        first = await sync_user_posts(session, user, client, now=NOW)
        second = await sync_user_posts(session, user, client, now=NOW + timedelta(minutes=30))

    assert (first.inserted, first.updated) == (2, 0)
    assert (second.inserted, second.updated) == (0, 2)
    assert len([row for row in session.added if isinstance(row, PostCache)]) == 2


@pytest.mark.asyncio
async def test_sync_new_post_does_not_duplicate_existing_ones():
    session = FakeSession()
    user = _user()
    newest = {"Date": (NOW - timedelta(days=1)).strftime("%Y-%m-%d %H:%M:%S"), "ShareCommentary": "Brand new"}

    async with _client(lambda r: httpx.Response(200, json=_unlinked_payload())) as client:
        await sync_user_posts(session, user, client, now=NOW)
    async with _client(lambda r: httpx.Response(200, json=_unlinked_payload(newest))) as client:
        result = await sync_user_posts(session, user, client, now=NOW)

    assert (result.inserted, result.updated) == (1, 2)
    urns = [row.post_urn for row in session.added if isinstance(row, PostCache)]
    assert len(urns) == len(set(urns)) == 3


@pytest.mark.asyncio
async def test_sync_records_failure_on_unexpected_error(monkeypatch: pytest.MonkeyPatch):
    def broken(*args, **kwargs):
        raise ValueError("bad snapshot")

    monkeypatch.setattr(post_sync, "posts_from_snapshot", broken)

    user = _user()
    session = FakeSession(watch=user)
    async with _client(lambda r: httpx.Response(200, json=_share_payload())) as client:
        with pytest.raises(ValueError):
            await sync_user_posts(session, user, client, now=NOW)

    assert session.rollbacks == 1
    assert session.committed == [SyncStatus.SYNCING, SyncStatus.FAILED]
    assert user.posts_sync_status == SyncStatus.FAILED


def test_comment_keys():
    record = {
        "Date": "2026-05-20 10:00:00",
        "Link": "https://www.linkedin.com/feed/update/urn%3Ali%3Aactivity%3A789?commentUrn=x",
        "Message": " Great point ",
    }
    comment_urn, post_urn, message = comment_keys(record)
    assert post_urn == "urn:li:activity:789"
    assert comment_urn.startswith("comment_")
    assert comment_keys(dict(record)) == (comment_urn, post_urn, message)
    assert comment_keys({**record, "Message": "Other"})[0] != comment_urn
    assert comment_keys({"Date": "2026-05-20", "Message": "  "}) is None


@pytest.mark.asyncio
async def test_sync_stores_own_comments():
    comments = [
        {"Date": "2026-05-20 10:00:00", "Link": "https://www.linkedin.com/feed/update/urn:li:activity:789", "Message": "Agreed!"},
        {"Date": "2026-05-21 10:00:00", "Link": "", "Message": ""},
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["domain"] == "ALL_COMMENTS":
            return httpx.Response(200, json={"elements": [{"snapshotDomain": "ALL_COMMENTS", "snapshotData": comments}]})
        return httpx.Response(200, json=_share_payload())

    session = FakeSession()
    user = _user()
    async with _client(handler) as client:
        first = await sync_user_posts(session, user, client, now=NOW)
        second = await sync_user_posts(session, user, client, now=NOW + timedelta(hours=1))

    assert first.comments_stored == 1
    assert second.comments_stored == 1
    cached = [row for row in session.added if isinstance(row, CommentCache)]
    assert len(cached) == 1
    assert cached[0].author_user_id == 1
    assert cached[0].post_urn == "urn:li:activity:789"
    assert cached[0].message == "Agreed!"
    assert cached[0].fetched_at == NOW + timedelta(hours=1)


@pytest.mark.asyncio
async def test_sync_keeps_going_without_comment_snapshot():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["domain"] == "ALL_COMMENTS":
            return httpx.Response(500)
        return httpx.Response(200, json=_share_payload())

    user = _user()
    async with _client(handler) as client:
        result = await sync_user_posts(FakeSession(), user, client, now=NOW)

    assert result.status == "completed"
    assert result.comments_stored == 0
    assert user.posts_sync_status == SyncStatus.COMPLETED


@pytest.mark.asyncio
async def test_get_sync_status():
    latest_ms = int((NOW - timedelta(days=2)).timestamp() * 1000)
    user = _user()
    user.posts_sync_status = SyncStatus.COMPLETED
    user.last_posts_sync = NOW

    status = await get_sync_status(FakeCountSession((4, latest_ms)), user, now=NOW)
    assert status.status == "completed"
    assert status.posts_count == 4
    assert status.latest_post_date == NOW - timedelta(days=2)
    assert status.last_sync == NOW

    never_synced = await get_sync_status(FakeCountSession((0, None)), _user(), now=NOW)
    assert never_synced.status == "pending"
    assert never_synced.posts_count == 0
    assert never_synced.latest_post_date is None


class FakeCountSession:
    def __init__(self, row):
        self.row = row

    async def execute(self, statement):
        return _Result([self.row])
