"""Retention cleanup and the Postgres report cache, against fake sessions."""

from datetime import datetime, timedelta, timezone
import json
from types import SimpleNamespace

import pytest

from linkedin_growth.models import AnalyticsCache, InvitationStatus, User
from linkedin_growth.services import analytics_cache, maintenance
from linkedin_growth.services.analytics_cache import get_cached_report, store_report
from linkedin_growth.services.maintenance import CleanupStats, clean_expired_data
from linkedin_growth.settings import get_settings

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


class RecordingSession:
    """Records each statement and answers with the next rowcount."""

    def __init__(self, rowcounts):
        self.rowcounts = list(rowcounts)
        self.statements = []

    async def execute(self, statement):
        self.statements.append(statement)
        return SimpleNamespace(rowcount=self.rowcounts.pop(0))


class _Result:
    def __init__(self, row):
        self._row = row

    def scalar_one_or_none(self):
        return self._row


class CacheSession:
    def __init__(self, row=None):
        self.row = row
        self.added = []
        self.flushes = 0

    async def execute(self, statement):
        return _Result(self.row)

    def add(self, row):
        self.added.append(row)

    async def flush(self):
        self.flushes += 1


def _user() -> User:
    return User(id=1, user_id="user-1")


@pytest.fixture
def retention(monkeypatch: pytest.MonkeyPatch):
    settings = get_settings().model_copy(
        update={"comment_cache_retention_days": 7, "suggestion_retention_days": 30, "report_cache_ttl_seconds": 3600}
    )
    monkeypatch.setattr(maintenance, "get_settings", lambda: settings)
    monkeypatch.setattr(analytics_cache, "get_settings", lambda: settings)
    return settings


@pytest.mark.asyncio
async def test_clean_expired_data_statements_and_counts(retention):
    session = RecordingSession([2, 1, None, 3])

    stats = await clean_expired_data(session, NOW)

    assert stats == CleanupStats(
        analytics_cache_deleted=2,
        comment_cache_deleted=1,
        suggestions_deleted=0,
        invitations_expired=3,
    )
    assert [s.table.name for s in session.statements] == [
        "analytics_cache",
        "comment_cache",
        "suggested_comments",
        "synergy_invitations",
    ]

    analytics, comments, suggestions, invitations = (s.compile().params for s in session.statements)
    assert list(analytics.values()) == [NOW]
    assert list(comments.values()) == [NOW - timedelta(days=7)]
    assert list(suggestions.values()) == [NOW - timedelta(days=30)]
    assert "suggested_comments.used IS" in str(session.statements[2])
    assert InvitationStatus.EXPIRED in invitations.values()
    assert InvitationStatus.PENDING in invitations.values()
    assert NOW in invitations.values()


@pytest.mark.asyncio
async def test_cleanup_only_touches_pending_invitations(retention):
    session = RecordingSession([0, 0, 0, 0])
    await clean_expired_data(session, NOW)

    sql = str(session.statements[-1])
    assert sql.startswith("UPDATE synergy_invitations SET")
    assert "status=" in sql
    assert "synergy_invitations.status =" in sql
    assert "synergy_invitations.expires_at <" in sql


@pytest.mark.asyncio
async def test_get_cached_report_counts_hits():
    row = AnalyticsCache(
        user_id=1,
        cache_key="dashboard",
        time_range="all",
        payload_json=json.dumps({"scores": {"overall": 6.5}}),
        expires_at=NOW + timedelta(minutes=5),
        hit_count=2,
    )
    session = CacheSession(row)

    payload = await get_cached_report(session, _user(), "dashboard", now=NOW)

    assert payload == {"scores": {"overall": 6.5}}
    assert row.hit_count == 3
    assert session.flushes == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("expires_in", [timedelta(0), timedelta(seconds=-1)])
async def test_get_cached_report_ignores_expired_rows(expires_in):
    row = AnalyticsCache(payload_json="{}", expires_at=NOW + expires_in, hit_count=0)
    session = CacheSession(row)

    assert await get_cached_report(session, _user(), "dashboard", now=NOW) is None
    assert row.hit_count == 0
    assert session.flushes == 0


@pytest.mark.asyncio
async def test_get_cached_report_treats_naive_expiry_as_utc():
    row = AnalyticsCache(payload_json='{"ok": true}', expires_at=datetime(2026, 6, 1, 13, 0), hit_count=0)
    assert await get_cached_report(CacheSession(row), _user(), "algo", now=NOW) == {"ok": True}


@pytest.mark.asyncio
async def test_get_cached_report_corrupt_payload():
    row = AnalyticsCache(payload_json="{not json", expires_at=NOW + timedelta(hours=1), hit_count=0)
    assert await get_cached_report(CacheSession(row), _user(), "algo", now=NOW) is None
    assert row.hit_count == 0


@pytest.mark.asyncio
async def test_get_cached_report_missing_row():
    assert await get_cached_report(CacheSession(None), _user(), "algo", now=NOW) is None


@pytest.mark.asyncio
async def test_store_report_inserts_new_row(retention):
    session = CacheSession(None)

    row = await store_report(session, _user(), "analytics", {"posts": 3}, time_range="7d", now=NOW)

    assert session.added == [row]
    assert row.user_id == 1
    assert row.cache_key == "analytics"
    assert row.data_type == "analytics"
    assert row.time_range == "7d"
    assert json.loads(row.payload_json) == {"posts": 3}
    assert row.expires_at == NOW + timedelta(seconds=3600)
    assert row.hit_count == 0


@pytest.mark.asyncio
async def test_store_report_replaces_existing_row_and_resets_hits(retention):
    existing = AnalyticsCache(
        user_id=1,
        cache_key="dashboard",
        time_range="all",
        payload_json='{"old": true}',
        expires_at=NOW - timedelta(hours=2),
        hit_count=9,
    )
    session = CacheSession(existing)

    row = await store_report(
        session, _user(), "dashboard", {"generated": NOW}, ttl_seconds=60, now=NOW
    )

    assert row is existing
    assert session.added == []
    assert row.hit_count == 0
    assert row.expires_at == NOW + timedelta(seconds=60)
    assert json.loads(row.payload_json) == {"generated": str(NOW)}
    assert session.flushes == 1
