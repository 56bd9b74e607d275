#!/usr/bin/env python3
"""Retention cleanup job for cron.

Schedule:
- Run once per day.

Behavior:
- Delete expired analytics_cache rows
- Delete comment_cache rows older than COMMENT_CACHE_RETENTION_DAYS (default 7)
- Delete unused suggested_comments older than SUGGESTION_RETENTION_DAYS (default 30)
- Mark pending synergy invitations past expires_at as expired

Run:
  python -m scripts.cleanup_expired
"""

import asyncio
from dataclasses import asdict
import os
import sys

# Ensure imports work when executed as a script/module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv  # noqa: E402

from linkedin_growth.services.maintenance import clean_expired_data  # noqa: E402
from linkedin_growth.stores.postgres import close_db, get_session, init_db, ping_db  # noqa: E402

load_dotenv()


async def main() -> None:
    await init_db()
    await ping_db()
    try:
        async with get_session() as session:
            stats = await clean_expired_data(session)
        print({"ok": True, **asdict(stats)})
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
