#!/usr/bin/env python3
"""Refresh one member's post_cache from LinkedIn.

The member must already be registered (POST /v1/users/register). The DMA
token identifies them, exactly as it does for API requests.

Run:
  LINKEDIN_DMA_TOKEN=... python -m scripts.sync_posts
  python -m scripts.sync_posts <token>
"""

import asyncio
import os
import sys

# Ensure imports work when executed as a script/module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv  # noqa: E402

from linkedin_growth.services.linkedin_client import LinkedInDMAClient  # noqa: E402
from linkedin_growth.services.post_sync import sync_user_posts  # noqa: E402
from linkedin_growth.services.users import UserResolutionError, resolve_current_user  # noqa: E402
from linkedin_growth.stores.postgres import close_db, get_session, init_db, ping_db  # noqa: E402
from linkedin_growth.stores.redis import close_redis, init_redis  # noqa: E402

load_dotenv()


async def main() -> int:
    token = sys.argv[1] if len(sys.argv) > 1 else os.getenv("LINKEDIN_DMA_TOKEN", "")
    if not token.strip():
        print("Usage: python -m scripts.sync_posts <dma-token>  (or set LINKEDIN_DMA_TOKEN)")
        return 2

    await init_db()
    await ping_db()
    try:
        await init_redis()
    except Exception:
        # Syncs run unlocked without Redis.
        pass

    try:
        async with LinkedInDMAClient(token) as client:
            async with get_session() as session:
                try:
                    user = await resolve_current_user(session, client)
                except UserResolutionError as e:
                    print({"ok": False, "error": str(e)})
                    return 1
                result = await sync_user_posts(session, user, client)
        print({"ok": result.status == "completed", **result.model_dump(mode="json")})
        return 0 if result.status == "completed" else 1
    finally:
        await close_redis()
        await close_db()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
