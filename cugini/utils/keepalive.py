import logging

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from cugini.config.settings import settings

log = logging.getLogger("cugini.keepalive")

JOB_ID = "supabase_rest_keepalive"


async def supabase_rest_ping() -> bool:
    """
    A real REST request, so idle free-tier projects are not paused.
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
        log.warning("[KEEPALIVE] Supabase env vars missing, skipping ping")
        return False

    headers = {
        "apikey": settings.SUPABASE_ANON_KEY,
        "Authorization": f"Bearer {settings.SUPABASE_ANON_KEY}",
    }
    try:
        async with httpx.AsyncClient(timeout=10) as client:
            res = await client.get(f"{settings.SUPABASE_URL}/rest/v1/", headers=headers)
    except httpx.HTTPError as e:
        log.error(f"[KEEPALIVE] Supabase REST error: {e}")
        return False

    if res.status_code < 400:
        log.info("[KEEPALIVE] Supabase REST ping OK")
        return True
    log.warning(f"[KEEPALIVE] Supabase REST ping failed ({res.status_code})")
    return False


def start_keepalive(scheduler: AsyncIOScheduler, interval_seconds: int) -> None:
    scheduler.add_job(
        supabase_rest_ping,
        "interval",
        seconds=interval_seconds,
        id=JOB_ID,
        replace_existing=True,
    )
    log.info(f"[KEEPALIVE] scheduled every {interval_seconds}s")
