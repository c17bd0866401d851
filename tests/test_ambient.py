import asyncio

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from cugini.config.settings import settings
from cugini.flags import is_enabled
from cugini.middleware.request_log import mask_headers
from cugini.utils import keepalive


def test_mask_headers_hides_credentials():
    masked = mask_headers({"Authorization": "Bearer abc", "apikey": "k", "Accept": "application/json"})
    assert masked == {"Authorization": "***masked***", "apikey": "***masked***", "Accept": "application/json"}


def test_flags(monkeypatch):
    monkeypatch.setenv("USE_NET_FOR_GOALS", "false")
    assert is_enabled("USE_NET_FOR_GOALS", True) is False
    monkeypatch.delenv("USE_NET_FOR_GOALS")
    assert is_enabled("USE_NET_FOR_GOALS", True) is True


def test_keepalive_skips_without_credentials(monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_URL", "")
    assert asyncio.run(keepalive.supabase_rest_ping()) is False


def test_keepalive_job_is_scheduled_on_interval():
    scheduler = AsyncIOScheduler()
    keepalive.start_keepalive(scheduler, 60)
    jobs = scheduler.get_jobs()
    assert [j.id for j in jobs] == [keepalive.JOB_ID]
    assert jobs[0].trigger.interval.total_seconds() == 60


def test_flags_see_dotenv_values_regardless_of_import_order(monkeypatch):
    import importlib

    import dotenv

    from cugini import flags

    def fake_load_dotenv(*args, **kwargs):
        monkeypatch.setenv("USE_NET_FOR_GOALS", "false")
        monkeypatch.setenv("KEEPALIVE_ENABLED", "true")
        return True

    monkeypatch.setattr(dotenv, "load_dotenv", fake_load_dotenv)
    try:
        reloaded = importlib.reload(flags)
        assert reloaded.SETTINGS == {"use_net_for_goals": False, "keepalive_enabled": True}
    finally:
        monkeypatch.undo()
        importlib.reload(flags)
