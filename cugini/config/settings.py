import os
from typing import List

from dotenv import load_dotenv

load_dotenv(encoding="utf-8")


def _csv(name: str) -> List[str]:
    raw = os.getenv(name, "") or ""
    return [x.strip() for x in raw.split(",") if x.strip()]


class Settings:
    """
    Runtime configuration, read once from the environment (and a local .env).
    """

    def __init__(self) -> None:
        self.CUGINI_VERSION = os.getenv("CUGINI_VERSION", "0.1.0")

        self.SUPABASE_URL = (os.getenv("SUPABASE_URL") or "").rstrip("/")
        self.SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
        self.SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")

        # where auth e-mails (confirmation, password reset) send people back to
        self.SITE_URL = (os.getenv("SITE_URL") or "http://localhost:3000").rstrip("/")

        self.CORS_MODE = os.getenv("CORS_MODE", "allowlist")
        self.CORS_ALLOW_ORIGINS = _csv("CORS_ALLOW_ORIGINS") or ["http://localhost:3000"]

        self.ADMIN_EMAILS = _csv("ADMIN_EMAILS")
        self.STORE_WHATSAPP = os.getenv("STORE_WHATSAPP", "56932383553")

        self.KEEPALIVE_INTERVAL_SECONDS = int(os.getenv("KEEPALIVE_INTERVAL_SECONDS", "300"))

    @property
    def auth_redirect_url(self) -> str:
        return f"{self.SITE_URL}/auth"


settings = Settings()
