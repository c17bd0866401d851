# cugini/main.py
import logging
import os

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cugini.config.settings import settings
from cugini.flags import SETTINGS
from cugini.middleware.errors import install_error_handlers
from cugini.middleware.request_log import request_logging
from cugini.routes.admin import router as admin_router
from cugini.routes.announcements import router as announcements_router
from cugini.routes.auth import router as auth_router
from cugini.routes.claim import router as claim_router
from cugini.routes.health import router as health_router
from cugini.routes.points import router as points_router
from cugini.routes.profile import router as profile_router
from cugini.routes.redeem import router as redeem_router
from cugini.utils.keepalive import start_keepalive

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
log = logging.getLogger("cugini.main")

app = FastAPI(
    title="Cugini Pizza Loyalty",
    version=settings.CUGINI_VERSION,
    description="Points, rewards and redemptions for Cugini customers",
)

scheduler = AsyncIOScheduler()

# -------------------------------------------------------------------
# Error handling (stable envelopes, no stack leaks)
# -------------------------------------------------------------------
install_error_handlers(app)

# -------------------------------------------------------------------
# CORS (customer web app + admin panel)
# -------------------------------------------------------------------
if settings.CORS_MODE == "allowlist":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["*"],
    )

app.middleware("http")(request_logging)

# -------------------------------------------------------------------
# Routers
# -------------------------------------------------------------------
app.include_router(health_router)
app.include_router(auth_router)

app.include_router(points_router)
app.include_router(claim_router)
app.include_router(redeem_router)
app.include_router(profile_router)
app.include_router(announcements_router)

app.include_router(admin_router)


# -------------------------------------------------------------------
# Root
# -------------------------------------------------------------------
@app.get("/")
async def root():
    return {
        "status": "Cugini Online",
        "product": "pizza-loyalty",
        "routes": [
            "/health",
            "/auth",
            "/points",
            "/claim",
            "/redeem",
            "/profile",
            "/announcements",
            "/admin",
        ],
    }


# -------------------------------------------------------------------
# Startup / shutdown
# -------------------------------------------------------------------
@app.on_event("startup")
async def startup_event():
    if SETTINGS["keepalive_enabled"]:
        start_keepalive(scheduler, settings.KEEPALIVE_INTERVAL_SECONDS)
        scheduler.start()
    log.info(f"Cugini {settings.CUGINI_VERSION} starting (keepalive={SETTINGS['keepalive_enabled']})")


@app.on_event("shutdown")
async def shutdown_event():
    if scheduler.running:
        scheduler.shutdown(wait=False)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
