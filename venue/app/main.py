# venue/app/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import redis_client as redis_module
from .config import settings
from .middleware.audit import audit_middleware
from .middleware.rate_limit import rate_limit_middleware
from .routers import admin, bookings, calendar
from .services.admin import AdminService
from .services.availability import (
    CalendarFetcher,
    MemoryMonthStore,
    RedisMonthStore,
    SupabaseCalendarSource,
    get_calendar_config,
)
from .services.bookings import BookingService
from .utils.supabase import SupabaseClient

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


def create_fetcher(client: SupabaseClient) -> CalendarFetcher:
    config = get_calendar_config()
    redis = redis_module.redis_client
    if redis is not None:
        store = RedisMonthStore(redis, config.cache_ttl_seconds)
    else:
        store = MemoryMonthStore(config.cache_ttl_seconds)
    return CalendarFetcher(SupabaseCalendarSource(client), store=store, config=config)


@asynccontextmanager
async def lifespan(app: FastAPI):
    client = SupabaseClient()
    admin_client = SupabaseClient(api_key=settings.admin_key)

    fetcher = create_fetcher(client)
    app.state.fetcher = fetcher
    app.state.booking_service = BookingService(client, fetcher)
    app.state.admin_service = AdminService(admin_client, fetcher)

    logger.info(
        f"Venue API started: supabase={settings.supabase_url} "
        f"cache={type(fetcher.store).__name__} tz={fetcher.config.timezone}"
    )
    yield


app = FastAPI(title="Venue Booking API", lifespan=lifespan)

# ===== Middleware order =====
app.middleware("http")(rate_limit_middleware)
app.middleware("http")(audit_middleware)

app.include_router(calendar.router)
app.include_router(bookings.router)
app.include_router(admin.router)


@app.get("/health")
def health():
    redis = redis_module.redis_client
    if redis is None:
        return {"status": "ok", "redis": None}
    try:
        return {"status": "ok", "redis": redis.ping()}
    except Exception as e:
        logger.error(f"Redis ping failed: {e}")
        return {"status": "degraded", "redis": False}
