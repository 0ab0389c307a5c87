# backend/app/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.routing import APIRoute

from .core.config import settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .database import init_db
from .errors import register_error_handlers
from .routes.v1 import auth as auth_routes, health, users, workout_sessions

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(
        "%s API starting (env=%s, capacity=%d, max_duration=%dm, daily_limit=%d, tz=%s)",
        BRAND_NAME,
        settings.environment,
        settings.gym_capacity,
        settings.max_session_duration_minutes,
        settings.daily_session_limit,
        settings.gym_timezone,
    )
    if not settings.is_testing:
        init_db()
    yield
    logger.info("%s API stopped", BRAND_NAME)


def _operation_id(route: APIRoute) -> str:
    # Route names repeat across routers; prefix with method and path.
    verb = "_".join(sorted(m.lower() for m in route.methods or []))
    path = route.path_format.strip("/").replace("/", "_").replace("{", "").replace("}", "")
    return f"{verb}__{path}__{route.name}"


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    lifespan=lifespan,
    generate_unique_id_function=_operation_id,
)
register_error_handlers(app)

api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(health.router)
api_v1.include_router(auth_routes.router, prefix="/auth")
api_v1.include_router(workout_sessions.router, prefix="/workout-sessions")
api_v1.include_router(users.router, prefix="/users")
app.include_router(api_v1)


@app.get("/")
def read_root() -> dict:
    return {"message": f"Welcome to the {BRAND_NAME} API", "version": API_VERSION}
