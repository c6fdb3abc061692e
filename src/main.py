import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config.cors_config import CORSConfigurationError
from src.config.logging_config import configure_logging
from src.config.settings import settings
from src.database.client import close_db, init_db
from src.features.auth.router import router as auth_router
from src.features.file.router import router as file_router
from src.features.post.router import router as post_router
from src.features.realtime.router import router as realtime_router
from src.features.system.router import index_router
from src.features.system.router import router as system_router
from src.features.user.router import router as user_router
from src.shared.error_handlers import catch_unhandled_exceptions, register_exception_handlers
from src.shared.middlewares.logging_middleware import RequestLoggingMiddleware
from src.shared.rate_limit.middleware import RateLimitMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Handle startup and shutdown events."""
    # Startup
    configure_logging(settings.log_level)
    await init_db()
    logger.info(f"{settings.app_name} v{settings.app_version} started ({settings.environment})")
    yield
    # Shutdown
    await close_db()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

register_exception_handlers(app)

# Middleware runs outermost-last: CORS -> error boundary -> request log -> rate limit -> routes
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.middleware("http")(catch_unhandled_exceptions)

try:
    cors_config = settings.get_cors_configuration()
    cors_config.log_configuration()
    app.add_middleware(CORSMiddleware, **cors_config.get_middleware_config())
except CORSConfigurationError as exc:
    logger.error(f"CORS configuration error: {exc}")
    raise

# Router Registration

api_routers: list[APIRouter] = [
    auth_router,
    user_router,
    post_router,
    file_router,
    system_router,
]

for router in api_routers:
    app.include_router(router, prefix=settings.api_prefix)

app.include_router(index_router)
app.include_router(realtime_router)


def run() -> None:
    """Console entry point."""
    uvicorn.run("src.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
