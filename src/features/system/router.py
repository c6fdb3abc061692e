"""Service status endpoints."""

import logging
import time
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.config.settings import settings
from src.database.client import get_session
from src.features.file.service import FileService
from src.features.post.service import PostService
from src.features.realtime.hub import GLOBAL_CHAT, GLOBAL_NOTIFICATIONS, ChannelHub, get_hub
from src.features.user.service import UserService

logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()

index_router = APIRouter(tags=["System"])
router = APIRouter(tags=["System"])

ENDPOINT_INDEX = f"""{settings.app_name} v{settings.app_version}

Users:
- GET {settings.api_prefix}/users - List users (page, limit, search)
- GET {settings.api_prefix}/users/:id - Get user by ID
- POST {settings.api_prefix}/users - Create user
- PUT {settings.api_prefix}/users/:id - Update user
- DELETE {settings.api_prefix}/users/:id - Delete user

Posts:
- GET {settings.api_prefix}/posts - List posts (page, limit, published, authorId)
- GET {settings.api_prefix}/posts/:id - Get post by ID
- POST {settings.api_prefix}/posts - Create post (requires auth)
- PUT {settings.api_prefix}/posts/:id - Update post (requires auth)
- DELETE {settings.api_prefix}/posts/:id - Delete post (requires auth)

Files:
- POST {settings.api_prefix}/files/upload - Upload file (requires auth)
- GET {settings.api_prefix}/files - List uploaded files
- GET {settings.api_prefix}/files/:id - Get file info by ID
- GET {settings.api_prefix}/files/:id/download - Download file
- DELETE {settings.api_prefix}/files/:id - Delete file (requires auth)

Authentication:
- POST {settings.api_prefix}/auth/login - Login with email/password
- POST {settings.api_prefix}/auth/refresh - Refresh access token
- POST {settings.api_prefix}/auth/logout - Logout (invalidate refresh token)

WebSocket:
- WS /ws - authenticate, chat_message, ping
  Channels: {GLOBAL_NOTIFICATIONS}, {GLOBAL_CHAT}, user-{{id}}

Utility:
- GET {settings.api_prefix}/status - Server status
- GET {settings.api_prefix}/health - Health check with database
"""


@index_router.get("/", response_class=PlainTextResponse)
async def root():
    """Plain-text index of the available endpoints."""
    return ENDPOINT_INDEX


@router.get("/status")
async def server_status(hub: ChannelHub = Depends(get_hub)):
    """Server status with record counts and connected WebSocket clients."""
    async with get_session() as session:
        users = await UserService.count_users(session)
        posts = await PostService.count_posts(session)
        files = await FileService.count_files(session)

    return {
        "status": "running",
        "port": settings.port,
        "timestamp": datetime.now(UTC).isoformat(),
        "version": settings.app_version,
        "environment": settings.environment,
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "stats": {
            "users": users,
            "posts": posts,
            "files": files,
            "connectedClients": hub.connection_count,
        },
        "features": [
            "JWT Authentication",
            "Refresh Tokens",
            "Rate Limiting",
            "File Upload Support",
            "WebSocket Real-time Features",
            "Pagination",
        ],
        "websocket": {
            "endpoint": "/ws",
            "channels": [GLOBAL_NOTIFICATIONS, GLOBAL_CHAT, "user-{id}"],
            "messageTypes": ["authenticate", "chat_message", "ping"],
        },
    }


@router.get("/health")
async def health():
    """Database round-trip check; 503 when the database is unreachable."""
    try:
        async with get_session() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, RuntimeError) as exc:
        logger.error(f"Health check failed: {exc}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "error", "database": "disconnected", "error": str(exc)},
        )

    return {"status": "ok", "database": "connected (SQLite)", "timestamp": datetime.now(UTC).isoformat()}


@router.get("/test-error")
async def test_error():
    """Raise an unexpected error to exercise the 500 response."""
    raise RuntimeError("This is a test error for demonstrating error handling")
