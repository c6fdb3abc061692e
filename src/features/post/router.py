"""Post router (API endpoints)."""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.dependencies import get_db_session
from src.features.auth.dependencies import get_current_user
from src.features.realtime.hub import GLOBAL_NOTIFICATIONS, ChannelHub, get_hub
from src.features.user.models import User
from src.shared.pagination.pagination import PaginationParams

from .exceptions import PostNotFound
from .schemas import PostCreateRequest, PostListResponse, PostResponse, PostUpdateRequest
from .service import PostService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/posts", tags=["Posts"])


@router.get("", response_model=PostListResponse)
async def list_posts(
    pagination: PaginationParams = Depends(),
    published: bool | None = Query(None, description="Filter by published flag"),
    author_id: int | None = Query(None, alias="authorId", description="Filter by author"),
    session: AsyncSession = Depends(get_db_session),
):
    """List posts, newest first."""
    posts, total = await PostService.get_posts(session, pagination, published, author_id)
    return PostListResponse.create([PostResponse.model_validate(p) for p in posts], pagination, total)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, session: AsyncSession = Depends(get_db_session)):
    """Get post by ID."""
    post = await PostService.get_post(session, post_id)

    if not post:
        raise PostNotFound()

    return PostResponse.model_validate(post)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    data: PostCreateRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
    hub: ChannelHub = Depends(get_hub),
):
    """Create a post (requires auth).

    - **title** / **content**: Non-empty text
    - **author_id**: Optional, defaults to the caller
    - **published**: Defaults to false
    """
    post = await PostService.create_post(session, data, current_user)
    await session.commit()

    response = PostResponse.model_validate(post)
    await hub.publish(
        GLOBAL_NOTIFICATIONS,
        {"type": "post_created", "post": response.model_dump(mode="json")},
    )
    return response


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    data: PostUpdateRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Update a post (requires auth)."""
    post = await PostService.get_post(session, post_id)

    if not post:
        raise PostNotFound()

    post = await PostService.update_post(session, post, data)
    await session.commit()
    logger.info(f"Post updated: {post_id} by user {current_user.id}")
    return PostResponse.model_validate(post)


@router.delete("/{post_id}")
async def delete_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete a post (requires auth)."""
    success = await PostService.delete_post(session, post_id)

    if not success:
        raise PostNotFound()

    await session.commit()
    return {"message": "Post deleted successfully"}
