"""Post service layer."""

import logging
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.features.user.models import User
from src.features.user.service import UserService
from src.shared.pagination.pagination import PaginationParams

from .exceptions import InvalidPostAuthor
from .models import Post
from .schemas import PostCreateRequest, PostUpdateRequest

logger = logging.getLogger(__name__)


class PostService:
    """Service for post operations."""

    @staticmethod
    async def get_post(session: AsyncSession, post_id: int) -> Post | None:
        """Get post by ID (author loaded)."""
        stmt = select(Post).where(Post.id == post_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_posts(
        session: AsyncSession,
        pagination: PaginationParams,
        published: bool | None = None,
        author_id: int | None = None,
    ) -> tuple[list[Post], int]:
        """Get paginated posts, newest first.

        Args:
            session: Database session
            pagination: PaginationParams with page and limit
            published: Only posts with this published flag
            author_id: Only posts by this author

        Returns:
            Tuple of (posts, total_count)

        """
        conditions = []
        if published is not None:
            conditions.append(Post.published == published)
        if author_id is not None:
            conditions.append(Post.author_id == author_id)

        count_stmt = select(func.count()).select_from(Post).where(*conditions)
        total = (await session.execute(count_stmt)).scalar_one()

        stmt = (
            select(Post)
            .where(*conditions)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .offset(pagination.skip)
            .limit(pagination.limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all()), total

    @staticmethod
    async def create_post(session: AsyncSession, data: PostCreateRequest, author: User) -> Post:
        """Create a post. ``data.author_id`` must reference an existing user when given.

        Raises:
            InvalidPostAuthor: If author_id references no user

        """
        author_id = author.id
        if data.author_id is not None:
            if await UserService.get_user(session, data.author_id) is None:
                raise InvalidPostAuthor()
            author_id = data.author_id

        post = Post(
            title=data.title,
            content=data.content,
            author_id=author_id,
            published=bool(data.published),
        )
        session.add(post)
        await session.flush()
        await session.refresh(post, attribute_names=["author"])

        logger.info(f"Post created: {post.id} by user {author.id}")
        return post

    @staticmethod
    async def update_post(session: AsyncSession, post: Post, data: PostUpdateRequest) -> Post:
        """Replace title and content; published is kept when omitted."""
        post.title = data.title
        post.content = data.content
        if data.published is not None:
            post.published = data.published
        post.updated_at = datetime.now(UTC)

        await session.flush()
        await session.refresh(post, attribute_names=["author", "updated_at"])
        return post

    @staticmethod
    async def delete_post(session: AsyncSession, post_id: int) -> bool:
        """Delete a post. Returns False when it does not exist."""
        post = await PostService.get_post(session, post_id)
        if post is None:
            return False

        await session.delete(post)
        await session.flush()
        logger.info(f"Post deleted: {post_id}")
        return True

    @staticmethod
    async def count_posts(session: AsyncSession) -> int:
        result = await session.execute(select(func.count()).select_from(Post))
        return result.scalar_one()
