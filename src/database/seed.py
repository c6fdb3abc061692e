"""Demo data for an empty database."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import settings
from src.features.post.models import Post
from src.features.user.models import User, UserRole

logger = logging.getLogger(__name__)


async def seed_demo_data(session: AsyncSession) -> bool:
    """Insert two demo users and two posts when the users table is empty.

    Returns:
        True if data was inserted, False if the database already had users

    """
    result = await session.execute(select(func.count()).select_from(User))
    if result.scalar_one() > 0:
        return False

    hashed_password = User.hash_password(settings.default_user_password)
    alice = User(name="Alice Johnson", email="alice@example.com", role=UserRole.USER, hashed_password=hashed_password)
    bob = User(name="Bob Smith", email="bob@example.com", role=UserRole.ADMIN, hashed_password=hashed_password)
    session.add_all([alice, bob])
    await session.flush()

    session.add_all(
        [
            Post(title="Welcome to the API", content="This is the first post", author_id=alice.id, published=True),
            Post(title="API Development", content="Building realtime APIs", author_id=bob.id, published=False),
        ]
    )
    await session.flush()

    logger.info("Seeded demo users and posts")
    return True
