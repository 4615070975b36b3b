"""
SkillSwap Backend: User Directory Service
=========================================

What:  Read side of user profiles plus the owner-only profile edits.
Who:   Users router; SwapRequestService uses find_by_id() to validate the
       accepter of a new request.

Browse semantics (GET /api/users):
    - public profiles only
    - `search` matches name, offered skills or wanted skills, case-insensitive
    - `availability` is an exact match
    - newest members first, capped at settings.user_search_limit (50)
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import String, cast, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.config import settings
from skillswap.exceptions import DatabaseError, ForbiddenError, NotFoundError
from skillswap.models.user import User
from skillswap.schemas.user import ProfileUpdate
from skillswap.services.file_service import FileService, file_service

logger = logging.getLogger(__name__)


class UserDirectory:
    """
    Profile lookups and edits over one database session.

    Credential fields are filtered at the schema layer: every value returned
    here is an ORM object, and only the response models decide what leaves
    the process.
    """

    def __init__(self, db: AsyncSession, files: Optional[FileService] = None):
        self.db = db
        self.files = files or file_service

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        try:
            return await self.db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the user. Please try again.",
                context={"user_id": str(user_id)},
            )

    async def get(self, user_id: uuid.UUID) -> User:
        """Like find_by_id() but raises NotFoundError (→ 404) for unknown ids."""
        user = await self.find_by_id(user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id), message="User not found")
        return user

    async def find(
        self,
        search: Optional[str] = None,
        availability: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[User]:
        """
        Browse public profiles.

        Skill lists are stored as JSON arrays; matching against their text
        form keeps the query identical on PostgreSQL and SQLite.
        """
        query = select(User).where(User.is_public.is_(True))

        term = (search or "").strip()
        if term:
            query = query.where(
                or_(
                    User.name.icontains(term, autoescape=True),
                    cast(User.skills_offered, String).icontains(term, autoescape=True),
                    cast(User.skills_wanted, String).icontains(term, autoescape=True),
                )
            )

        if availability:
            query = query.where(User.availability == availability)

        query = query.order_by(User.created_at.desc()).limit(limit or settings.user_search_limit)

        try:
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing users: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve users. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def update_profile(
        self,
        user_id: uuid.UUID,
        acting_user_id: uuid.UUID,
        update: ProfileUpdate,
    ) -> User:
        """
        Apply the allow-listed fields of `update` to the user's own profile.

        Raises:
            ForbiddenError: acting user edits someone else's profile (checked first)
            NotFoundError: the profile does not exist
        """
        if user_id != acting_user_id:
            raise ForbiddenError(message="You can only update your own profile")

        user = await self.get(user_id)
        changes = update.changes()
        for field, value in changes.items():
            setattr(user, field, value)

        try:
            await self.db.flush()
            await self.db.refresh(user)
        except SQLAlchemyError as e:
            logger.error("Database error updating user %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not update the profile. Please try again.",
                context={"user_id": str(user_id)},
            )

        logger.info("User %s updated fields: %s", user_id, ", ".join(sorted(changes)) or "none")
        return user

    async def set_profile_photo(
        self,
        user_id: uuid.UUID,
        acting_user_id: uuid.UUID,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> str:
        """
        Store a new profile photo and point the profile at it.

        Returns the public URL of the stored photo. The previous photo, if this
        service stored it, is removed after the profile row is updated.
        """
        if user_id != acting_user_id:
            raise ForbiddenError(message="You can only update your own profile")

        user = await self.get(user_id)
        absolute_path, relative_path = await self.files.validate_and_store(
            filename=filename,
            content=content,
            content_length=content_length,
        )
        previous = self.files.path_from_url(user.profile_photo_url)
        user.profile_photo_url = self.files.public_url(relative_path)

        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            await self.files.cleanup_file(absolute_path)
            logger.error("Database error saving photo for user %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not update the profile photo. Please try again.",
                context={"user_id": str(user_id)},
            )

        if previous is not None:
            await self.files.cleanup_file(str(previous))

        logger.info("User %s profile photo set to %s", user_id, relative_path)
        return user.profile_photo_url
