"""
SkillSwap Backend: User SQLAlchemy Model
========================================

What:  ORM model representing the `users` table.
Who:   Read by UserDirectory and, through relationships, by the swap workflow.

Table Design Rationale:
    - UUID primary key: non-sequential, safe to expose in URLs
    - skills_offered / skills_wanted: JSON arrays of free-text skill names
    - password_hash: owned by the (external) auth service; never serialized
    - is_public: private profiles are excluded from browsing but can still be
      fetched by id and still take part in swaps
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from skillswap.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A marketplace member and their skill profile.

    Query Patterns:
        - Browse: WHERE is_public ORDER BY created_at DESC LIMIT 50
        - Lookup: WHERE id = :uuid (swap creation, enrichment)
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # Credential field: excluded from every response schema
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    location: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)

    skills_offered: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    skills_wanted: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # Free label, matched by equality (e.g. "weekends", "evenings", "flexible")
    availability: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="flexible",
        server_default=text("'flexible'"),
    )

    is_public: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    profile_photo_url: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_users_public_created_at", "is_public", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name='{self.name}')>"
