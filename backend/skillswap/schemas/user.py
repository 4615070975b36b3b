"""
SkillSwap Backend: User Schemas
===============================

What:  Pydantic models for the user directory API.

Security:
    None of these models declares `password_hash`. Because responses are built
    with `from_attributes`, a field that is not declared can never leak, even
    when the ORM object carries it.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def clean_skills(skills: List[str]) -> List[str]:
    """Trim each skill and drop blanks and case-insensitive duplicates, keeping order."""
    seen = set()
    cleaned = []
    for skill in skills:
        value = skill.strip()
        if value and value.lower() not in seen:
            seen.add(value.lower())
            cleaned.append(value)
    return cleaned


class UserSummary(BaseModel):
    """Contact-safe participant data embedded in swap request responses."""
    id: uuid.UUID
    name: str
    email: str
    profile_photo_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserProfile(BaseModel):
    """
    What:  Full public profile.
    Who:   Returned by GET /api/users, GET /api/users/{id} and PUT /api/users/{id}.
    """
    id: uuid.UUID
    name: str
    email: str
    location: Optional[str] = None
    skills_offered: List[str] = Field(default_factory=list)
    skills_wanted: List[str] = Field(default_factory=list)
    availability: str
    is_public: bool
    profile_photo_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    """
    What:  Body of PUT /api/users/{id}.
    How:   The declared fields ARE the allow-list of editable profile fields.
           Anything else in the payload (email, password, is_admin, ...) is
           silently dropped by `extra="ignore"`.
    """
    name: Optional[str] = Field(default=None, max_length=100)
    location: Optional[str] = Field(default=None, max_length=120)
    skills_offered: Optional[List[str]] = None
    skills_wanted: Optional[List[str]] = None
    availability: Optional[str] = Field(default=None, max_length=50)
    is_public: Optional[bool] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("name", "availability")
    @classmethod
    def strip_required_text(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("location")
    @classmethod
    def strip_location(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v

    @field_validator("skills_offered", "skills_wanted")
    @classmethod
    def normalize_skills(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return clean_skills(v) if v is not None else v

    def changes(self) -> dict:
        """Only the fields the client actually sent with a non-null value."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class PhotoUploadResponse(BaseModel):
    message: str = Field(default="Profile photo updated successfully")
    profile_photo_url: str
