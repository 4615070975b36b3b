"""
SkillSwap Backend: User Directory Route Handlers
================================================

What:  Browse public profiles, view one profile, edit your own profile and
       upload a profile photo. Also serves stored photos.

    GET /api/users?search=&availability=     public, newest first, max 50
    GET /api/users/{id}                      any profile by id
    PUT /api/users/{id}                      owner only, allow-listed fields
    PUT /api/users/{id}/profile-photo        owner only, PNG/JPEG upload
    GET /api/files/{path}                    stored photos
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.auth import get_current_user_id
from skillswap.database import get_db_session
from skillswap.exceptions import NotFoundError
from skillswap.schemas.common import ErrorResponse
from skillswap.schemas.user import PhotoUploadResponse, ProfileUpdate, UserProfile
from skillswap.services.file_service import MEDIA_TYPES, file_service
from skillswap.services.user_service import UserDirectory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Users"])


async def get_user_directory(db: AsyncSession = Depends(get_db_session)) -> UserDirectory:
    return UserDirectory(db)


@router.get(
    "/users",
    response_model=List[UserProfile],
    summary="Browse public profiles",
    description=(
        "Case-insensitive search over name, offered skills and wanted skills, "
        "with an optional exact availability filter. Newest members first."
    ),
)
async def list_users(
    search: Optional[str] = Query(default=None, max_length=100),
    availability: Optional[str] = Query(default=None, max_length=50),
    directory: UserDirectory = Depends(get_user_directory),
) -> List[UserProfile]:
    users = await directory.find(search=search, availability=availability)
    return [UserProfile.model_validate(user) for user in users]


@router.get(
    "/users/{user_id}",
    response_model=UserProfile,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a user profile",
)
async def get_user(
    user_id: uuid.UUID,
    directory: UserDirectory = Depends(get_user_directory),
) -> UserProfile:
    return UserProfile.model_validate(await directory.get(user_id))


@router.put(
    "/users/{user_id}",
    response_model=UserProfile,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Not your profile", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Update my profile",
    description=(
        "Only name, location, skills_offered, skills_wanted, availability and "
        "is_public are applied; any other field in the body is ignored."
    ),
)
async def update_user(
    user_id: uuid.UUID,
    body: ProfileUpdate,
    acting_user_id: uuid.UUID = Depends(get_current_user_id),
    directory: UserDirectory = Depends(get_user_directory),
) -> UserProfile:
    user = await directory.update_profile(user_id, acting_user_id, body)
    return UserProfile.model_validate(user)


@router.put(
    "/users/{user_id}/profile-photo",
    response_model=PhotoUploadResponse,
    responses={
        400: {"description": "Unsupported file type or size", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Not your profile", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Upload my profile photo",
)
async def upload_profile_photo(
    user_id: uuid.UUID,
    photo: UploadFile = File(..., description="PNG or JPEG image"),
    acting_user_id: uuid.UUID = Depends(get_current_user_id),
    directory: UserDirectory = Depends(get_user_directory),
) -> PhotoUploadResponse:
    try:
        content = await photo.read()
        url = await directory.set_profile_photo(
            user_id,
            acting_user_id,
            filename=photo.filename or "photo.jpg",
            content=content,
            content_length=photo.size,
        )
    finally:
        await photo.close()
    return PhotoUploadResponse(profile_photo_url=url)


@router.get(
    "/files/{file_path:path}",
    summary="Serve a stored profile photo",
    responses={404: {"description": "File not found", "model": ErrorResponse}},
)
async def serve_file(file_path: str) -> FileResponse:
    full_path = file_service.resolve(file_path)
    if not full_path.is_file():
        raise NotFoundError(resource="file", resource_id=file_path)

    return FileResponse(
        path=str(full_path),
        media_type=MEDIA_TYPES.get(full_path.suffix.lower(), "application/octet-stream"),
        headers={"Cache-Control": "public, max-age=86400"},
    )
