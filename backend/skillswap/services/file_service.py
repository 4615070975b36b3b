"""
SkillSwap Backend: Profile Photo Storage Service
================================================

What:  Validates, stores and removes uploaded profile photos.
How:   Checks extension and size, then writes the bytes with aiofiles into a
       date-organized directory under a UUID filename.
Who:   Called by UserDirectory.set_profile_photo().

Directory Structure:
    storage/
    └── photos/
        └── 2024/
            └── 01/
                └── 15/
                    ├── a1b2c3d4-5678.jpg
                    └── e5f6g7h8-9012.png

    The relative path (photos/2024/01/15/<uuid>.jpg) is what ends up in
    users.profile_photo_url, prefixed with the public file route.

Attack vectors prevented:
    - Path traversal: UUID filenames contain no user input
    - DoS via large files: size limit checked against the header and the body
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from skillswap.config import settings
from skillswap.exceptions import ValidationError, FileStorageError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}

MEDIA_TYPES = {".png": "image/png", ".jpg": "image/jpeg", ".jpeg": "image/jpeg"}

PHOTO_DIR = "photos"

# Public route prefix under which stored files are served
FILES_URL_PREFIX = "/api/files/"


class FileService:
    """
    Manages the profile photo storage lifecycle.

    Lifecycle of an uploaded photo:
        1. Extension check (rejects obviously wrong files)
        2. Size check (Content-Length first, then actual byte count)
        3. Written to photos/YYYY/MM/DD/<uuid>.<ext>
        4. Previous photo removed best-effort once the profile points at the new one
    """

    def __init__(self, storage_root: Optional[str] = None, max_size: Optional[int] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
            max_size: Override settings.max_photo_size (used in tests).
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.max_size = max_size or settings.max_photo_size
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """
        Returns: Normalized extension (lowercase with dot).
        Raises:  ValidationError if extension is not allowed.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="photo",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Checks the Content-Length header first, then the real byte count
        (some clients send a wrong header).
        """
        max_mb = self.max_size / (1024 * 1024)

        if content_length and content_length > self.max_size:
            raise ValidationError(
                message=f"Photo exceeds the maximum size of {max_mb:.0f}MB.",
                field="photo",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > self.max_size:
            raise ValidationError(
                message=f"Photo ({actual_size / (1024 * 1024):.1f}MB) exceeds the maximum size of {max_mb:.0f}MB.",
                field="photo",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

        if actual_size == 0:
            raise ValidationError(message="Uploaded photo is empty.", field="photo")

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """Returns (absolute_path, relative_path) for a new photos/YYYY/MM/DD/<uuid> file."""
        now = datetime.now(timezone.utc)
        relative_path = f"{PHOTO_DIR}/{now.strftime('%Y/%m/%d')}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write validated content to disk.

        Returns: Tuple of (absolute_path, relative_path).
        Raises:  FileStorageError if directory creation or file write fails.
        """
        absolute_path, relative_path = self._generate_storage_path(extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)

            logger.info("Photo stored: %s (%d bytes)", relative_path, len(content))
            return str(absolute_path), relative_path

        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded photo. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

    def resolve(self, relative_path: str) -> Path:
        """
        Map a relative storage path to an absolute one inside the storage root.

        Raises ValidationError for paths escaping the root (../../etc/passwd).
        Existence is not checked here.
        """
        full_path = (self.storage_root / relative_path).resolve()
        if not full_path.is_relative_to(self.storage_root):
            raise ValidationError(message="Invalid file path", field="path")
        return full_path

    def path_from_url(self, url: Optional[str]) -> Optional[Path]:
        """Inverse of public_url() for photos this service stored; None for anything else."""
        if not url or not url.startswith(FILES_URL_PREFIX):
            return None
        try:
            return self.resolve(url[len(FILES_URL_PREFIX):])
        except ValidationError:
            return None

    @staticmethod
    def public_url(relative_path: str) -> str:
        return f"{FILES_URL_PREFIX}{relative_path}"

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a file from storage. Best-effort: failures are logged, never raised,
        since the profile already points at the new photo.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """
        Complete validation and storage pipeline.

        Returns: Tuple of (absolute_path, relative_path).
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        return await self.store_file(content, ext)


file_service = FileService()
