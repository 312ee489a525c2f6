"""Local disk storage for uploaded images, served under /uploads."""
from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path
from typing import BinaryIO, Protocol

from rentals.config import Settings, get_settings
from rentals.errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}

KIND_PROPERTY = "property"
KIND_PROFILE = "profile"


class Upload(Protocol):
    """What the storage needs from an upload (FastAPI's UploadFile fits)."""

    filename: str | None
    file: BinaryIO


def check_image_filename(filename: str | None) -> str:
    """Returns the lowercased extension; raises ValidationError for non-image names."""
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError("Only image files are allowed", filename=filename or "")
    return ext


class ImageStorage:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def _subdir(self, kind: str) -> str:
        if kind == KIND_PROFILE:
            return self.settings.profile_images_path
        return self.settings.property_images_path

    def _limit(self, kind: str) -> int:
        if kind == KIND_PROFILE:
            return self.settings.max_profile_image_bytes
        return self.settings.max_property_image_bytes

    def store(self, upload: Upload, kind: str = KIND_PROPERTY) -> str:
        """Write the upload to disk under a unique name and return its public URL."""
        ext = check_image_filename(upload.filename)
        content = upload.file.read()
        if not content:
            raise ValidationError("File is empty", filename=upload.filename or "")
        if len(content) > self._limit(kind):
            raise ValidationError("File too large", filename=upload.filename or "")

        subdir = self._subdir(kind)
        target_dir = Path(self.settings.upload_dir) / subdir
        target_dir.mkdir(parents=True, exist_ok=True)
        name = f"{kind}-{uuid.uuid4().hex}{ext}"
        (target_dir / name).write_bytes(content)
        return f"{self.settings.base_url.rstrip('/')}/uploads/{subdir}/{name}"

    def discard(self, url: str) -> None:
        """Remove a file written by store(); used when the surrounding transaction rolled back."""
        prefix = f"{self.settings.base_url.rstrip('/')}/uploads/"
        if not url.startswith(prefix):
            return
        path = Path(self.settings.upload_dir) / url[len(prefix):]
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove stored file %s: %s", path, e)


def get_storage() -> ImageStorage:
    return ImageStorage()
