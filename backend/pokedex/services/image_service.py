"""
Pokédex API: Image Upload Service
==================================

What:  Validates an uploaded Pokémon image, spools it to a local temporary
       file and pushes it to the object store.
How:   Extension and size checks first (cheap, no I/O), then an aiofiles
       write to UPLOAD_TMP_DIR, then ObjectStorage.upload_file(). The
       temporary file is removed in a `finally` block whatever the outcome.
Who:   Called by PokemonService before it opens the database transaction,
       so a failed upload means nothing is written.

Object keys:
    pokemon/<uuid-hex>-<sanitized original filename>
    e.g. pokemon/3f2b...9a-bulbasaur.png
"""

import logging
import os
import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles

from pokedex.config import settings
from pokedex.exceptions import StorageError, ValidationError
from pokedex.services.storage_base import ObjectStorage

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

KEY_PREFIX = "pokemon"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class ImageUpload:
    """An image received with a create/update request, fully read into memory."""
    filename: str
    content: bytes


@dataclass
class StoredImage:
    """Where an upload ended up."""
    key: str
    url: str


class ImageService:
    """
    Upload pipeline for Pokémon artwork.

    Lifecycle of an upload:
        1. validate_extension()  → allowed image suffix
        2. validate_size()       → 0 < size <= MAX_IMAGE_SIZE
        3. write temp file       → UPLOAD_TMP_DIR/<uuid><ext>
        4. storage.upload_file() → public URL
        5. cleanup_file()        → temp file removed (always)
    """

    def __init__(self, tmp_dir: Optional[str] = None):
        self.tmp_dir = Path(tmp_dir or settings.upload_tmp_dir).resolve()

    def validate_extension(self, filename: str) -> str:
        """
        Returns the normalized extension (lowercase with dot).

        Raises:
            ValidationError if the extension is not an allowed image type.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, size: int) -> None:
        """Rejects empty files and files above MAX_IMAGE_SIZE."""
        if size == 0:
            raise ValidationError(message="Uploaded image is empty.", field="image")

        if size > settings.max_image_size:
            max_mb = settings.max_image_size / (1024 * 1024)
            raise ValidationError(
                message=f"Image is too large ({size / (1024 * 1024):.1f}MB). Maximum is {max_mb:.0f}MB.",
                field="image",
                context={"size": size, "max_size": settings.max_image_size},
            )

    def build_key(self, filename: str) -> str:
        """Object key derived from the original filename, made unique."""
        name = _UNSAFE_CHARS.sub("-", Path(filename).name).strip("-.") or "image"
        return f"{KEY_PREFIX}/{uuid.uuid4().hex}-{name}"

    async def _write_temp_file(self, content: bytes, extension: str) -> Path:
        path = self.tmp_dir / f"{uuid.uuid4().hex}{extension}"
        try:
            self.tmp_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to spool upload to %s: %s", path, str(e))
            await self.cleanup_file(str(path))
            raise StorageError(
                message="Failed to process the uploaded image. Please try again.",
                context={"path": str(path), "os_error": str(e)},
            ) from e
        return path

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a spooled temp file. Missing files are ignored; other
        failures are logged and swallowed, the upload outcome stands.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.debug("Removed temp file: %s", path.name)
        except OSError as e:
            logger.warning("Failed to remove temp file %s: %s", file_path, str(e))

    async def upload(self, image: ImageUpload, storage: ObjectStorage) -> StoredImage:
        """
        Validate, spool and upload one image.

        Returns:
            StoredImage with the object key and public URL.

        Raises:
            ValidationError: bad extension or size (nothing written anywhere)
            StorageError:    temp write or remote upload failed
        """
        ext = self.validate_extension(image.filename)
        self.validate_size(len(image.content))
        content_type = ALLOWED_EXTENSIONS[ext]
        key = self.build_key(image.filename)

        temp_path = await self._write_temp_file(image.content, ext)
        try:
            url = await storage.upload_file(str(temp_path), key, content_type)
        finally:
            await self.cleanup_file(str(temp_path))

        logger.info("Image %s stored as %s (%d bytes)", image.filename, key, len(image.content))
        return StoredImage(key=key, url=url)

    async def discard(self, stored: StoredImage, storage: ObjectStorage) -> None:
        """
        Best-effort removal of an uploaded object whose database write was
        rolled back. Failures are logged only; the original error is what
        the client sees.
        """
        try:
            await storage.delete_object(stored.key)
        except StorageError as e:
            logger.warning("Orphaned image left in storage: %s (%s)", stored.key, e.message)


# ── Singleton Instance ────────────────────────────────────────────────────
image_service = ImageService()

