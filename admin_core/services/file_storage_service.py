# File: admin_core/services/file_storage_service.py

import asyncio
import io
import logging
import mimetypes
import os
import uuid
from pathlib import Path
from typing import List, Optional, Sequence

from PIL import Image, UnidentifiedImageError

from admin_core.core.exceptions import StorageException, ValidationException
from admin_core.schemas.upload import UploadConstraints, UploadedFile

logger = logging.getLogger(__name__)

# SVG is XML; Pillow cannot open it
RASTER_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp"}


class FileStorageService:
    """
    Local filesystem storage for uploaded images.

    Files are written below ``base_path`` and referred to by their path
    relative to it. Writes run in a worker thread so the event loop is never
    blocked on disk I/O.
    """

    def __init__(self, base_path: str):
        """
        Initialize file storage service.

        Args:
            base_path: Base directory for file storage
        """
        self.base_path = Path(base_path)
        os.makedirs(self.base_path, exist_ok=True)

    def validate(self, blob: UploadedFile, constraints: UploadConstraints) -> None:
        """
        Check an upload against its constraints.

        Raises:
            ValidationException: If the type, size or image content is not acceptable
        """
        if blob.content_type not in constraints.allowed_content_types:
            raise ValidationException(
                f"File type {blob.content_type} is not allowed; expected one of "
                f"{', '.join(sorted(constraints.allowed_content_types))}",
                field="content_type",
                value=blob.content_type,
            )
        if blob.size == 0:
            raise ValidationException("Uploaded file is empty", field="size", value=0)
        if blob.size > constraints.max_size:
            raise ValidationException(
                f"File size {blob.size} exceeds the limit of {constraints.max_size} bytes",
                field="size",
                value=blob.size,
            )
        if blob.content_type in RASTER_CONTENT_TYPES:
            try:
                with Image.open(io.BytesIO(blob.content)) as image:
                    image.verify()
            except (UnidentifiedImageError, OSError, SyntaxError) as e:
                raise ValidationException(
                    f"File {blob.filename} is not a valid image", field="content", value=blob.filename
                ) from e

    async def upload(
        self,
        blob: UploadedFile,
        constraints: UploadConstraints,
        folder: Optional[str] = None,
    ) -> str:
        """
        Validate and store an upload.

        Args:
            blob: Uploaded file
            constraints: Bucket, allowed types and size limit
            folder: Optional sub-folder inside the bucket

        Returns:
            Stored path, relative to the storage root

        Raises:
            ValidationException: If the upload breaks its constraints
            StorageException: If the file cannot be written
        """
        self.validate(blob, constraints)

        relative = Path(constraints.bucket)
        if folder:
            relative = relative / folder
        relative = relative / f"{uuid.uuid4()}{self._extension(blob)}"

        try:
            await asyncio.to_thread(self._write, self.base_path / relative, blob.content)
        except OSError as e:
            logger.error(f"Failed to store file {blob.filename}: {e}", exc_info=True)
            raise StorageException(f"Failed to store file: {e}") from e

        logger.debug(f"Stored {blob.filename} at {relative}")
        return relative.as_posix()

    async def upload_for_languages(
        self,
        blob: UploadedFile,
        constraints: UploadConstraints,
        unique_code: int,
        language_codes: Sequence[str],
    ) -> List[str]:
        """
        Store one copy of an upload per language.

        Copies go to ``<bucket>/<unique_code>/<language_code>/``. If any copy
        fails, the copies already written are removed before re-raising.

        Returns:
            Stored paths in the order of ``language_codes``
        """
        paths: List[str] = []
        try:
            for code in language_codes:
                paths.append(await self.upload(blob, constraints, folder=f"{unique_code}/{code}"))
        except (ValidationException, StorageException):
            await self.delete_many(paths)
            raise
        return paths

    async def delete(self, path: Optional[str]) -> bool:
        """
        Best-effort delete of a stored file.

        Returns:
            True if a file was removed; failures are logged, never raised
        """
        if not path:
            return False

        target = (self.base_path / path).resolve()
        if self.base_path.resolve() not in target.parents:
            logger.warning(f"Refusing to delete path outside storage root: {path}")
            return False

        try:
            await asyncio.to_thread(target.unlink)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Failed to delete file {path}: {e}")
            return False

    async def delete_many(self, paths: Sequence[Optional[str]]) -> int:
        removed = 0
        for path in paths:
            if await self.delete(path):
                removed += 1
        return removed

    def exists(self, path: str) -> bool:
        return (self.base_path / path).is_file()

    @staticmethod
    def _write(target: Path, content: bytes) -> None:
        os.makedirs(target.parent, exist_ok=True)
        with open(target, "wb") as f:
            f.write(content)

    @staticmethod
    def _extension(blob: UploadedFile) -> str:
        extension = Path(blob.filename).suffix.lower()
        if extension:
            return extension
        return mimetypes.guess_extension(blob.content_type) or ".bin"
