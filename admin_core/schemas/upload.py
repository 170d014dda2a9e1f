# File: admin_core/schemas/upload.py

from typing import FrozenSet

from pydantic import BaseModel, ConfigDict, Field

IMAGE_CONTENT_TYPES = frozenset(
    {"image/jpeg", "image/png", "image/webp", "image/svg+xml"}
)


class UploadedFile(BaseModel):
    """An upload as handed over by the transport layer."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


class UploadConstraints(BaseModel):
    """Where an upload goes and what it may contain."""

    model_config = ConfigDict(frozen=True)

    bucket: str
    allowed_content_types: FrozenSet[str] = IMAGE_CONTENT_TYPES
    max_size: int = Field(..., gt=0, description="Maximum size in bytes")
