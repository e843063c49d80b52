"""Pydantic models and data schemas for the studio.

These types are shared by the agents, the gallery store and the FastAPI
endpoints. ``GalleryRecord`` is the only persisted type; everything else
lives for the duration of a request or of the running session.
"""

from __future__ import annotations

import base64
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ImageSize(str, Enum):
    """Output sizes offered to the user."""

    square_256 = "256x256"
    square_512 = "512x512"
    square_1024 = "1024x1024"
    widescreen = "YouTube (16:9)"

    @property
    def is_widescreen(self) -> bool:
        return self is ImageSize.widescreen

    @property
    def edge_pixels(self) -> Optional[int]:
        """Side length for square sizes, ``None`` for widescreen."""
        if self.is_widescreen:
            return None
        return int(self.value.split("x")[0])


class ModelId(str, Enum):
    """Closed set of image generation backends."""

    gemini_flash_image = "gemini-2.5-flash-image"
    imagen_4 = "imagen-4.0-generate-001"


class ModelDescriptor(BaseModel):
    """Static description of a generation backend.

    Attributes:
        id: Model identifier sent to the API.
        name: Display name shown to users and used in error messages.
        edit: Whether the model accepts an image alongside the prompt.
        estimated_seconds: Rough generation time, used to seed the countdown.
    """

    id: ModelId
    name: str
    edit: bool
    estimated_seconds: int


MODELS: Dict[ModelId, ModelDescriptor] = {
    ModelId.gemini_flash_image: ModelDescriptor(
        id=ModelId.gemini_flash_image, name="Gemini Flash", edit=True, estimated_seconds=15
    ),
    ModelId.imagen_4: ModelDescriptor(
        id=ModelId.imagen_4, name="Imagen 4", edit=False, estimated_seconds=30
    ),
}


class UploadedImage(BaseModel):
    """Image staged by the user for edit mode."""

    data: bytes
    mime_type: str

    def to_data_url(self) -> str:
        b64 = base64.b64encode(self.data).decode("utf-8")
        return f"data:{self.mime_type};base64,{b64}"


class GenerationRequest(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    prompt: str = ""
    size: ImageSize = ImageSize.square_1024
    uploaded_image: Optional[UploadedImage] = None
    model_id: ModelId = ModelId.gemini_flash_image


class GenerateMessage(BaseModel):
    """Optional session updates sent over the generation websocket."""

    prompt: Optional[str] = None
    size: Optional[ImageSize] = None
    model: Optional[str] = None


def _new_record_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GalleryRecord(BaseModel):
    """A generated image kept in the local gallery.

    Attributes:
        id: Unique identifier assigned at creation.
        image: Base64-encoded image bytes.
        mime_type: Media type of ``image``.
        prompt: Prompt that produced the image (or the edit fallback label).
        model: Backend that generated the image.
        size: Size the user requested.
        created_at: Creation time (UTC).
    """

    id: str = Field(default_factory=_new_record_id)
    image: str
    mime_type: str = "image/png"
    prompt: str
    model: ModelId
    size: ImageSize
    created_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_bytes(cls, data: bytes, **fields) -> "GalleryRecord":
        return cls(image=base64.b64encode(data).decode("utf-8"), **fields)

    def image_bytes(self) -> bytes:
        return base64.b64decode(self.image)

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.image}"

    @property
    def download_name(self) -> str:
        return f"pika-{self.id[:8]}.png"


class StudioState(BaseModel):
    """Snapshot of the studio session returned to clients."""

    prompt: str
    size: ImageSize
    model: ModelId
    uploaded_image: bool
    uploaded_mime_type: Optional[str] = None
    image: Optional[str] = None
    error: Optional[str] = None
    loading: bool = False
    refining: bool = False
    countdown: Optional[int] = None
    clear_prompt_on_success: bool = True
