"""Studio session and the generation flow.

``CreativeDirector`` owns the single-user session: the prompt, the chosen
size and model, the staged image, what is currently displayed and the one
generation slot. It moves through Idle -> Submitting -> Success/Failed -> Idle,
drives the countdown while a request is in flight and stores successful
results in the gallery.
"""

import logging
from typing import List, Optional, Union

from agents.copywriter_agent import CopywriterAgent
from agents.creative_agent import CreativeAgent
from library.countdown import Countdown, TickCallback
from library.errors import UnsupportedModel, UnsupportedOperation
from library.models import (
    MODELS,
    GalleryRecord,
    ImageSize,
    ModelDescriptor,
    ModelId,
    StudioState,
    UploadedImage,
)
from library.storage import GalleryStore

logger = logging.getLogger(__name__)

EDIT_FALLBACK_PROMPT = "Edit of uploaded image"


class CreativeDirector:
    def __init__(
        self,
        creative_agent: CreativeAgent,
        copywriter_agent: CopywriterAgent,
        store: GalleryStore,
        clear_prompt_on_success: bool = True,
        countdown_interval: float = 1.0,
    ):
        self.creative_agent = creative_agent
        self.copywriter_agent = copywriter_agent
        self.store = store
        self.clear_prompt_on_success = clear_prompt_on_success
        self.countdown = Countdown(countdown_interval)

        self.prompt: str = ""
        self.size: ImageSize = ImageSize.square_1024
        self.model_id: ModelId = ModelId.gemini_flash_image
        self.uploaded_image: Optional[UploadedImage] = None
        self.image: Optional[str] = None
        self.error: Optional[str] = None
        self.loading: bool = False
        self.refining: bool = False

    @property
    def model(self) -> ModelDescriptor:
        return MODELS[self.model_id]

    # --- Session inputs ---

    def set_prompt(self, prompt: str) -> None:
        self.prompt = prompt

    def select_size(self, size: Union[ImageSize, str]) -> None:
        self.size = ImageSize(size)

    def select_model(self, model_id: Union[ModelId, str]) -> None:
        """Switch backend, dropping a staged image the new model cannot edit."""
        try:
            self.model_id = ModelId(model_id)
        except ValueError:
            raise UnsupportedModel(f"Unsupported model selected: {model_id}", model_name=str(model_id))
        if not self.model.edit and self.uploaded_image is not None:
            logger.info(f"[session] {self.model.name} cannot edit images; clearing staged image")
            self.clear_upload()

    def upload_image(self, image: UploadedImage) -> None:
        if self.loading:
            raise UnsupportedOperation("Cannot change the image while a generation is running.")
        if not self.model.edit:
            raise UnsupportedOperation(
                f"{self.model.name} does not support image editing.", model_name=self.model.name
            )
        self.error = None
        self.uploaded_image = image
        self.image = image.to_data_url()

    def clear_upload(self) -> None:
        self.uploaded_image = None
        self.image = None

    def clear_image(self) -> None:
        self.image = None
        self.error = None

    # --- Generation ---

    def can_generate(self) -> bool:
        has_input = bool(self.prompt.strip()) or self.uploaded_image is not None
        return has_input and not self.loading

    async def generate(self, on_tick: Optional[TickCallback] = None) -> bool:
        """Run one generation with the current session inputs.

        Returns ``False`` without doing anything when there is nothing to send
        or a generation is already running. Failures never raise; they are
        recorded in ``error``.
        """
        if not self.can_generate():
            return False

        prompt = self.prompt
        size = self.size
        model = self.model
        uploaded = self.uploaded_image

        self.loading = True
        self.error = None
        self.image = None
        stop_countdown = self.countdown.start(model.estimated_seconds, on_tick)

        try:
            data = await self.creative_agent.generate(prompt, size, uploaded, model.id)
            record = GalleryRecord.from_bytes(
                data,
                prompt=prompt if prompt.strip() else EDIT_FALLBACK_PROMPT,
                model=model.id,
                size=size,
            )
            self.store.prepend(record)
            self.image = record.to_data_url()
            self.uploaded_image = None
            if self.clear_prompt_on_success:
                self.prompt = ""
            logger.info(f"[generate] Stored {record.id} from {model.name}")
        except Exception as e:
            logger.error(f"[generate] Generation failed: {e}")
            self.error = f"Failed to generate image. {e}"
            if uploaded is not None:
                self.image = uploaded.to_data_url()
        finally:
            self.loading = False
            stop_countdown()
        return True

    # --- Prompt helpers ---

    async def refine_prompt(self, prompt: Optional[str] = None) -> List[str]:
        text = self.prompt if prompt is None else prompt
        if not text.strip() or self.refining or self.loading:
            return []
        self.refining = True
        try:
            return await self.copywriter_agent.refine_prompt(text)
        finally:
            self.refining = False

    async def translate(self, text: str) -> str:
        return await self.copywriter_agent.translate(text)

    # --- Gallery ---

    def gallery(self) -> List[GalleryRecord]:
        return self.store.load()

    def gallery_record(self, record_id: str) -> Optional[GalleryRecord]:
        return self.store.get(record_id)

    def delete_from_gallery(self, record_id: str) -> None:
        self.store.delete(record_id)

    def reset_gallery(self) -> None:
        self.store.clear()

    # --- Lifecycle ---

    def snapshot(self) -> StudioState:
        return StudioState(
            prompt=self.prompt,
            size=self.size,
            model=self.model_id,
            uploaded_image=self.uploaded_image is not None,
            uploaded_mime_type=self.uploaded_image.mime_type if self.uploaded_image else None,
            image=self.image,
            error=self.error,
            loading=self.loading,
            refining=self.refining,
            countdown=self.countdown.remaining,
            clear_prompt_on_success=self.clear_prompt_on_success,
        )

    def close(self) -> None:
        self.countdown.cancel()
