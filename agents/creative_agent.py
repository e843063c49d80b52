# agents/creative_agent.py
import logging
from typing import Any, Dict, Optional, Union

from google.genai import types

from library.config import DEFAULT_IMAGEN_SAFETY_FILTER
from library.errors import (
    EmptyRequest,
    GenerationError,
    NoImageInResponse,
    UnsupportedModel,
    UnsupportedOperation,
)
from library.models import (
    MODELS,
    GenerationRequest,
    ImageSize,
    ModelDescriptor,
    ModelId,
    UploadedImage,
)

logger = logging.getLogger(__name__)

# Content filtering is switched off for every harm category.
SAFETY_SETTINGS = [
    types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_NONE)
    for category in (
        types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    )
]


def _dimension_instruction(size: ImageSize) -> str:
    if size.is_widescreen:
        return (
            "suitable for a YouTube thumbnail. The desired dimension is a 16:9 "
            "aspect ratio image of approximately 1280x720 pixels."
        )
    return f"The desired dimension is a square image of approximately {size.edge_pixels} pixels."


def build_prompt(prompt: str, size: ImageSize, has_image: bool) -> str:
    """Steer the output size through the prompt text.

    Gemini has no resolution parameter, so text-only requests get a size
    instruction. Edits keep the user's prompt as is.
    """
    if has_image:
        return prompt
    return f"Generate a high-quality, detailed image {_dimension_instruction(size)} Prompt: {prompt}"


class ImageModel:
    """One generation backend: request building, the remote call and parsing."""

    descriptor: ModelDescriptor

    def supports_edit(self) -> bool:
        return self.descriptor.edit

    def build(self, request: GenerationRequest) -> Dict[str, Any]:
        raise NotImplementedError

    async def call(self, client, wire: Dict[str, Any]) -> Any:
        raise NotImplementedError

    def parse(self, response: Any) -> bytes:
        raise NotImplementedError


class GeminiFlashImageModel(ImageModel):
    descriptor = MODELS[ModelId.gemini_flash_image]

    def build(self, request: GenerationRequest) -> Dict[str, Any]:
        image = request.uploaded_image
        text = build_prompt(request.prompt, request.size, image is not None)

        parts = []
        if image is not None:
            parts.append(types.Part.from_bytes(data=image.data, mime_type=image.mime_type))
        if text.strip():
            parts.append(types.Part.from_text(text=text))
        if not parts:
            raise EmptyRequest("Cannot generate image without a prompt or an uploaded image.")

        return {
            "model": self.descriptor.id.value,
            "contents": types.Content(role="user", parts=parts),
            "config": types.GenerateContentConfig(
                response_modalities=["IMAGE"],
                safety_settings=SAFETY_SETTINGS,
            ),
        }

    async def call(self, client, wire: Dict[str, Any]) -> Any:
        return await client.aio.models.generate_content(**wire)

    def parse(self, response: Any) -> bytes:
        candidates = getattr(response, "candidates", None) or []
        content = getattr(candidates[0], "content", None) if candidates else None
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                return inline.data
        raise NoImageInResponse(f"No image data found in {self.descriptor.name} response.")


class Imagen4Model(ImageModel):
    """Imagen 4 text-to-image.

    Args:
        safety_filter_level: Value sent as ``safety_filter_level``, or ``None``
            to leave it to the service default.
    """

    descriptor = MODELS[ModelId.imagen_4]

    def __init__(self, safety_filter_level: Optional[str] = DEFAULT_IMAGEN_SAFETY_FILTER):
        self.safety_filter_level = safety_filter_level

    def build(self, request: GenerationRequest) -> Dict[str, Any]:
        if request.uploaded_image is not None:
            raise UnsupportedOperation(
                f"{self.descriptor.name} does not support image editing. Please clear the uploaded image."
            )
        # Imagen only takes an aspect ratio, never pixel dimensions.
        aspect = "16:9" if request.size.is_widescreen else "1:1"
        return {
            "model": self.descriptor.id.value,
            "prompt": request.prompt,
            "config": types.GenerateImagesConfig(
                number_of_images=1,
                output_mime_type="image/png",
                aspect_ratio=aspect,
                safety_filter_level=self.safety_filter_level,
            ),
        }

    async def call(self, client, wire: Dict[str, Any]) -> Any:
        return await client.aio.models.generate_images(**wire)

    def parse(self, response: Any) -> bytes:
        generated = getattr(response, "generated_images", None) or []
        image = getattr(generated[0], "image", None) if generated else None
        img_bytes = getattr(image, "image_bytes", None)
        if img_bytes:
            return img_bytes
        raise NoImageInResponse(f"No image data found in {self.descriptor.name} response.")


IMAGE_MODELS: Dict[ModelId, ImageModel] = {
    model.descriptor.id: model for model in (GeminiFlashImageModel(), Imagen4Model())
}


def resolve_model(
    model_id: Union[ModelId, str], models: Optional[Dict[ModelId, ImageModel]] = None
) -> ImageModel:
    try:
        return (IMAGE_MODELS if models is None else models)[ModelId(model_id)]
    except (ValueError, KeyError):
        raise UnsupportedModel(f"Unsupported model selected: {model_id}", model_name=str(model_id))


class CreativeAgent:
    """Generates images through the Google Gen AI client.

    Args:
        client: A ``google.genai.Client`` (only its ``aio.models`` surface is used).
        imagen_safety_filter_level: Safety filter level sent with Imagen 4
            requests; ``None`` omits it.
    """

    def __init__(self, client, imagen_safety_filter_level: Optional[str] = DEFAULT_IMAGEN_SAFETY_FILTER):
        self.client = client
        self.models: Dict[ModelId, ImageModel] = {
            ModelId.gemini_flash_image: GeminiFlashImageModel(),
            ModelId.imagen_4: Imagen4Model(imagen_safety_filter_level),
        }

    async def generate(
        self,
        prompt: str,
        size: ImageSize,
        uploaded_image: Optional[UploadedImage],
        model_id: Union[ModelId, str],
    ) -> bytes:
        """
        Generates one image and returns its raw bytes.

        Every failure is raised as a GenerationError carrying the model's display
        name, whatever backend or layer it came from.
        """
        model = resolve_model(model_id, self.models)
        name = model.descriptor.name
        try:
            request = GenerationRequest(
                prompt=prompt, size=size, uploaded_image=uploaded_image, model_id=model.descriptor.id
            )
            wire = model.build(request)
            logger.info(f"[generate] Calling {wire['model']} (size={request.size.value}, edit={uploaded_image is not None})")
            response = await model.call(self.client, wire)
            return model.parse(response)
        except GenerationError as e:
            e.model_name = e.model_name or name
            logger.error(f"[generate] Error generating image with {model.descriptor.id.value}: {e.message}")
            raise
        except Exception as e:
            logger.error(f"[generate] Error generating image with {model.descriptor.id.value}: {e}")
            raise GenerationError(str(e), model_name=name) from e
