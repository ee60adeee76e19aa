"""Illustration client: one square image per memory point."""

import logging

import httpx
from google import genai
from google.genai import errors, types

from .errors import DecodeError, ImageGenerationError, NetworkError
from .images import to_data_uri

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"

ILLUSTRATION_PROMPT = "A vibrant mnemonic aid illustration: {visual_prompt}"


class IllustrationClient:
    """Requests an illustration for a single visual prompt."""

    def __init__(self, client: genai.Client, model: str = DEFAULT_IMAGE_MODEL) -> None:
        self._client = client
        self._model = model

    @property
    def model(self) -> str:
        """Return the model being used."""
        return self._model

    async def illustrate(self, visual_prompt: str) -> str:
        """Generate an image for one memory point.

        Args:
            visual_prompt: Description of the imagined scene.

        Returns:
            The first returned image as a data URI.

        Raises:
            NetworkError: If the service cannot be reached or rejects the call.
            DecodeError: If the response body cannot be read.
            ImageGenerationError: If the response carries no inline image.
        """
        prompt = ILLUSTRATION_PROMPT.format(visual_prompt=visual_prompt)
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=[types.Content(role="user", parts=[types.Part.from_text(text=prompt)])],
                config=types.GenerateContentConfig(
                    image_config=types.ImageConfig(aspect_ratio="1:1"),
                ),
            )
        except errors.UnknownApiResponseError as e:
            raise DecodeError(f"Unreadable response from image service: {e}") from e
        except (errors.APIError, httpx.HTTPError) as e:
            raise NetworkError(f"Illustration request failed: {e}") from e

        candidates = response.candidates or []
        content = candidates[0].content if candidates else None
        for part in (content.parts if content else None) or []:
            if part.inline_data and part.inline_data.data:
                mime_type = part.inline_data.mime_type or "image/png"
                return to_data_uri(part.inline_data.data, mime_type)

        logger.debug("No inline image in response for prompt %r", visual_prompt[:80])
        raise ImageGenerationError("The model did not return an image")
