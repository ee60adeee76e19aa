"""Prompt builder for the reasoning service."""

from dataclasses import dataclass

from google.genai import types

from .errors import RequestConstructionError
from .images import ImagePayload, parse_data_uri
from .models import Method

SYSTEM_INSTRUCTION = """You are a world-class memory expert. Turn the material you are given into a structure that is extremely easy to remember.

Requirements:
- Extract the core knowledge points, one memory point per fact, in the order they should be recalled
- For every point create a vivid, absurd association, a short anchor label and a connecting story
- Describe each point's imagined scene so it could be drawn as a picture
- In mnemonic mode, also write a rhyming, catchy slogan that covers all the points
- If an image is attached, read the material from the image
- Reply in the language of the material"""

METHOD_INSTRUCTIONS: dict[Method, str] = {
    Method.PALACE: "Use the classic memory palace technique: place each point at a concrete location along a walk through the rooms of a building.",
    Method.MNEMONIC: "Write a rhyming, catchy mnemonic verse or jingle, and return it as the slogan.",
    Method.FAMILY: "Bind each point to a trait or action of a family member.",
    Method.OBJECTS: "Associate each point with a common everyday object, such as a phone or a cup.",
}

DEFAULT_PROMPT = "Analyze the attached material and encode it for memorization."


@dataclass(frozen=True)
class ReasoningRequest:
    """A fully built request for the reasoning service."""

    system_instruction: str
    method_instruction: str
    text: str
    method: Method
    image: ImagePayload | None = None

    def instruction(self) -> str:
        """Return the system instruction including the method fragment."""
        return f"{self.system_instruction}\n\nTechnique: {self.method_instruction}"

    def parts(self) -> list[types.Part]:
        """Return the content parts: text first, then the optional image."""
        parts = [types.Part.from_text(text=self.text)]
        if self.image is not None:
            parts.append(
                types.Part.from_bytes(data=self.image.data, mime_type=self.image.mime_type)
            )
        return parts


def build_request(
    free_text: str,
    image: str | ImagePayload | None,
    method: Method,
) -> ReasoningRequest:
    """Build the reasoning request for a generation.

    Args:
        free_text: Material typed or pasted by the user, may be empty.
        image: Optional image as a data URI or an already decoded payload.
        method: The mnemonic technique to apply.

    Returns:
        The request to hand to the ReasoningClient.

    Raises:
        RequestConstructionError: If both text and image are empty.
        InvalidImageError: If the image data URI cannot be decoded.
    """
    text = (free_text or "").strip()
    if not text and not image:
        raise RequestConstructionError("Enter some text or attach an image first")

    payload = parse_data_uri(image) if isinstance(image, str) else image

    return ReasoningRequest(
        system_instruction=SYSTEM_INSTRUCTION,
        method_instruction=METHOD_INSTRUCTIONS[method],
        text=text or DEFAULT_PROMPT,
        method=method,
        image=payload,
    )
