"""Reasoning client: turns a built request into a PalaceResult.

Wraps the async surface of a ``google.genai.Client`` so the rest of the
package never talks to the SDK directly.
"""

import json
import logging

import httpx
from google import genai
from google.genai import errors, types

from .errors import DecodeError, NetworkError
from .models import PalaceResult
from .prompt import ReasoningRequest

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-3-flash-preview"

_POINT_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "content": types.Schema(type=types.Type.STRING),
        "association": types.Schema(type=types.Type.STRING),
        "visualPrompt": types.Schema(type=types.Type.STRING),
        "story": types.Schema(type=types.Type.STRING),
    },
    required=["content", "association", "visualPrompt", "story"],
)

RESULT_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "title": types.Schema(type=types.Type.STRING),
        "method": types.Schema(type=types.Type.STRING),
        "summary": types.Schema(type=types.Type.STRING),
        "slogan": types.Schema(type=types.Type.STRING),
        "points": types.Schema(type=types.Type.ARRAY, items=_POINT_SCHEMA),
    },
    required=["title", "method", "summary", "points"],
)


class ReasoningClient:
    """Calls the reasoning model with a strict output schema.

    Example:
        from google import genai

        client = genai.Client(api_key="...")
        reasoning = ReasoningClient(client)
        result = await reasoning.generate(build_request(text, None, Method.PALACE))
    """

    def __init__(self, client: genai.Client, model: str = DEFAULT_MODEL) -> None:
        """Initialize the client wrapper.

        Args:
            client: The google-genai client instance to use.
            model: The model to use for structuring.
        """
        self._client = client
        self._model = model

    @property
    def model(self) -> str:
        """Return the model being used."""
        return self._model

    def build_config(self, request: ReasoningRequest) -> types.GenerateContentConfig:
        """Return the generation config for a request."""
        return types.GenerateContentConfig(
            system_instruction=request.instruction(),
            response_mime_type="application/json",
            response_schema=RESULT_SCHEMA,
        )

    async def generate(self, request: ReasoningRequest) -> PalaceResult:
        """Send the request and decode the structured response.

        Returns:
            The decoded result. Its ``points`` may be empty.

        Raises:
            NetworkError: If the service cannot be reached or rejects the call.
            DecodeError: If the body is unreadable, empty or does not match
                the schema.
        """
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=[types.Content(role="user", parts=request.parts())],
                config=self.build_config(request),
            )
        except errors.UnknownApiResponseError as e:
            raise DecodeError(f"Unreadable response from reasoning service: {e}") from e
        except (errors.APIError, httpx.HTTPError) as e:
            raise NetworkError(f"Reasoning request failed: {e}") from e

        return self.parse_response(response.text, request)

    def parse_response(self, text: str | None, request: ReasoningRequest) -> PalaceResult:
        """Decode a raw response body into a PalaceResult.

        Raises:
            DecodeError: If nothing usable can be decoded.
        """
        body = _strip_code_fence(text or "")
        if not body:
            raise DecodeError("Empty response from reasoning service")

        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Response is not valid JSON: {e}") from e

        if not isinstance(data, dict) or not data:
            raise DecodeError("Response is not a JSON object")

        try:
            result = PalaceResult.from_dict(data, fallback_method=request.method)
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"Response does not match the result schema: {e}") from e

        if result.method is not request.method:
            logger.debug(
                "Service returned method %s for a %s request",
                result.method.value,
                request.method.value,
            )
            result = PalaceResult(
                title=result.title,
                method=request.method,
                summary=result.summary,
                points=result.points,
                slogan=result.slogan,
            )

        return result


def _strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    body = text.strip()
    if not body.startswith("```"):
        return body
    lines = body.split("\n")[1:]
    if lines and lines[-1].strip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()
