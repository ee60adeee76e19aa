"""Session controller: input state, generation and archive navigation."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ..errors import MindPalaceError, RequestConstructionError
from ..images import parse_data_uri
from ..logging import EventLog, get_event_log
from ..models import ArchivedEntry, Method, PalaceResult
from ..prompt import build_request
from ..share import format_share_text

if TYPE_CHECKING:
    from ..archive import LocalArchive
    from ..illustration import IllustrationClient
    from ..reasoning import ReasoningClient

logger = logging.getLogger(__name__)

GENERATION_FAILED_MESSAGE = "Generation failed. Check your network connection and try again."
EMPTY_RESULT_MESSAGE = "No memory points could be extracted. Try adding more material."


class SessionState(Enum):
    """Lifecycle states of a session."""

    IDLE = "idle"
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


@dataclass
class IllustrationSlot:
    """Illustration state for one point of the current result."""

    index: int
    loading: bool = False
    image: str | None = None
    error: str | None = None


class SessionController:
    """Owns the transient state of one user session.

    At most one generation runs at a time. Illustrations run
    independently, one slot per point. Anything that arrives after the
    session moved on (new input, archive selection) is discarded.
    """

    def __init__(
        self,
        reasoning: ReasoningClient,
        illustration: IllustrationClient,
        archive: LocalArchive,
        event_log: EventLog | None = None,
    ) -> None:
        self.reasoning = reasoning
        self.illustration = illustration
        self.archive = archive
        self.event_log = event_log or get_event_log()

        self.text = ""
        self.method = Method.PALACE
        self.image: str | None = None
        self.result: PalaceResult | None = None
        self.error: str | None = None
        self.state = SessionState.IDLE
        self.entries: list[ArchivedEntry] = archive.load()
        self._slots: dict[int, IllustrationSlot] = {}
        self._epoch = 0

    # Input

    def _ensure_editable(self) -> None:
        if self.state is SessionState.GENERATING:
            raise RuntimeError("Input cannot change while a generation is running")

    def set_text(self, text: str) -> None:
        """Replace the input text."""
        self._ensure_editable()
        self.text = text

    def set_method(self, method: Method) -> None:
        """Select the mnemonic technique for the next generation."""
        self._ensure_editable()
        self.method = method

    def attach_image(self, data_uri: str) -> None:
        """Attach an image given as a data URI.

        Raises:
            InvalidImageError: If the data URI cannot be decoded.
        """
        self._ensure_editable()
        parse_data_uri(data_uri)
        self.image = data_uri

    def clear_image(self) -> None:
        """Drop the attached image."""
        self._ensure_editable()
        self.image = None

    @property
    def has_input(self) -> bool:
        """Whether there is text or an image to generate from."""
        return bool(self.text.strip()) or self.image is not None

    @property
    def can_generate(self) -> bool:
        return self.state is not SessionState.GENERATING and self.has_input

    # Generation

    async def generate(self) -> PalaceResult | None:
        """Generate a result from the current input and archive it.

        Returns:
            The new result, or None if generation failed or the session
            moved on before it arrived. On failure ``error`` holds a
            message for the user and the input is kept for a retry.

        Raises:
            RequestConstructionError: If there is neither text nor image.
            RuntimeError: If a generation is already running.
        """
        if self.state is SessionState.GENERATING:
            raise RuntimeError("A generation is already running")
        if not self.has_input:
            raise RequestConstructionError("Enter some text or attach an image first")

        request = build_request(self.text, self.image, self.method)

        self._epoch += 1
        epoch = self._epoch
        self.state = SessionState.GENERATING
        self.error = None
        self.event_log.log("generation_start", method=self.method.value)

        start_time = time.time()
        try:
            result = await self.reasoning.generate(request)
        except MindPalaceError as e:
            if epoch == self._epoch:
                logger.warning("Generation failed: %s", e)
                self._fail(GENERATION_FAILED_MESSAGE)
            self.event_log.log_generation(
                request.method.value,
                success=False,
                duration_ms=(time.time() - start_time) * 1000,
                error=f"{type(e).__name__}: {e}",
            )
            return None
        except Exception:
            if epoch == self._epoch:
                self._fail(GENERATION_FAILED_MESSAGE)
            raise

        duration_ms = (time.time() - start_time) * 1000

        if epoch != self._epoch:
            self.event_log.log("generation_discarded", method=request.method.value)
            return None

        if not result.points:
            self._fail(EMPTY_RESULT_MESSAGE)
            self.event_log.log_generation(
                request.method.value,
                success=False,
                duration_ms=duration_ms,
                error="empty result",
            )
            return None

        entry, self.entries = self.archive.record(result)
        self._show(result)
        self.event_log.log_generation(
            request.method.value,
            success=True,
            duration_ms=duration_ms,
            entry_id=entry.id,
            points=len(result.points),
        )
        return result

    def _fail(self, message: str) -> None:
        self.state = SessionState.FAILED
        self.error = message

    def _show(self, result: PalaceResult) -> None:
        self.result = result
        self.state = SessionState.READY
        self.error = None
        self._slots = {}

    # Navigation

    def new_input(self) -> None:
        """Leave the current result and return to editing.

        The text and method are kept, the attached image is dropped. A
        generation still in flight is discarded when it arrives.
        """
        self._epoch += 1
        self.result = None
        self.image = None
        self.error = None
        self._slots = {}
        self.state = SessionState.IDLE

    def select_entry(self, entry_id: str) -> PalaceResult:
        """Show an archived result without calling the service.

        Raises:
            KeyError: If no archived entry has this id.
        """
        for entry in self.entries:
            if entry.id == entry_id:
                self._epoch += 1
                self._show(entry.data)
                self.event_log.log("archive_select", entry_id=entry_id)
                return entry.data
        raise KeyError(entry_id)

    def refresh_archive(self) -> list[ArchivedEntry]:
        """Reload the archive snapshot from storage."""
        self.entries = self.archive.load()
        return self.entries

    # Illustrations

    @property
    def slots(self) -> dict[int, IllustrationSlot]:
        """Illustration slots of the current result, by point index."""
        return dict(self._slots)

    def slot(self, index: int) -> IllustrationSlot | None:
        return self._slots.get(index)

    async def illustrate(self, index: int) -> IllustrationSlot:
        """Request an illustration for one point of the current result.

        Failures are recorded on the slot and never raised, so one point
        cannot disturb the others or the result.

        Raises:
            RuntimeError: If there is no current result.
            IndexError: If the index is out of range.
        """
        if self.result is None:
            raise RuntimeError("There is no result to illustrate")
        if not 0 <= index < len(self.result.points):
            raise IndexError(f"Point index out of range: {index}")

        point = self.result.points[index]
        slot = self._slots.setdefault(index, IllustrationSlot(index=index))
        if slot.loading:
            return slot

        slot.loading = True
        slot.error = None
        start_time = time.time()
        try:
            slot.image = await self.illustration.illustrate(point.visual_prompt)
        except Exception as e:
            logger.warning("Illustration for point %d failed: %s", index + 1, e)
            slot.error = str(e)
            self.event_log.log_illustration(
                index,
                success=False,
                duration_ms=(time.time() - start_time) * 1000,
                error=f"{type(e).__name__}: {e}",
            )
        else:
            self.event_log.log_illustration(
                index,
                success=True,
                duration_ms=(time.time() - start_time) * 1000,
            )
        finally:
            slot.loading = False

        return slot

    async def illustrate_all(self) -> list[IllustrationSlot]:
        """Request illustrations for every point concurrently."""
        if self.result is None:
            raise RuntimeError("There is no result to illustrate")
        return list(
            await asyncio.gather(
                *(self.illustrate(i) for i in range(len(self.result.points)))
            )
        )

    # Sharing

    def share_text(self) -> str:
        """Plain-text rendering of the current result."""
        if self.result is None:
            raise RuntimeError("There is no result to share")
        return format_share_text(self.result)
