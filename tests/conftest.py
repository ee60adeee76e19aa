"""Shared fixtures."""

from pathlib import Path

import pytest

from mindpalace.logging import EventLog
from mindpalace.models import MemoryPoint, Method, PalaceResult


@pytest.fixture
def event_log(tmp_path: Path) -> EventLog:
    """Event log writing into a temporary directory."""
    return EventLog(log_dir=tmp_path / "logs")


@pytest.fixture
def mnemonic_result() -> PalaceResult:
    """A mnemonic-style result with a slogan and two points."""
    return PalaceResult(
        title="Cell organelles",
        method=Method.MNEMONIC,
        summary="Two organelles and what they do.",
        slogan="Mighty mitochondria make the cell go",
        points=(
            MemoryPoint(
                content="The mitochondria is the powerhouse of the cell",
                association="Power plant",
                visual_prompt="A tiny power plant humming inside a jelly bean",
                story="The jelly bean lights up every time the plant roars.",
            ),
            MemoryPoint(
                content="Ribosomes build proteins",
                association="Factory line",
                visual_prompt="Robots assembling beads on a conveyor belt",
                story="The robots never stop stringing beads into chains.",
            ),
        ),
    )
