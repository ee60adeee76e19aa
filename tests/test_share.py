"""Tests for share text rendering."""

from mindpalace.models import MemoryPoint, Method, PalaceResult
from mindpalace.share import SHARE_HEADER, format_share_text


def test_includes_all_contract_fields(mnemonic_result: PalaceResult):
    text = format_share_text(mnemonic_result)

    assert text.startswith(SHARE_HEADER)
    assert mnemonic_result.title in text
    assert "Method: Mnemonic" in text
    assert f"Slogan: {mnemonic_result.slogan}" in text
    for point in mnemonic_result.points:
        assert point.content in text
        assert point.association in text
        assert point.story in text


def test_points_are_numbered_in_order(mnemonic_result: PalaceResult):
    lines = format_share_text(mnemonic_result).splitlines()
    numbered = [line for line in lines if line[:2] in ("1.", "2.")]
    assert numbered[0].startswith("1. The mitochondria")
    assert numbered[1].startswith("2. Ribosomes")


def test_slogan_line_omitted_when_absent():
    result = PalaceResult(
        title="Planets",
        method=Method.PALACE,
        summary="s",
        points=(MemoryPoint("Mercury is first", "Front door", "A door", "It burns."),),
    )
    text = format_share_text(result)
    assert "Slogan" not in text
    assert "1. Mercury is first (anchor: Front door)" in text
    assert "Method: Palace" in text


def test_visual_prompt_not_included(mnemonic_result: PalaceResult):
    text = format_share_text(mnemonic_result)
    assert mnemonic_result.points[0].visual_prompt not in text
