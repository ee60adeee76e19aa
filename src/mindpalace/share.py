"""Plain-text rendering of a result for sharing."""

from .models import PalaceResult

SHARE_HEADER = "[MindPalace memory plan]"


def format_share_text(result: PalaceResult) -> str:
    """Render a result as plain text for the clipboard or a file.

    The text holds the title, the method, the slogan when there is one,
    and every point with its association and story, in recall order.
    """
    lines = [
        SHARE_HEADER,
        f"Topic: {result.title}",
        f"Method: {result.method.label}",
    ]
    if result.slogan:
        lines.append(f"Slogan: {result.slogan}")

    for i, point in enumerate(result.points, start=1):
        lines.append(f"{i}. {point.content} (anchor: {point.association})")
        lines.append(f"   {point.story}")

    return "\n".join(lines)
