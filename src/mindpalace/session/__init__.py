"""Session management."""

from .controller import IllustrationSlot, SessionController, SessionState

__all__ = ["IllustrationSlot", "SessionController", "SessionState"]
