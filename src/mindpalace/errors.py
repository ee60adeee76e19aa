"""Exceptions raised by the generation workflow."""


class MindPalaceError(Exception):
    """Base class for all generation workflow errors."""

    pass


class RequestConstructionError(MindPalaceError):
    """Raised when a request has neither text nor an image."""

    pass


class NetworkError(MindPalaceError):
    """Raised when a call to the AI service fails at the transport level."""

    pass


class DecodeError(MindPalaceError):
    """Raised when a response body is empty or does not match the result shape."""

    pass


class ImageGenerationError(MindPalaceError):
    """Raised when an image response carries no inline image."""

    pass


class InvalidImageError(MindPalaceError):
    """Raised when an image payload or file cannot be used as input."""

    pass
