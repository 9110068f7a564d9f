"""Exception types raised by the bridge."""

from __future__ import annotations


class GlkError(RuntimeError):
    """Base class for errors the adapter raises back into the VM."""


class InvalidGlkObjectError(GlkError):
    """Raised when the VM hands back a window or stream that is already closed."""

    def __init__(self, message: str, *, obj: object | None = None) -> None:
        super().__init__(message)
        self.obj = obj


class InputRequestPendingError(GlkError):
    """Raised under the ``reject`` policy when an input request is already pending."""

    def __init__(self, window: object | None = None) -> None:
        super().__init__("An input request is already pending")
        self.window = window


__all__ = ["GlkError", "InvalidGlkObjectError", "InputRequestPendingError"]
