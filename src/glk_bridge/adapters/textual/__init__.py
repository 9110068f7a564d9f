"""Textual host for the Glk bridge."""

from .controller import TextualGlkPresentation, TextualUIHooks

__all__ = ["TextualGlkPresentation", "TextualUIHooks"]
