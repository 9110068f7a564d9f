"""Glk I/O bridge between a synchronous VM and an event-driven host."""

__all__ = [
    "adapter",
    "adapters",
    "config",
    "constants",
    "errors",
    "gestalt",
    "input",
    "output",
    "presentation",
    "refs",
    "runtime",
    "session",
    "storage",
    "streams",
]

__version__ = "0.1.0"
