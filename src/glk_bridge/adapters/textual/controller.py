"""Presentation controller that wires the Glk adapter into Textual callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from glk_bridge.adapter import GlkAdapter
from glk_bridge.input import InputCompletion
from glk_bridge.presentation import LineCallback
from glk_bridge.session import GameSession


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the controller to update Textual widgets."""

    write_output: Callable[[str], None]
    clear_output: Callable[[], None] = _noop
    show_error: Callable[[str], None] = _noop
    echo_command: Callable[[str], None] = _noop
    set_input_enabled: Callable[[bool], None] = _noop
    # Optional realtime log callback a host may use to surface debug lines
    log: Callable[[str], None] = _noop


class TextualGlkPresentation:
    """Implements the presentation contract on top of ``TextualUIHooks``.

    Holds the one-shot line callback the adapter registers and, when the user
    submits a line, invokes it and resumes the attached session.
    """

    def __init__(self, hooks: TextualUIHooks) -> None:
        self.hooks = hooks
        self.session: Optional[GameSession] = None
        self._resolver: Optional[LineCallback] = None

    def attach(self, session: GameSession) -> None:
        self.session = session

    @property
    def adapter(self) -> Optional[GlkAdapter]:
        return self.session.adapter if self.session else None

    @property
    def awaiting_input(self) -> bool:
        return self._resolver is not None

    # ----------------------------------------------------- presentation API

    def print(self, text: str) -> None:
        if not text:
            return
        self.hooks.write_output(text)
        self._log_state("print ->", chars=len(text))

    def clear(self) -> None:
        self.hooks.clear_output()
        self._log_state("clear ->")

    def handle_error(self, text: str) -> None:
        self.hooks.show_error(f"Error: {text}")
        self.hooks.set_input_enabled(False)
        self._log_state("error ->", message=text)

    def wait_for_input(self, callback: LineCallback) -> None:
        self._resolver = callback
        self.hooks.set_input_enabled(True)
        self._log_state("wait ->")

    # ------------------------------------------------------------ host side

    def submit_line(self, text: str) -> Optional[InputCompletion]:
        """Handle a submitted line: echo, hand it to the VM, then resume."""

        self.hooks.echo_command(text)
        self.hooks.set_input_enabled(False)
        resolver, self._resolver = self._resolver, None
        if resolver is None:
            self._log_state("submit -> ignored", text=text)
            return None
        completion = resolver(text)
        self._log_state(
            "submit ->",
            text=text,
            length=completion.length if completion is not None else None,
        )
        if self.session is not None and completion is not None:
            self.session.resume(completion)
        return completion

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        adapter = self.adapter
        if adapter is None:
            return {"attached": False}
        return {
            "awaiting": self.awaiting_input,
            "pending": adapter.input.pending,
            "buffered": len(adapter.output),
            "terminated": adapter.terminated,
        }


__all__ = ["TextualGlkPresentation", "TextualUIHooks"]
