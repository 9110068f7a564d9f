from __future__ import annotations

from typing import List

from glk_bridge.adapter import GlkAdapter
from glk_bridge.adapters.textual import TextualGlkPresentation, TextualUIHooks
from glk_bridge.refs import EventResult
from glk_bridge.session import GameSession
from glk_bridge.storage import MemoryStore


class EchoVM:
    def __init__(self, glk: GlkAdapter) -> None:
        self.glk = glk
        self.quit = False
        self.line = [0] * 16
        self.event = EventResult()

    def start(self) -> None:
        self.glk.glk_put_string("Ready.\n>")
        self._ask()

    def resume(self, input_length: int) -> None:
        text = "".join(chr(c) for c in self.line[:input_length])
        if text == "clear":
            self.glk.glk_window_clear(self.glk.main_window)
        elif text == "boom":
            raise ValueError("stack underflow")
        else:
            self.glk.glk_put_string(f"echo {text}\n>")
        self._ask()

    def _ask(self) -> None:
        self.glk.glk_request_line_event(self.glk.main_window, self.line, 0)
        self.glk.glk_select(self.event)


def make_presentation(
    output: List[str],
    *,
    errors: List[str] | None = None,
    echoes: List[str] | None = None,
    enabled: List[bool] | None = None,
    logs: List[str] | None = None,
    clears: List[int] | None = None,
) -> TextualGlkPresentation:
    hooks = TextualUIHooks(
        write_output=output.append,
        clear_output=lambda: (clears if clears is not None else []).append(1),
        show_error=(errors if errors is not None else []).append,
        echo_command=(echoes if echoes is not None else []).append,
        set_input_enabled=(enabled if enabled is not None else []).append,
        log=(logs if logs is not None else []).append,
    )
    return TextualGlkPresentation(hooks)


def start_session(presentation: TextualGlkPresentation) -> GameSession:
    adapter = GlkAdapter(presentation, store=MemoryStore())
    session = GameSession.create(EchoVM, adapter)
    presentation.attach(session)
    session.start()
    return session


def test_submitted_line_reaches_vm_and_output() -> None:
    output: List[str] = []
    echoes: List[str] = []
    presentation = make_presentation(output, echoes=echoes)
    start_session(presentation)

    assert output == ["Ready.\n>"]
    assert presentation.awaiting_input is True

    completion = presentation.submit_line("look")

    assert completion is not None and completion.length == 4
    assert echoes == ["look"]
    assert output == ["Ready.\n>", "echo look\n>"]
    assert presentation.awaiting_input is True


def test_input_is_toggled_around_submission() -> None:
    enabled: List[bool] = []
    presentation = make_presentation([], enabled=enabled)
    start_session(presentation)

    presentation.submit_line("wait")

    assert enabled == [True, False, True]


def test_submit_without_pending_request_is_ignored() -> None:
    output: List[str] = []
    presentation = make_presentation(output)

    assert presentation.submit_line("hello") is None
    assert output == []


def test_clear_is_forwarded_to_widget() -> None:
    clears: List[int] = []
    presentation = make_presentation([], clears=clears)
    start_session(presentation)

    presentation.submit_line("clear")

    assert clears == [1]


def test_vm_error_is_shown_and_input_disabled() -> None:
    errors: List[str] = []
    enabled: List[bool] = []
    presentation = make_presentation([], errors=errors, enabled=enabled)
    session = start_session(presentation)

    presentation.submit_line("boom")

    assert errors == ["Error: stack underflow"]
    assert enabled[-1] is False
    assert session.finished is True


def test_controller_emits_log_lines() -> None:
    logs: List[str] = []
    presentation = make_presentation([], logs=logs)
    start_session(presentation)

    presentation.submit_line("xyzzy")

    assert any(line.startswith("wait ->") for line in logs)
    assert any(line.startswith("submit ->") and "length=5" in line for line in logs)
