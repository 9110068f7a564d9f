from __future__ import annotations

from typing import Any, Callable, List

from glk_bridge.adapter import GlkAdapter
from glk_bridge.constants import FileMode, FileUsage, Gestalt
from glk_bridge.presentation import PresentationHooks
from glk_bridge.refs import EventResult
from glk_bridge.session import GameSession
from glk_bridge.storage import MemoryStore


class RecordingHost:
    def __init__(self) -> None:
        self.calls: List[tuple[str, str]] = []
        self.callbacks: List[Callable[[str], Any]] = []

    def hooks(self) -> PresentationHooks:
        return PresentationHooks(
            print_text=lambda text: self.calls.append(("print", text)),
            wait_for_input_hook=self.callbacks.append,
            clear_hook=lambda: self.calls.append(("clear", "")),
            error_hook=lambda text: self.calls.append(("error", text)),
        )

    @property
    def printed(self) -> str:
        return "".join(text for name, text in self.calls if name == "print")


class ScriptedVM:
    """Asks for a line, echoes it, and fails on the word ``crash``."""

    def __init__(self, glk: GlkAdapter) -> None:
        self.glk = glk
        self.quit = False
        self.line = [0] * 10
        self.event = EventResult()
        self.resumed_with: List[int] = []
        self.seen_lengths: List[int] = []

    def start(self) -> None:
        self.glk.glk_put_string("Hello")
        self._ask()

    def resume(self, input_length: int) -> None:
        self.resumed_with.append(input_length)
        self.seen_lengths.append(self.event.length)
        text = "".join(chr(c) for c in self.line[: self.event.length])
        if text == "crash":
            self.glk.glk_put_string("about to fail")
            raise RuntimeError("illegal opcode")
        if text == "quit":
            self.quit = True
            self.glk.glk_exit()
            return
        self.glk.glk_put_string(f"[{text}]")
        self._ask()

    def _ask(self) -> None:
        self.glk.glk_request_line_event(self.glk.main_window, self.line, 0)
        self.glk.glk_select(self.event)


def make_session(host: RecordingHost) -> GameSession:
    glk = GlkAdapter(host.hooks(), store=MemoryStore())
    return GameSession.create(ScriptedVM, glk)


def test_scenario_from_start_to_saved_game() -> None:
    host = RecordingHost()
    session = make_session(host)
    glk = session.adapter

    assert glk.glk_gestalt(Gestalt.UNICODE, 0) == 1

    assert session.start() is True
    assert host.printed == "Hello"

    assert session.submit(host.callbacks[-1], "north") is True
    vm = session.vm
    assert vm.line[:5] == [ord(c) for c in "north"]
    assert vm.seen_lengths == [5]
    assert vm.resumed_with == [5]
    assert host.printed == "Hello[north]"

    fref = glk.glk_fileref_create_by_name(FileUsage.SAVED_GAME, "slot1", 0)
    out = glk.glk_stream_open_file(fref, FileMode.WRITE, 0)
    glk.glk_put_buffer_stream(out, [1, 2, 3])
    glk.glk_stream_close(out)

    assert glk.storage.load("slot1") == [1, 2, 3]
    assert glk.storage.load("slot2") is None


def test_resume_uses_copied_length_not_raw_length() -> None:
    host = RecordingHost()
    session = make_session(host)
    session.start()

    session.submit(host.callbacks[-1], "a very long command")

    assert session.vm.resumed_with == [10]


def test_vm_failure_goes_through_fatal_path_once() -> None:
    host = RecordingHost()
    session = make_session(host)
    session.start()

    assert session.submit(host.callbacks[-1], "crash") is False

    assert host.calls[-2:] == [("print", "about to fail"), ("error", "illegal opcode")]
    assert session.adapter.terminated is True
    assert session.finished is True

    session.adapter.fatal_error("second report")
    assert [name for name, _ in host.calls].count("error") == 1


def test_finished_session_is_not_resumed() -> None:
    host = RecordingHost()
    session = make_session(host)
    session.start()
    session.submit(host.callbacks[-1], "quit")
    assert session.finished is True

    stale = host.callbacks[-1]
    assert session.submit(stale, "look") is False
    assert session.vm.resumed_with == [4]
    assert host.printed.endswith("*** Game session ended ***")


def test_no_op_callback_does_not_resume() -> None:
    host = RecordingHost()
    session = make_session(host)
    session.start()
    callback = host.callbacks[-1]
    session.submit(callback, "wait")

    assert session.resume(callback("again")) is False
    assert session.vm.resumed_with == [4]


def test_sessions_do_not_share_state() -> None:
    first_host, second_host = RecordingHost(), RecordingHost()
    first, second = make_session(first_host), make_session(second_host)
    first.start()
    second.start()

    first.submit(first_host.callbacks[-1], "east")

    assert second.adapter.input.pending is True
    assert second.vm.line == [0] * 10
    assert second_host.printed == "Hello"
