"""Turns the VM's synchronous input requests into one-shot host callbacks.

The VM asks for a line, then calls ``glk_select`` and returns control to the
host. Nothing here blocks: the request registers a callback with the
presentation, and when the host later invokes it the received text is copied
into the VM-owned buffer. Only after the copy is complete is the length
written into the captured event, because the VM treats that length as proof
the buffer is populated. The callback returns a completion message; whoever
invoked it is responsible for resuming the VM.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import MutableSequence, Optional, Union

from glk_bridge.config import PendingPolicy
from glk_bridge.constants import KEYCODE_RETURN, EventType, InputKind
from glk_bridge.errors import InputRequestPendingError
from glk_bridge.output import OutputBuffer
from glk_bridge.presentation import Presentation
from glk_bridge.refs import EventResult
from glk_bridge.runtime import telemetry
from glk_bridge.streams import Window, to_units


@dataclass(eq=False)
class InputRequest:
    kind: InputKind
    window: Optional[Window]
    buffer: Optional[MutableSequence[int]]
    max_length: int
    initial_length: int = 0
    unicode: bool = False
    generation: int = 0
    pending: bool = True


@dataclass(frozen=True)
class LineInputCompleted:
    """A line landed in the VM buffer; ``length`` is what the VM should resume with."""

    window: Optional[Window]
    length: int
    text: str


@dataclass(frozen=True)
class CharInputCompleted:
    window: Optional[Window]
    keycode: int

    @property
    def length(self) -> int:
        return 0


InputCompletion = Union[LineInputCompleted, CharInputCompleted]


def _window_rock(window: Optional[Window]) -> int:
    return window.rock if window is not None else 0


class InputBridge:
    """Holds the single outstanding input request and the captured event."""

    def __init__(
        self,
        presentation: Presentation,
        output: OutputBuffer,
        *,
        main_window: Window,
        policy: PendingPolicy = PendingPolicy.REPLACE,
    ) -> None:
        self._presentation = presentation
        self._output = output
        self._main_window = main_window
        self.policy = policy
        self._request: Optional[InputRequest] = None
        self._event: Optional[EventResult] = None
        self._generation = 0
        self.logger = telemetry.get_logger("glk_bridge.input")

    @property
    def request(self) -> Optional[InputRequest]:
        return self._request

    @property
    def pending(self) -> bool:
        return self._request is not None and self._request.pending

    @property
    def captured_event(self) -> Optional[EventResult]:
        return self._event

    # -------------------------------------------------------------- requests

    def request_line(
        self,
        window: Optional[Window],
        buffer: Optional[MutableSequence[int]],
        initial_length: int = 0,
        *,
        unicode: bool = False,
    ) -> InputRequest:
        """Register a line request and hand a one-shot callback to the host."""

        self._make_room(window)
        self._output.flush(reason="line_request")
        max_length = len(buffer) if buffer is not None else 0
        request = self._start(
            InputKind.LINE,
            window,
            buffer=buffer,
            max_length=max_length,
            initial_length=min(max(0, initial_length or 0), max_length),
            unicode=unicode,
        )
        telemetry.record_event(
            "input.line.request",
            level="debug",
            data={
                "window": _window_rock(window),
                "max_length": max_length,
                "generation": request.generation,
            },
        )
        return request

    def request_char(
        self, window: Optional[Window], *, unicode: bool = False
    ) -> InputRequest:
        """Register a char request; it completes from the next delivered line."""

        self._make_room(window)
        self._output.flush(reason="char_request")
        request = self._start(
            InputKind.CHAR, window, buffer=None, max_length=1, unicode=unicode
        )
        telemetry.record_event(
            "input.char.request",
            level="debug",
            data={"window": _window_rock(window), "generation": request.generation},
        )
        return request

    def _make_room(self, window: Optional[Window]) -> None:
        current = self._request
        if current is None or not current.pending:
            return
        if self.policy == PendingPolicy.REJECT:
            raise InputRequestPendingError(window)
        # Last request wins: the earlier callback turns into a no-op.
        current.pending = False
        if current.window is not None and current.window is not window:
            current.window.clear_pending()
        telemetry.record_event(
            "input.request.abandoned",
            level="warning",
            data={
                "window": _window_rock(current.window),
                "generation": current.generation,
            },
        )

    def _start(
        self,
        kind: InputKind,
        window: Optional[Window],
        *,
        buffer: Optional[MutableSequence[int]],
        max_length: int,
        initial_length: int = 0,
        unicode: bool = False,
    ) -> InputRequest:
        self._generation += 1
        request = InputRequest(
            kind=kind,
            window=window,
            buffer=buffer,
            max_length=max_length,
            initial_length=initial_length,
            unicode=unicode,
            generation=self._generation,
        )
        self._request = request
        if window is not None:
            window.mark_pending(kind, buffer)
        self._presentation.wait_for_input(partial(self._complete, request))
        return request

    # ------------------------------------------------------------ completion

    def _complete(self, request: InputRequest, text: str) -> Optional[InputCompletion]:
        if request is not self._request or not request.pending:
            telemetry.record_event(
                "input.callback.ignored",
                level="debug",
                data={"generation": request.generation},
            )
            return None

        text = text or ""
        if request.kind == InputKind.CHAR:
            return self._complete_char(request, text)

        units = to_units(text, unicode=request.unicode)
        count = min(len(units), request.max_length)
        if request.buffer is not None:
            for index in range(count):
                request.buffer[index] = units[index]
        # The buffer is fully written before the VM can observe the length.
        if self._event is not None:
            self._event.length = count
        self._finish(request)
        telemetry.record_event(
            "input.line.complete",
            level="debug",
            data={"window": _window_rock(request.window), "length": count},
        )
        return LineInputCompleted(window=request.window, length=count, text=text[:count])

    def _complete_char(self, request: InputRequest, text: str) -> CharInputCompleted:
        if not text:
            keycode = KEYCODE_RETURN
        else:
            keycode = ord(text[0])
            if not request.unicode and keycode > 0xFF:
                keycode = ord("?")
        if self._event is not None:
            self._event.length = keycode
        self._finish(request)
        telemetry.record_event(
            "input.char.complete",
            level="debug",
            data={"window": _window_rock(request.window), "keycode": keycode},
        )
        return CharInputCompleted(window=request.window, keycode=keycode)

    def _finish(self, request: InputRequest) -> None:
        request.pending = False
        if request.window is not None and request.window.pending_input == request.kind:
            request.window.clear_pending()

    # ---------------------------------------------------------- cancellation

    def cancel_line(
        self, window: Optional[Window], result: Optional[EventResult] = None
    ) -> None:
        self._cancel(InputKind.LINE, window)
        if result is not None:
            result.clear()

    def cancel_char(self, window: Optional[Window]) -> None:
        self._cancel(InputKind.CHAR, window)

    def _cancel(self, kind: InputKind, window: Optional[Window]) -> None:
        if window is not None and window.pending_input == kind:
            window.clear_pending()
        request = self._request
        if (
            request is not None
            and request.pending
            and request.kind == kind
            and (window is None or request.window is window)
        ):
            request.pending = False

    # ---------------------------------------------------------------- events

    def select(self, event: EventResult) -> EventResult:
        """Capture ``event`` and publish an optimistic input event into it.

        The length stays 0 until the host callback fires; callers must not
        trust it before then.
        """

        self._event = event
        request = self._request if self.pending else None
        kind = EventType.LINE_INPUT
        if request is not None and request.kind == InputKind.CHAR:
            kind = EventType.CHAR_INPUT
        window = request.window if request is not None and request.window else None
        event.kind = kind
        event.window = window or self._main_window
        event.length = 0
        event.terminator = 0
        return event

    def select_poll(self, event: EventResult) -> EventResult:
        event.clear()
        return event


__all__ = [
    "CharInputCompleted",
    "InputBridge",
    "InputCompletion",
    "InputRequest",
    "LineInputCompleted",
]
