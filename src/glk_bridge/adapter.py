"""The Glk call surface a VM runs against.

``GlkAdapter`` owns every piece of per-session state: the window and stream
registries, the current stream, the shared output buffer and the pending
input request. Two adapters never share anything, so several sessions can run
side by side.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Iterable, MutableSequence, Optional, Type, TypeVar

from .config import AdapterConfig
from .constants import FileMode, FileUsage, InputKind, SeekMode, WindowType
from .errors import InvalidGlkObjectError
from .gestalt import gestalt
from .input import InputBridge, InputRequest
from .output import OutputBuffer
from .presentation import Presentation
from .refs import EventResult, RefBox, StreamResult
from .runtime import telemetry
from .storage import FileRef, HostStore, StorageBridge, open_store
from .streams import ObjectRegistry, Stream, StreamKind, Window, to_units, units_to_text

E = TypeVar("E", bound=IntEnum)


def _coerce(enum_cls: Type[E], value: Any, fallback: E) -> E:
    try:
        return enum_cls(int(value))
    except (TypeError, ValueError):
        return fallback


def _report_counts(result: Any, stream: Stream) -> None:
    if result is None:
        return
    result.set_field(0, stream.read_count)
    result.set_field(1, stream.write_count)


class GlkAdapter:
    """Routes every VM call to the stream model, output buffer, input bridge
    or storage bridge."""

    EventResult = EventResult
    StreamResult = StreamResult
    RefBox = RefBox

    def __init__(
        self,
        presentation: Presentation,
        *,
        store: Optional[HostStore] = None,
        config: Optional[AdapterConfig] = None,
    ) -> None:
        self.config = config or AdapterConfig()
        self.presentation = presentation
        self.logger = telemetry.get_logger("glk_bridge.adapter")
        self.storage = StorageBridge(
            store if store is not None else open_store(self.config.store_path)
        )
        self.output = OutputBuffer(presentation)

        self.windows: ObjectRegistry[Window] = ObjectRegistry()
        self.streams: ObjectRegistry[Stream] = ObjectRegistry()
        self.filerefs: ObjectRegistry[FileRef] = ObjectRegistry()

        self.main_window = self._register_window(
            Window.open(WindowType.TEXT_BUFFER, self.config.main_window_rock)
        )
        self.main_stream = self.main_window.stream
        self.current_stream: Stream = self.main_stream

        self.input = InputBridge(
            presentation,
            self.output,
            main_window=self.main_window,
            policy=self.config.pending_policy,
        )
        self.terminated = False
        self.exited = False

    # ------------------------------------------------------------ lifecycle

    def update(self) -> str:
        """Flush buffered output; the host calls this after each VM step."""

        return self.output.flush(reason="update")

    def fatal_error(self, message: Any) -> None:
        """Report a fatal VM error once, after flushing pending output."""

        if self.terminated:
            return
        text = str(message)
        self.terminated = True
        self.output.flush(reason="fatal")
        telemetry.record_event("session.fatal", level="error", data={"message": text})
        self.presentation.handle_error(text)

    def glk_exit(self) -> None:
        self.output.flush(reason="exit")
        self.exited = True
        self.presentation.print(self.config.exit_banner)
        telemetry.record_event("session.exit")

    def glk_tick(self) -> None:
        return None

    # --------------------------------------------------------------- gestalt

    def glk_gestalt(self, sel: int, val: int = 0) -> int:
        return gestalt(sel, val)

    def glk_gestalt_ext(
        self, sel: int, val: int = 0, arr: Optional[MutableSequence[int]] = None
    ) -> int:
        return gestalt(sel, val, arr)

    # --------------------------------------------------------------- windows

    def _register_window(self, window: Window) -> Window:
        self.windows.add(window)
        self.streams.add(window.stream)
        return window

    def _live_window(self, win: Optional[Window]) -> Window:
        if win is None:
            return self.main_window
        if win.closed:
            raise InvalidGlkObjectError("window is closed", obj=win)
        return win

    def _live_stream(self, stream: Optional[Stream]) -> Stream:
        if stream is None:
            raise InvalidGlkObjectError("no stream given")
        if stream.closed:
            raise InvalidGlkObjectError("stream is closed", obj=stream)
        return stream

    def glk_window_open(
        self,
        split: Optional[Window],
        method: int,
        size: int,
        wintype: int,
        rock: int = 0,
    ) -> Window:
        del method, size  # layout is the presentation's business
        kind = _coerce(WindowType, wintype, WindowType.TEXT_BUFFER)
        parent = split if split is not None else self.main_window
        window = self._register_window(Window.open(kind, rock, parent=parent))
        telemetry.record_event(
            "window.open", level="debug", data={"kind": kind.name, "rock": rock}
        )
        return window

    def glk_window_close(
        self, win: Window, result: Optional[StreamResult] = None
    ) -> None:
        window = self._live_window(win)
        _report_counts(result, window.stream)
        if window is self.main_window:
            return
        if window.pending_input != InputKind.NONE:
            self.input.cancel_line(window)
            self.input.cancel_char(window)
        window.closed = True
        window.stream.closed = True
        self.windows.remove(window)
        self.streams.remove(window.stream)
        if self.current_stream is window.stream:
            self.current_stream = self.main_stream

    def glk_window_get_stream(self, win: Optional[Window]) -> Stream:
        return win.stream if win is not None else self.main_stream

    def glk_window_clear(self, win: Optional[Window]) -> None:
        if win is not None and win.is_text_buffer:
            self.output.flush(reason="clear")
            self.presentation.clear()

    def glk_set_window(self, win: Optional[Window]) -> None:
        if win is not None:
            self.current_stream = self._live_window(win).stream

    def glk_window_get_size(
        self,
        win: Optional[Window],
        widthref: Optional[RefBox] = None,
        heightref: Optional[RefBox] = None,
    ) -> None:
        del win
        if widthref is not None:
            widthref.set_value(self.config.screen_width)
        if heightref is not None:
            heightref.set_value(self.config.screen_height)

    def glk_window_move_cursor(self, win: Optional[Window], x: int, y: int) -> None:
        return None

    def glk_window_get_parent(self, win: Optional[Window]) -> Window:
        if win is not None and win.parent is not None:
            return win.parent
        return self.main_window

    def glk_window_get_root(self) -> Window:
        return self.main_window

    def glk_window_set_arrangement(
        self, win: Optional[Window], method: int, size: int, keywin: Optional[Window]
    ) -> None:
        return None

    def glk_window_iterate(
        self, win: Optional[Window], rockbox: Optional[RefBox] = None
    ) -> Optional[Window]:
        found, rock = self.windows.iterate(win)
        if rockbox is not None:
            rockbox.set_value(rock)
        return found

    def glk_window_get_rock(self, win: Window) -> int:
        return self._live_window(win).rock

    def glk_window_get_type(self, win: Window) -> int:
        return int(self._live_window(win).kind)

    # --------------------------------------------------------------- streams

    def glk_stream_set_current(self, stream: Optional[Stream]) -> None:
        self.current_stream = stream if stream is not None else self.main_stream

    def glk_stream_get_current(self) -> Stream:
        return self.current_stream

    def glk_stream_open_file(
        self, fref: FileRef, fmode: int, rock: int = 0, *, unicode: bool = False
    ) -> Stream:
        mode = _coerce(FileMode, fmode, FileMode.READ)
        stream = Stream(
            rock=rock,
            kind=StreamKind.FILE,
            mode=mode,
            unicode=unicode,
            fileref=fref,
        )
        if mode.loads:
            stream.data = self.storage.load(fref.filename) or []
        if mode == FileMode.WRITE_APPEND:
            stream.position = len(stream.data)
        self.streams.add(stream)
        telemetry.record_event(
            "stream.open_file",
            level="debug",
            data={"name": fref.filename, "mode": mode.name, "units": len(stream.data)},
        )
        return stream

    def glk_stream_open_file_uni(
        self, fref: FileRef, fmode: int, rock: int = 0
    ) -> Stream:
        return self.glk_stream_open_file(fref, fmode, rock, unicode=True)

    def glk_stream_open_memory(
        self,
        buf: Optional[MutableSequence[int]],
        buflen: Optional[int],
        fmode: int,
        rock: int = 0,
        *,
        unicode: bool = False,
    ) -> Stream:
        mode = _coerce(FileMode, fmode, FileMode.READ_WRITE)
        stream = Stream.for_memory(buf, buflen, mode, rock=rock, unicode=unicode)
        self.streams.add(stream)
        return stream

    def glk_stream_open_memory_uni(
        self,
        buf: Optional[MutableSequence[int]],
        buflen: Optional[int],
        fmode: int,
        rock: int = 0,
    ) -> Stream:
        return self.glk_stream_open_memory(buf, buflen, fmode, rock, unicode=True)

    def glk_stream_close(
        self, stream: Stream, result: Optional[StreamResult] = None
    ) -> None:
        """Close ``stream``, persisting file streams opened with write intent."""

        target = self._live_stream(stream)
        _report_counts(result, target)
        if target.kind == StreamKind.WINDOW:
            return
        if target.fileref is not None and target.mode.writes:
            self.storage.save(target.fileref.filename, target.data)
        target.closed = True
        self.streams.remove(target)
        if self.current_stream is target:
            self.current_stream = self.main_stream

    def glk_stream_iterate(
        self, stream: Optional[Stream], rockbox: Optional[RefBox] = None
    ) -> Optional[Stream]:
        found, rock = self.streams.iterate(stream)
        if rockbox is not None:
            rockbox.set_value(rock)
        return found

    def glk_stream_get_rock(self, stream: Stream) -> int:
        return self._live_stream(stream).rock

    def glk_stream_set_position(
        self, stream: Stream, pos: int, seekmode: int = SeekMode.START
    ) -> None:
        mode = _coerce(SeekMode, seekmode, SeekMode.START)
        self._live_stream(stream).seek(int(pos), mode)

    def glk_stream_get_position(self, stream: Stream) -> int:
        return self._live_stream(stream).position

    # ---------------------------------------------------------------- output

    def _put(self, stream: Stream, units: list[int]) -> None:
        target = self._live_stream(stream)
        if target is self.main_stream or target is self.current_stream:
            self.output.append(units_to_text(units))
            target.count_external_write(len(units))
            return
        if not target.unicode:
            units = [unit if unit <= 0xFF else ord("?") for unit in units]
        target.write_units(units)

    def glk_put_char(self, ch: int) -> None:
        self._put(self.current_stream, [int(ch) & 0xFF])

    def glk_put_char_stream(self, stream: Stream, ch: int) -> None:
        self._put(stream, [int(ch) & 0xFF])

    def glk_put_string(self, text: str) -> None:
        self._put(self.current_stream, to_units(text or "", unicode=False))

    def glk_put_string_stream(self, stream: Stream, text: str) -> None:
        self._put(stream, to_units(text or "", unicode=False))

    def glk_put_buffer(self, buf: Iterable[int]) -> None:
        self._put(self.current_stream, [int(value) & 0xFF for value in buf])

    def glk_put_buffer_stream(self, stream: Stream, buf: Iterable[int]) -> None:
        self._put(stream, [int(value) & 0xFF for value in buf])

    def glk_put_char_uni(self, ch: int) -> None:
        self._put(self.current_stream, [int(ch)])

    def glk_put_char_stream_uni(self, stream: Stream, ch: int) -> None:
        self._put(stream, [int(ch)])

    def glk_put_string_uni(self, text: str) -> None:
        self._put(self.current_stream, to_units(text or "", unicode=True))

    def glk_put_string_stream_uni(self, stream: Stream, text: str) -> None:
        self._put(stream, to_units(text or "", unicode=True))

    def glk_put_buffer_uni(self, buf: Iterable[int]) -> None:
        self._put(self.current_stream, [int(value) for value in buf])

    def glk_put_buffer_stream_uni(self, stream: Stream, buf: Iterable[int]) -> None:
        self._put(stream, [int(value) for value in buf])

    def glk_put_jstring(self, text: Optional[str]) -> None:
        """Raw host-string output (no byte masking)."""

        if text:
            self._put(self.current_stream, to_units(text, unicode=True))

    def glk_put_jstring_stream(self, stream: Stream, text: Optional[str]) -> None:
        if text:
            self._put(stream, to_units(text, unicode=True))

    # ----------------------------------------------------------------- reads

    def glk_get_char_stream(self, stream: Stream) -> int:
        return self._live_stream(stream).read_unit()

    def glk_get_char_stream_uni(self, stream: Stream) -> int:
        return self.glk_get_char_stream(stream)

    def glk_get_buffer_stream(
        self, stream: Stream, buf: MutableSequence[int], length: Optional[int] = None
    ) -> int:
        return self._live_stream(stream).read_into(buf, length)

    def glk_get_buffer_stream_uni(
        self, stream: Stream, buf: MutableSequence[int], length: Optional[int] = None
    ) -> int:
        return self.glk_get_buffer_stream(stream, buf, length)

    def glk_get_line_stream(
        self, stream: Stream, buf: MutableSequence[int], length: Optional[int] = None
    ) -> int:
        return self._live_stream(stream).read_line_into(buf, length)

    def glk_get_line_stream_uni(
        self, stream: Stream, buf: MutableSequence[int], length: Optional[int] = None
    ) -> int:
        return self.glk_get_line_stream(stream, buf, length)

    # ----------------------------------------------------------------- style

    def glk_set_style(self, style: int) -> None:
        return None

    def glk_set_style_stream(self, stream: Stream, style: int) -> None:
        return None

    def glk_stylehint_set(self, wintype: int, style: int, hint: int, value: int) -> None:
        return None

    def glk_stylehint_clear(self, wintype: int, style: int, hint: int) -> None:
        return None

    def garglk_set_reversevideo(self, value: int) -> None:
        return None

    def garglk_set_reversevideo_stream(self, stream: Stream, value: int) -> None:
        return None

    # ----------------------------------------------------------------- input

    def glk_request_line_event(
        self,
        win: Optional[Window],
        buf: Optional[MutableSequence[int]],
        initlen: int = 0,
    ) -> InputRequest:
        return self.input.request_line(win, buf, initlen)

    def glk_request_line_event_uni(
        self,
        win: Optional[Window],
        buf: Optional[MutableSequence[int]],
        initlen: int = 0,
    ) -> InputRequest:
        return self.input.request_line(win, buf, initlen, unicode=True)

    def glk_request_char_event(self, win: Optional[Window]) -> InputRequest:
        return self.input.request_char(win)

    def glk_request_char_event_uni(self, win: Optional[Window]) -> InputRequest:
        return self.input.request_char(win, unicode=True)

    def glk_cancel_line_event(
        self, win: Optional[Window], event: Optional[EventResult] = None
    ) -> None:
        self.input.cancel_line(win, event)

    def glk_cancel_char_event(self, win: Optional[Window]) -> None:
        self.input.cancel_char(win)

    def glk_select(self, event: EventResult) -> EventResult:
        return self.input.select(event)

    def glk_select_poll(self, event: EventResult) -> EventResult:
        return self.input.select_poll(event)

    # -------------------------------------------------------------- filerefs

    def _register_fileref(self, fref: FileRef) -> FileRef:
        self.filerefs.add(fref)
        return fref

    def glk_fileref_create_by_prompt(
        self, usage: int, fmode: int, rock: int = 0
    ) -> FileRef:
        return self._register_fileref(
            FileRef(
                filename=self.config.save_name,
                usage=usage,
                mode=_coerce(FileMode, fmode, FileMode.READ),
                rock=rock,
            )
        )

    def glk_fileref_create_by_name(self, usage: int, name: str, rock: int = 0) -> FileRef:
        return self._register_fileref(FileRef(filename=str(name), usage=usage, rock=rock))

    def glk_fileref_create_temp(self, usage: int = FileUsage.DATA, rock: int = 0) -> FileRef:
        return self._register_fileref(FileRef.temporary_ref(usage, rock))

    def glk_fileref_destroy(self, fref: FileRef) -> None:
        if fref.temporary:
            self.storage.delete(fref.filename)
        fref.destroyed = True
        self.filerefs.remove(fref)

    def glk_fileref_does_file_exist(self, fref: FileRef) -> int:
        return 1 if self.storage.exists(fref.filename) else 0

    def glk_fileref_delete_file(self, fref: FileRef) -> None:
        self.storage.delete(fref.filename)

    def glk_fileref_get_rock(self, fref: FileRef) -> int:
        return fref.rock

    def glk_fileref_iterate(
        self, fref: Optional[FileRef], rockbox: Optional[RefBox] = None
    ) -> Optional[FileRef]:
        found, rock = self.filerefs.iterate(fref)
        if rockbox is not None:
            rockbox.set_value(rock)
        return found


__all__ = ["GlkAdapter"]
