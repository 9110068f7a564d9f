"""Executable Textual app that hosts a VM behind the Glk adapter."""

from __future__ import annotations

import argparse
import importlib
import os
from dataclasses import replace
from typing import Callable, List, Optional, Sequence

try:  # pragma: no cover - imported only when the app is run
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Input, Log
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use glk_bridge.adapters.textual.app"
    ) from exc

from glk_bridge.adapter import GlkAdapter
from glk_bridge.config import AdapterConfig
from glk_bridge.refs import EventResult
from glk_bridge.runtime import telemetry
from glk_bridge.session import GameSession, VirtualMachine
from glk_bridge.storage import open_store

from .controller import TextualGlkPresentation, TextualUIHooks

VMFactory = Callable[[GlkAdapter], VirtualMachine]


class EchoMachine:
    """Stand-in VM for the demo: greets, then echoes lines until ``quit``."""

    def __init__(self, glk: GlkAdapter) -> None:
        self.glk = glk
        self.quit = False
        self._line: List[int] = [0] * 80
        self._event = EventResult()

    def start(self) -> None:
        self.glk.glk_put_jstring("Glk bridge demo. Type 'quit' to leave.\n")
        self._prompt()

    def resume(self, input_length: int) -> None:
        text = "".join(chr(code) for code in self._line[:input_length])
        if text.strip().lower() == "quit":
            self.quit = True
            self.glk.glk_exit()
            return
        self.glk.glk_put_jstring(f"You said: {text}\n")
        self._prompt()

    def _prompt(self) -> None:
        self.glk.glk_put_jstring("\n>")
        self.glk.glk_request_line_event(self.glk.main_window, self._line, 0)
        self.glk.glk_select(self._event)


def load_vm_factory(target: str) -> VMFactory:
    """Resolve ``package.module:callable`` into a VM factory."""

    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise ValueError(f"Expected 'module:callable', got '{target}'")
    module = importlib.import_module(module_name)
    factory = getattr(module, attr)
    if not callable(factory):
        raise TypeError(f"'{target}' is not callable")
    return factory


class GlkTerminalApp(App[None]):
    """Minimal Textual terminal: an output log above a single input line."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#output {
		height: 1fr;
		border: round $accent;
		padding: 0 1;
	}

	#command {
		dock: bottom;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        *,
        vm_factory: VMFactory = EchoMachine,
        config: Optional[AdapterConfig] = None,
    ) -> None:
        super().__init__()
        self._vm_factory = vm_factory
        self._config = config or AdapterConfig.from_env()
        self.presentation: TextualGlkPresentation | None = None
        self.session: GameSession | None = None
        self._output: Log | None = None
        self._input: Input | None = None
        self._logger = telemetry.get_logger("glk_bridge.app")

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="terminal"):
            self._output = Log(id="output")
            yield self._output
            self._input = Input(placeholder=">", id="command", disabled=True)
            yield self._input
        yield Footer()

    def on_mount(self) -> None:
        self.presentation = TextualGlkPresentation(
            TextualUIHooks(
                write_output=self._write_output,
                clear_output=self._clear_output,
                show_error=self._write_line,
                echo_command=lambda text: self._write_line(f"> {text}"),
                set_input_enabled=self._set_input_enabled,
                log=self._logger.debug,
            )
        )
        adapter = GlkAdapter(
            self.presentation,
            store=open_store(self._config.store_path),
            config=self._config,
        )
        self.session = GameSession.create(self._vm_factory, adapter)
        self.presentation.attach(self.session)
        self.session.start()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if self.presentation is None:
            return
        command = event.value
        event.input.value = ""
        self.presentation.submit_line(command)
        if self.session is not None and self.session.vm.quit:
            self._set_input_enabled(False)

    def _write_output(self, text: str) -> None:
        if self._output:
            self._output.write(text)

    def _write_line(self, text: str) -> None:
        if self._output:
            self._output.write(f"\n{text}\n")

    def _clear_output(self) -> None:
        if self._output:
            self._output.clear()

    def _set_input_enabled(self, enabled: bool) -> None:
        if self._input:
            self._input.disabled = not enabled
            if enabled:
                self._input.focus()


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a VM behind the Glk bridge.")
    parser.add_argument(
        "--vm",
        default=os.environ.get("GLK_BRIDGE_VM", ""),
        help="VM factory as 'module:callable' taking the adapter (default: echo demo)",
    )
    parser.add_argument(
        "--store",
        default=None,
        help="JSON file used for save files (default: in-memory)",
    )
    parser.add_argument(
        "--log-preset",
        default=os.environ.get("GLK_BRIDGE_LOG_PRESET", "session"),
        help="Telemetry preset: development, session or quiet (default: session)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    telemetry.configure(preset=args.log_preset)
    config = AdapterConfig.from_env()
    if args.store is not None:
        config = replace(config, store_path=args.store)
    factory: VMFactory = load_vm_factory(args.vm) if args.vm else EchoMachine
    GlkTerminalApp(vm_factory=factory, config=config).run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
