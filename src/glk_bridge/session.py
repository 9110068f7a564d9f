"""VM-owning glue: starts the VM and re-enters it once input has landed."""

from __future__ import annotations

from typing import Callable, Optional, Protocol

from .adapter import GlkAdapter
from .input import InputCompletion
from .presentation import LineCallback
from .runtime import telemetry


class VirtualMachine(Protocol):
    """The parts of an interpreter the session drives."""

    quit: bool

    def start(self) -> None:
        ...

    def resume(self, input_length: int) -> None:
        ...


class GameSession:
    """Runs each VM entry inside a guard that routes failures to the fatal path.

    The adapter never calls ``resume`` itself. The host invokes the input
    callback, receives a completion message and passes it to ``resume``.
    """

    def __init__(self, vm: VirtualMachine, adapter: GlkAdapter) -> None:
        self.vm = vm
        self.adapter = adapter
        self.steps = 0

    @classmethod
    def create(
        cls,
        vm_factory: Callable[[GlkAdapter], VirtualMachine],
        adapter: GlkAdapter,
    ) -> "GameSession":
        return cls(vm_factory(adapter), adapter)

    @property
    def finished(self) -> bool:
        return (
            self.adapter.terminated
            or self.adapter.exited
            or bool(getattr(self.vm, "quit", False))
        )

    def start(self) -> bool:
        return self._enter("start", self.vm.start)

    def resume(self, completion: Optional[InputCompletion]) -> bool:
        """Re-enter the VM for a completed input; ``None`` means nothing landed."""

        if completion is None or self.finished:
            return False
        length = completion.length
        return self._enter("resume", lambda: self.vm.resume(length))

    def submit(self, callback: LineCallback, text: str) -> bool:
        """Deliver ``text`` through a pending input callback, then resume."""

        return self.resume(callback(text))

    def _enter(self, label: str, step: Callable[[], None]) -> bool:
        with telemetry.span(
            f"session::{label}", component="session", metadata={"step": self.steps}
        ) as handle:
            self.steps += 1
            try:
                step()
            except Exception as exc:  # any VM failure ends the session
                handle.add_metadata("error", type(exc).__name__)
                self.adapter.fatal_error(str(exc) or type(exc).__name__)
                return False
        self.adapter.update()
        return True


__all__ = ["GameSession", "VirtualMachine"]
