from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from rich.console import Console
from rich.text import Text
from rich.traceback import Traceback


class Logger(Protocol):
    """Logging capability handed to every component."""

    def info(self, msg: str, data: Any = None) -> None: ...

    def success(self, msg: str, data: Any = None) -> None: ...

    def warn(self, msg: str, data: Any = None) -> None: ...

    def error(self, msg: str, err: BaseException | str | None = None) -> None: ...

    def debug(self, msg: str, data: Any = None) -> None: ...


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S.%f")[:-3]


class ConsoleLogger:
    """Timestamped, coloured log lines on a rich console."""

    def __init__(self, console: Console | None = None, debug: bool = False) -> None:
        self.console = console or Console()
        self.debug_enabled = debug

    def _line(self, style: str, icon: str, msg: str, data: Any) -> None:
        self.console.print(Text(f"[{_timestamp()}] {icon} {msg}", style=style))
        if data is not None:
            self.console.print(data)

    def info(self, msg: str, data: Any = None) -> None:
        self._line("blue", "ℹ️ ", msg, data)

    def success(self, msg: str, data: Any = None) -> None:
        self._line("green", "✅", msg, data)

    def warn(self, msg: str, data: Any = None) -> None:
        self._line("yellow", "⚠️ ", msg, data)

    def error(self, msg: str, err: BaseException | str | None = None) -> None:
        self._line("red", "❌", msg, None)
        if err is None:
            return
        self.console.print(Text(str(err), style="red"))
        if self.debug_enabled and isinstance(err, BaseException) and err.__traceback__ is not None:
            self.console.print(Traceback.from_exception(type(err), err, err.__traceback__))

    def debug(self, msg: str, data: Any = None) -> None:
        if self.debug_enabled:
            self._line("bright_black", "🔍", msg, data)


__all__ = ["Logger", "ConsoleLogger"]
