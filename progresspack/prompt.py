"""
Terminal prompt host for progresspack.
Owns the rich console, theme, symbols, cursor/redraw control codes and lifecycle events.
Indicators compose with a host instead of inheriting from it.
"""
import math
import threading
from typing import Any, Callable, Dict, List, Optional

from rich.console import Console
from rich.control import Control
from rich.segment import ControlType
from rich.text import Text

from progresspack.utils.rich_prompt import PROGRESS_THEME

SYMBOLS = {
    "question": "?",
    "check": "✔",
    "cross": "✖",
    "pointer": "›",
    "middot": "·",
}


class TerminalPrompt:
    """
    Minimal interactive-prompt capability: render primitives, close/cancel and event emission.
    """

    def __init__(self, console: Optional[Console] = None, header: str = "", footer: str = ""):
        self.console = console or Console(theme=PROGRESS_THEME)
        self.symbols = dict(SYMBOLS)
        self._header = header
        self._footer = footer
        self._listeners: Dict[str, List[Callable[..., Any]]] = {}
        self._lock = threading.Lock()
        self.closed = False
        self.cursor_hidden = False

    # --- events ---

    def on(self, event: str, listener: Callable[..., Any]) -> None:
        with self._lock:
            self._listeners.setdefault(event, []).append(listener)

    def once(self, event: str, listener: Callable[..., Any]) -> None:
        def wrapper(*args, **kwargs):
            self.off(event, wrapper)
            return listener(*args, **kwargs)
        self.on(event, wrapper)

    def off(self, event: str, listener: Callable[..., Any]) -> None:
        with self._lock:
            listeners = self._listeners.get(event, [])
            if listener in listeners:
                listeners.remove(listener)

    def emit(self, event: str, *args) -> None:
        with self._lock:
            listeners = list(self._listeners.get(event, []))
        for listener in listeners:
            listener(*args)

    # --- decorations ---

    def prefix(self) -> str:
        return f"[primary]{self.symbols['question']}[/primary]"

    def separator(self, submitted: bool = False) -> str:
        symbol = self.symbols['middot'] if submitted else self.symbols['pointer']
        return f"[muted]{symbol}[/muted]"

    def header(self) -> str:
        return self._header

    def footer(self) -> str:
        return self._footer

    # --- terminal control ---

    def hide_cursor(self) -> None:
        self.console.control(Control.show_cursor(False))
        self.cursor_hidden = True

    def show_cursor(self) -> None:
        self.console.control(Control.show_cursor(True))
        self.cursor_hidden = False

    def clear(self, lines: int) -> None:
        """Erase the last `lines` lines written and leave the cursor at the start of the first one."""
        if lines <= 0:
            return
        self.console.control(
            Control(
                ControlType.CARRIAGE_RETURN,
                (ControlType.ERASE_IN_LINE, 2),
                *(((ControlType.CURSOR_UP, 1), (ControlType.ERASE_IN_LINE, 2)) * (lines - 1)),
            )
        )

    def rows(self, text: str) -> int:
        """Terminal rows taken by `text` once long lines wrap at the console width."""
        width = max(self.console.width, 1)
        return sum(max(1, math.ceil(Text.from_markup(line).cell_len / width)) for line in text.split("\n"))

    def write(self, text: str) -> None:
        self.console.print(text, end="", soft_wrap=True, highlight=False)

    # --- lifecycle ---

    def close(self) -> None:
        """Restore the cursor, end the block with a newline and emit 'close' once."""
        if self.closed:
            return
        self.closed = True
        if self.cursor_hidden:
            self.show_cursor()
        self.console.print()
        self.emit('close')

    def cancel(self, reason: Optional[str] = None) -> None:
        self.emit('cancel', reason)
