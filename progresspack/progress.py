"""
Progress indicator for progresspack.
Displays an animated progress bar (known total) or spinner (unknown total) with optional
status text and an automatic time-remaining estimate based on the observed progress rate.
"""
import math
import numbers
import threading
import time
import uuid
from collections.abc import Mapping
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from rich.markup import escape

from progresspack.config import FRAME_INTERVAL_MS, load_progress_options
from progresspack.prompt import TerminalPrompt
from progresspack.utils.logging import build_context, contextual_log

DEFAULT_TOTAL = 100


class ProgressError(Exception):
    """Base class for progresspack errors."""


class PromptCancelled(ProgressError):
    """Raised through the run future when the prompt is cancelled before completion."""

    def __init__(self, reason: Optional[str] = None):
        self.reason = reason
        super().__init__(reason or "Progress prompt cancelled")


class Mode(Enum):
    DETERMINATE = "determinate"
    INDETERMINATE = "indeterminate"


class Phase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUBMITTED = "submitted"
    CANCELLED = "cancelled"


TERMINAL_PHASES = (Phase.SUBMITTED, Phase.CANCELLED)


@dataclass
class ProgressState:
    mode: Mode
    current: float = 0
    total: float = DEFAULT_TOTAL
    message: str = ""
    status_text: str = ""
    start_time: Optional[float] = None
    last_update_time: Optional[float] = None
    spinner_frame_index: int = 0
    submitted: bool = False


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value)


def _now_ms() -> float:
    return time.monotonic() * 1000


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, float):
        return f"{value:.2f}".rstrip('0').rstrip('.')
    return str(value)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def select_mode(total: Any):
    """
    Decide the display mode from the configured total.
    Returns (mode, total); the returned total is always positive.
    """
    if not _is_number(total) or total <= 0:
        return Mode.INDETERMINATE, DEFAULT_TOTAL
    return Mode.DETERMINATE, total


def format_time(ms: float) -> str:
    """
    Format a duration in milliseconds: "<1s", "42s", "2m", "2m 5s". Seconds round up.
    """
    if ms < 1000:
        return "<1s"
    seconds = math.ceil(ms / 1000)
    if seconds < 60:
        return f"{seconds}s"
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}m {secs}s" if secs > 0 else f"{minutes}m"


class AnimationScheduler:
    """
    Fixed-interval ticker running on a daemon thread.
    Calls on_tick(tick_count) every interval_ms until stopped. stop() is idempotent.
    """

    def __init__(self, on_tick: Callable[[int], None], interval_ms: int = FRAME_INTERVAL_MS):
        self._on_tick = on_tick
        self.interval_ms = interval_ms
        self.tick_count = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stop_event.is_set()

    def start(self) -> None:
        if self._thread is not None or self._stop_event.is_set():
            return
        self._thread = threading.Thread(target=self._run, name="progresspack-spinner", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval_ms / 1000):
            self.tick()

    def tick(self) -> None:
        self.tick_count += 1
        self._on_tick(self.tick_count)

    def stop(self) -> None:
        if self._stop_event.is_set():
            return
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)


class ProgressIndicator:
    """
    Progress prompt supporting determinate (bar) and indeterminate (spinner) modes.

    Usage:
        bar = ProgressIndicator(message="Downloading", total=100)
        future = bar.run()
        for chunk in chunks:
            bar.update(bar.state.current + len(chunk))
        bar.complete()
        future.result()

    The indicator is also a context manager: entering runs it, a clean exit completes it and
    an exception cancels it.
    """

    def __init__(self, options: Optional[Mapping] = None, *, host: Optional[TerminalPrompt] = None,
                 clock: Optional[Callable[[], float]] = None,
                 scheduler_factory: Callable[..., AnimationScheduler] = AnimationScheduler,
                 **kwargs):
        self.options = load_progress_options({**dict(options or {}), **kwargs})
        self.host = host or TerminalPrompt(header=self.options['header'], footer=self.options['footer'])
        self.clock = clock or _now_ms

        self.bar_length = self.options['bar_length']
        self.show_percentage = self.options['show_percentage']
        self.show_value = self.options['show_value']
        self.show_eta = self.options['show_eta']
        self.complete_char = self.options['complete_char']
        self.incomplete_char = self.options['incomplete_char']
        self.spinner_frames = list(self.options['spinner_frames'])
        self.working_label = self.options['working_label']
        self.animate = self.options['animate']

        mode, total = select_mode(self.options['total'])
        self.state = ProgressState(
            mode=mode,
            current=self.options['initial'],
            total=total,
            message=self.options['message'],
            status_text=self.options['status'],
        )
        self.phase = Phase.IDLE
        self.operation_id = str(uuid.uuid4())
        self.render_count = 0
        self._rendered_lines = 0
        self._render_lock = threading.RLock()
        self._future: Future = Future()
        self._log_context = build_context(self.state.message or None, mode.value, self.operation_id)

        self.host.once('cancel', self._handle_cancel)

        self.scheduler: Optional[AnimationScheduler] = None
        if mode is Mode.INDETERMINATE or self.animate:
            self.scheduler = scheduler_factory(self._on_tick, self.options['interval_ms'])
            self.host.once('close', self.scheduler.stop)
            self.scheduler.start()

    def __enter__(self):
        self.run()
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.complete()
        else:
            self.cancel(str(exc) or exc_type.__name__)
        return False

    @property
    def mode(self) -> Mode:
        return self.state.mode

    @property
    def indeterminate(self) -> bool:
        return self.state.mode is Mode.INDETERMINATE

    @property
    def current_frame(self) -> str:
        return self.spinner_frames[self.state.spinner_frame_index]

    @property
    def percentage(self) -> float:
        return min(100.0, max(0.0, (self.state.current / self.state.total) * 100))

    def _on_tick(self, tick: int) -> None:
        with self._render_lock:
            self.state.spinner_frame_index = tick % len(self.spinner_frames)
            if self.phase is Phase.RUNNING:
                self.render()

    def run(self) -> Future:
        """
        Start the live display and return a future resolving with the final value.
        Calling run() again returns the same future.
        """
        with self._render_lock:
            if self.phase is not Phase.IDLE:
                return self._future
            self.phase = Phase.RUNNING
            contextual_log('info', "[Progress] Run started.", extra=self._log_context, operation="run", status="running")
            self.host.hide_cursor()
            self.render()
        self.host.emit('run')
        return self._future

    def update(self, payload: Any = None, **fields) -> None:
        """
        Update progress value and/or message, status and total.
        Accepts a bare number (the new current value), a mapping or keyword fields
        with any of: value, message, status, total. Absent fields are left untouched.
        """
        if isinstance(payload, Mapping):
            fields = {**payload, **fields}
        elif _is_number(payload):
            fields.setdefault('value', payload)
        elif payload is not None:
            fields.setdefault('_payload', payload)

        with self._render_lock:
            if self.phase in TERMINAL_PHASES:
                contextual_log('debug', f"[Progress] Update ignored after {self.phase.value}.", extra=self._log_context, operation="update", status="ignored")
                return
            state = self.state
            now = self.clock()
            if state.start_time is None:
                state.start_time = now

            ignored = []
            for key, value in fields.items():
                if key == 'value' and _is_number(value):
                    state.current = value
                elif key == 'message' and value is not None:
                    state.message = str(value)
                elif key == 'status':
                    state.status_text = '' if value is None else str(value)
                elif key == 'total' and _is_number(value) and value > 0:
                    state.total = value
                else:
                    ignored.append(key)
            if ignored:
                contextual_log('debug', f"[Progress] Ignored update fields: {ignored}", extra=self._log_context, operation="update", params=ignored)

            state.last_update_time = now
            if self.phase is Phase.RUNNING:
                self.render()

    def complete(self, message: Optional[str] = None) -> Future:
        """
        Finish the progress: fill the bar, optionally replace the message, draw the
        completion line and resolve the run future with the final value.
        """
        with self._render_lock:
            if self.phase in TERMINAL_PHASES:
                return self._future
            if not self.indeterminate:
                self.state.current = self.state.total
            if message:
                self.state.message = message
            self.state.submitted = True
            self.phase = Phase.SUBMITTED
            self.render()
            result = self.state.current
        self.host.close()
        contextual_log('info', f"[Progress] Completed with value {result}.", extra=self._log_context, operation="complete", status="submitted")
        self._future.set_result(result)
        self.host.emit('submit', result)
        return self._future

    def cancel(self, reason: Optional[str] = None) -> None:
        """Cancel through the host so every cancel path goes through the same handler."""
        self.host.cancel(reason)

    def _handle_cancel(self, reason: Optional[str] = None) -> None:
        with self._render_lock:
            if self.phase in TERMINAL_PHASES:
                return
            self.phase = Phase.CANCELLED
        self.host.close()
        contextual_log('warning', f"[Progress] Cancelled: {reason or 'no reason given'}", extra=self._log_context, operation="cancel", status="cancelled")
        self._future.set_exception(PromptCancelled(reason))

    def get_eta(self) -> Optional[float]:
        """
        Estimated milliseconds remaining, or None when no estimate is possible.

        The rate is measured from the first update to the latest one, so early
        estimates can swing widely on bursty updates and settle as progress accumulates.
        """
        state = self.state
        if self.indeterminate or state.start_time is None or state.last_update_time is None or state.current == 0:
            return None
        elapsed = state.last_update_time - state.start_time
        if elapsed <= 0:
            return None
        rate = state.current / elapsed
        remaining = state.total - state.current
        return remaining / rate

    def render_bar(self) -> str:
        """
        Render the bar line (rich markup). Empty once the prompt is submitted.
        """
        state = self.state
        if state.submitted:
            return ""

        if self.indeterminate:
            parts = [f"[primary]{escape(self.current_frame)}[/primary] [muted]{escape(self.working_label)}[/muted]"]
        else:
            percentage = self.percentage
            completed = _round_half_up((percentage / 100) * self.bar_length)
            remaining = self.bar_length - completed

            complete_bar = f"[primary]{escape(self.complete_char * completed)}[/primary]"
            incomplete_bar = f"[muted]{escape(self.incomplete_char * remaining)}[/muted]"

            parts = []
            if self.animate:
                parts.append(f"[primary]{escape(self.current_frame)}[/primary]")
            parts.append(complete_bar + incomplete_bar)

            if self.show_percentage:
                parts.append(f"[primary]{_round_half_up(percentage):03d}%[/primary]")

            if self.show_value:
                parts.append(f"[muted]{_format_number(state.current)}/{_format_number(state.total)}[/muted]")

            if self.show_eta:
                eta = self.get_eta()
                if eta is not None and eta > 0 and math.isfinite(eta):
                    parts.append(f"[muted]ETA {format_time(eta)}[/muted]")

        if state.status_text:
            parts.append(f"[muted]{escape(state.status_text)}[/muted]")

        return " ".join(parts)

    def render(self) -> None:
        """
        Redraw the whole block (header, prompt line, bar, footer) over the previous one.
        """
        with self._render_lock:
            if self.phase is Phase.CANCELLED:
                return
            state = self.state
            message = escape(state.message)

            if not state.submitted:
                prompt = " ".join(p for p in [self.host.prefix(), message, self.host.separator()] if p)
                bar = self.render_bar()
            else:
                prompt = " ".join(p for p in [f"[submitted]{self.host.symbols['check']}[/submitted]", message] if p)
                bar = ""

            lines = [line for line in [self.host.header(), prompt, bar, self.host.footer()] if line]
            output = "\n".join(lines)

            self.host.clear(self._rendered_lines)
            self.host.write(output)
            self._rendered_lines = self.host.rows(output)
            self.render_count += 1
