"""
Shared fixtures for the progresspack tests.

Run: python -m pytest tests -v
"""

import io

import pytest
from rich.console import Console
from rich.text import Text

from progresspack.progress import ProgressIndicator
from progresspack.prompt import TerminalPrompt
from progresspack.utils.rich_prompt import PROGRESS_THEME


class ManualScheduler:
    """Scheduler double: ticks only when the test calls tick()."""

    def __init__(self, on_tick, interval_ms=80):
        self.on_tick = on_tick
        self.interval_ms = interval_ms
        self.tick_count = 0
        self.started = False
        self.stop_calls = 0

    @property
    def running(self):
        return self.started and self.stop_calls == 0

    def start(self):
        self.started = True

    def tick(self):
        self.tick_count += 1
        self.on_tick(self.tick_count)

    def stop(self):
        self.stop_calls += 1


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture
def plain():
    """Strip rich markup from a rendered line."""
    return lambda markup: Text.from_markup(markup).plain


@pytest.fixture
def console():
    return Console(file=io.StringIO(), force_terminal=False, width=200, theme=PROGRESS_THEME)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def indicator_kwargs(console, clock):
    """Keyword arguments wiring an indicator to a captured console, fake clock and manual scheduler."""
    def build():
        return {
            "host": TerminalPrompt(console=console),
            "clock": clock,
            "scheduler_factory": ManualScheduler,
        }
    return build


@pytest.fixture
def make_indicator(indicator_kwargs):
    def factory(**options):
        return ProgressIndicator(**options, **indicator_kwargs())
    return factory


@pytest.fixture
def output(console):
    return lambda: console.file.getvalue()


@pytest.fixture
def narrow_indicator(clock):
    """Indicator drawing on a 30-column console, so long bar lines wrap."""
    def factory(force_terminal=False, **options):
        narrow = Console(file=io.StringIO(), force_terminal=force_terminal, color_system=None,
                         width=30, theme=PROGRESS_THEME)
        return ProgressIndicator(host=TerminalPrompt(console=narrow), clock=clock,
                                 scheduler_factory=ManualScheduler, **options)
    return factory
