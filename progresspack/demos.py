"""
demos.py

Defines the demo manifest for the progresspack CLI.
Each demo drives a ProgressIndicator the way a real background task would, and is registered
with metadata for menu generation and dispatch.

- DEMO_MANIFEST: List of all available demos, their keys, labels, defaults and handlers.
"""
import time
from progresspack.config import ConfigLoader
from progresspack.progress import ProgressIndicator
from progresspack.utils.decorators import demo_error_handler

STATUS_TASKS = ['Init', 'Load', 'Compile', 'Test', 'Build']


def _indicator(config, defaults, host=None, clock=None, scheduler_factory=None):
    options = (config or ConfigLoader()).get_progress_options(defaults=defaults)
    kwargs = {'host': host, 'clock': clock}
    if scheduler_factory is not None:
        kwargs['scheduler_factory'] = scheduler_factory
    return ProgressIndicator(options, **kwargs)


@demo_error_handler("bar")
def demo_bar(config=None, sleep=time.sleep, **indicator_kwargs):
    """Basic determinate bar: 0-100 in steps of ten."""
    with _indicator(config, {'message': 'Downloading files', 'total': 100}, **indicator_kwargs) as bar:
        current = 0
        while current < bar.state.total:
            sleep(0.2)
            current += 10
            bar.update(current)
    return bar.run().result()


@demo_error_handler("eta")
def demo_eta(config=None, sleep=time.sleep, **indicator_kwargs):
    """Determinate bar with the automatic time-remaining estimate."""
    with _indicator(config, {'message': 'Processing files', 'total': 50, 'show_eta': True}, **indicator_kwargs) as bar:
        for current in range(1, int(bar.state.total) + 1):
            sleep(0.1)
            bar.update(current)
    return bar.run().result()


@demo_error_handler("spinner")
def demo_spinner(config=None, sleep=time.sleep, duration=3.0, **indicator_kwargs):
    """Indeterminate spinner for work of unknown length."""
    with _indicator(config, {'message': 'Processing data'}, **indicator_kwargs) as spin:
        sleep(duration)
        spin.complete('Done!')
    return spin.run().result()


@demo_error_handler("status")
def demo_status(config=None, sleep=time.sleep, **indicator_kwargs):
    """Determinate bar with per-step status text and a value fraction."""
    defaults = {'message': 'Building project', 'total': len(STATUS_TASKS), 'show_value': True}
    with _indicator(config, defaults, **indicator_kwargs) as bar:
        for current, task in enumerate(STATUS_TASKS):
            bar.update({'value': current, 'status': task})
            sleep(0.8)
    return bar.run().result()


# DEMO_MANIFEST: each entry has key, label, emoji, handler and description
DEMO_MANIFEST = [
    {"key": "bar", "label": "Progress bar", "emoji": "📦", "handler": demo_bar, "description": "Determinate bar counting to 100."},
    {"key": "eta", "label": "Progress bar with ETA", "emoji": "⏱️", "handler": demo_eta, "description": "Bar with an estimated time remaining."},
    {"key": "spinner", "label": "Spinner", "emoji": "🌀", "handler": demo_spinner, "description": "Spinner for work of unknown length."},
    {"key": "status", "label": "Status text", "emoji": "🛠️", "handler": demo_status, "description": "Bar with status text and a current/total value."},
]

DEMOS = {demo["key"]: demo for demo in DEMO_MANIFEST}
