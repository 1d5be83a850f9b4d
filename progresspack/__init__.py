"""
progresspack: terminal progress bars and spinners with status text and time-remaining estimates.
"""
__version__ = "1.0.0"

from progresspack.progress import (  # noqa: E402
    AnimationScheduler,
    Mode,
    Phase,
    ProgressError,
    ProgressIndicator,
    ProgressState,
    PromptCancelled,
    format_time,
    select_mode,
)
from progresspack.prompt import TerminalPrompt  # noqa: E402

Progress = ProgressIndicator

__all__ = [
    "AnimationScheduler",
    "Mode",
    "Phase",
    "Progress",
    "ProgressError",
    "ProgressIndicator",
    "ProgressState",
    "PromptCancelled",
    "TerminalPrompt",
    "format_time",
    "select_mode",
]
