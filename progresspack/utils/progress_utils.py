"""
Progress bar and spinner helpers for progresspack.
Wrap ProgressIndicator for the two common cases: a block of work of unknown length and an iterable.
"""
from contextlib import contextmanager
from progresspack.progress import ProgressIndicator

@contextmanager
def spinner(message: str, **options):
    with ProgressIndicator(message=message, total=None, **options) as indicator:
        yield indicator

def progress_bar(iterable, desc="Progress", **options):
    total = len(iterable) if hasattr(iterable, '__len__') else None
    # Nothing to report for an empty sized iterable
    if total == 0:
        return
    with ProgressIndicator(message=desc, total=total, **options) as indicator:
        for index, element in enumerate(iterable, 1):
            yield element
            indicator.update(index)
