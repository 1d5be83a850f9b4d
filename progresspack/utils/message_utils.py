"""
Message and error/info utilities for the progresspack CLI.
Handles error/info display and logging.
"""
from progresspack.utils.rich_prompt import rich_info, rich_error, rich_success
from progresspack.utils.logging import contextual_log

def error(message, extra=None, demo=None):
    rich_error(message)
    context = dict(extra or {})
    if demo:
        context["demo"] = demo
    contextual_log('error', str(message), extra=context)

def info(message, extra=None, demo=None):
    rich_info(message)
    context = dict(extra or {})
    if demo:
        context["demo"] = demo
    contextual_log('info', str(message), extra=context)

def success(message, extra=None, demo=None):
    rich_success(message)
    context = dict(extra or {})
    if demo:
        context["demo"] = demo
    contextual_log('info', str(message), extra=context, status="success")
