import logging
import uuid
from typing import Any, Dict, Optional

LOGGER_NAME = "progresspack"

# Library records stay silent until the CLI attaches a handler
logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def contextual_log(level: str, message: str, extra: Optional[Dict[str, Any]] = None, **kwargs) -> None:
    """
    Log a message with structured context fields for indicator, operation, status, etc.
    Handles exc_info as a keyword argument, not in extra/context.
    Args:
        level (str): Logging level (e.g., 'info', 'debug').
        message (str): Log message.
        extra (Optional[Dict[str, Any]]): Additional context fields.
        **kwargs: Additional context fields or exc_info.
    Returns:
        None
    """
    logger = logging.getLogger(LOGGER_NAME)
    if extra is None:
        extra = {}
    exc_info = kwargs.pop('exc_info', False)
    context = {**extra, **kwargs}
    if 'operation_id' not in context:
        context['operation_id'] = str(uuid.uuid4())
    log_func = getattr(logger, level, logger.info)
    log_func(message, extra=context, exc_info=exc_info)


def build_context(indicator: str = None, mode: str = None, operation_id: str = None, **kwargs) -> Dict[str, Any]:
    """
    Build a structured context dictionary for logging, including indicator label, mode,
    operation id and any extra fields.
    Args:
        indicator (str, optional): Indicator label (usually its message).
        mode (str, optional): Progress mode name.
        operation_id (str, optional): Stable id shared by all records of one indicator.
        **kwargs: Additional context fields.
    Returns:
        Dict[str, Any]: Context dictionary for logging.
    """
    context = {}
    if indicator is not None:
        context['indicator'] = indicator
    if mode is not None:
        context['mode'] = mode
    if operation_id is not None:
        context['operation_id'] = operation_id
    context.update(kwargs)
    return context
