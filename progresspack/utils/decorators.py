"""
Decorators and logging helpers for progresspack.
Handles demo entry/exit logging and error handling.
"""
import functools
from progresspack.utils.logging import contextual_log, build_context
from progresspack.utils.message_utils import info, error

def demo_error_handler(demo_name):
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            context = build_context(demo=demo_name)
            contextual_log('info', f"[{demo_name}] Demo started.", operation="demo_start", extra=context)
            try:
                result = func(*args, **kwargs)
            except KeyboardInterrupt:
                contextual_log('warning', f"[{demo_name}] Graceful exit via KeyboardInterrupt.", operation="demo_end", status="interrupted", extra=context)
                info(f"Cancelled {demo_name} demo.", demo=demo_name)
                raise
            except Exception as e:
                contextual_log('error', f"[{demo_name}] Exception: {e}", exc_info=True, operation="demo_end", error_type=type(e).__name__, status="error", extra=context)
                error(f"[{demo_name}] Exception: {e}", demo=demo_name)
                raise
            contextual_log('info', f"[{demo_name}] Demo finished.", operation="demo_end", status="success", extra=context)
            return result
        return wrapper
    return decorator
