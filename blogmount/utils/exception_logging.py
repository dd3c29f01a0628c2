"""
Exception logging helpers that never raise themselves.

Upstream failures wrap the httpx error that caused them, so the whole
``__cause__`` chain is rendered into a single log line.
"""

import logging
from typing import Optional


def _safe_str(obj) -> str:
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            return f"<{type(obj).__name__} object (string conversion failed)>"


def format_exception_message(exception: Optional[BaseException]) -> str:
    """
    Render ``Type: message`` for an exception and each exception in its cause chain.

    Args:
        exception: The exception to format

    Returns:
        A string such as ``UpstreamTimeout: ... <- ReadTimeout: ...``
    """
    if exception is None:
        return "None"
    parts = []
    seen = set()
    current: Optional[BaseException] = exception
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        parts.append(f"{type(current).__name__}: {_safe_str(current)}")
        current = current.__cause__ or current.__context__
    return " <- ".join(parts)


def log_exception_with_details(
    logger: logging.Logger,
    prefix: str,
    exception: Optional[BaseException],
    level: int = logging.ERROR,
    include_traceback: bool = True,
) -> None:
    """
    Log an exception with its cause chain.

    Args:
        logger: The logger instance to use
        prefix: Prefix for the log message (e.g., "[Proxy]")
        exception: The exception to log
        level: The logging level to use (default: ERROR)
        include_traceback: Attach ``exc_info`` to the record
    """
    message = f"{prefix} Exception: {format_exception_message(exception)}"
    try:
        logger.log(
            level,
            message,
            exc_info=exception if include_traceback and exception is not None else False,
        )
    except Exception:
        try:
            logger.log(level, f"{prefix} Exception (logging failed)")
        except Exception:
            pass
