import logging
import time
from contextlib import contextmanager
from typing import Dict, Optional

from opentelemetry.trace import Tracer

logger = logging.getLogger("uvicorn.error")


@contextmanager
def traced_request(
    tracer: Tracer,
    operation: str,
    start_message: str,
    extra_attrs: Optional[Dict] = None,
):
    """Open a span for one proxied call, log its start and record how long it took."""
    started = time.perf_counter()
    with tracer.start_as_current_span(operation) as span:
        for k, v in (extra_attrs or {}).items():
            span.set_attribute(k, v)
        logger.info(start_message)
        try:
            yield span
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            span.set_attribute("proxy.duration_ms", round(elapsed_ms, 1))
            logger.debug(f"[Proxy] {operation} finished in {elapsed_ms:.1f}ms")
