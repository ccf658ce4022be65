"""TimerInterceptor — logs how long each intercepted call takes."""

from __future__ import annotations

import time
from typing import Any

import structlog

from flyproxy.interception.invocation import Invocation

logger = structlog.get_logger("flyproxy.timing")


class TimerInterceptor:
    """Times the rest of the chain and logs one ``method_timed`` event per call.

    Failures are logged with ``outcome="error"`` and re-raised unchanged.
    """

    def __init__(self, level: str = "info") -> None:
        self._level = level

    def intercept(self, invocation: Invocation) -> Any:
        start = time.perf_counter()
        outcome = "ok"
        try:
            return invocation.proceed()
        except Exception:
            outcome = "error"
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            getattr(logger, self._level)(
                "method_timed",
                method=invocation.method,
                target=type(invocation.target),
                elapsed_ms=round(elapsed_ms, 3),
                outcome=outcome,
            )
