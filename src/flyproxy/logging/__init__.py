"""flyproxy logging — logging port and structlog adapter."""

from flyproxy.logging.port import LoggingPort
from flyproxy.logging.structlog_adapter import StructlogAdapter

__all__ = ["LoggingPort", "StructlogAdapter"]
