"""Unified exception hierarchy for flyproxy.

All library exceptions inherit from FlyProxyException, enabling unified
error handling. Interceptor failures are never wrapped: whatever an
interceptor raises reaches the caller of the proxied method unchanged.

Categories:
- ProxyException: type synthesis failures (visibility, constructors, backend)
- UnsupportedProxyOperationException: no implementation reachable at the end
  of an interceptor chain, or a limitation of the selected engine
- ConfigurationException: invalid engine selection
- InvalidProxyRequestException: a request the facade cannot satisfy
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class FlyProxyException(Exception):
    """Base exception for all flyproxy errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "SYNTHESIS_001").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Synthesis Exceptions
# =============================================================================


class ProxyException(FlyProxyException):
    """A proxy type could not be synthesized or instantiated.

    The root cause, when there is one, is chained as ``__cause__``.
    """


class TypeVisibilityException(ProxyException):
    """The requested bases cannot be combined into one type.

    Raised when no single metaclass is derivable from every requested
    superclass and interface.
    """


class ConstructorNotFoundException(ProxyException):
    """No constructor of the superclass accepts the supplied arguments."""


# =============================================================================
# Unsupported Operations
# =============================================================================


class UnsupportedProxyOperationException(FlyProxyException, NotImplementedError):
    """The call reached the end of the chain and nothing can answer it."""


class NoImplementationException(UnsupportedProxyOperationException):
    """The called method is abstract or synthesized without a body."""


class EngineLimitationException(UnsupportedProxyOperationException):
    """The selected engine cannot proceed to the inherited implementation."""

    def __init__(
        self,
        engine: str,
        method_name: str,
        suggestion: str,
        code: str | None = "ENGINE_LIMITATION",
    ) -> None:
        super().__init__(
            f"The {engine} engine does not support proceed() to the inherited implementation "
            f"of '{method_name}'. Consider using the {suggestion} engine for interceptors that "
            f"proceed, or do not call invocation.proceed() when using the {engine} engine.",
            code=code,
            context={"engine": engine, "method": method_name, "suggestion": suggestion},
        )
        self.engine = engine
        self.suggestion = suggestion


# =============================================================================
# Configuration / Request Exceptions
# =============================================================================


class ConfigurationException(FlyProxyException, ValueError):
    """Invalid library configuration, e.g. an unknown or missing engine."""


class InvalidProxyRequestException(FlyProxyException, ValueError):
    """The caller asked for a proxy that cannot be built from its arguments."""
