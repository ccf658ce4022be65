"""Tests for the flyproxy exception hierarchy and dispatch result types."""

import pytest

from flyproxy.kernel.exceptions import (
    ConfigurationException,
    ConstructorNotFoundException,
    EngineLimitationException,
    FlyProxyException,
    InvalidProxyRequestException,
    NoImplementationException,
    ProxyException,
    TypeVisibilityException,
    UnsupportedProxyOperationException,
)
from flyproxy.kernel.types import DispatchOutcome, FailureKind


class TestFlyProxyException:
    def test_basic_creation(self) -> None:
        exc = FlyProxyException("something went wrong")
        assert str(exc) == "something went wrong"
        assert exc.code is None
        assert exc.context == {}

    def test_with_code_and_context(self) -> None:
        exc = FlyProxyException("no engine", code="UNKNOWN_ENGINE", context={"engine": "x"})
        assert exc.code == "UNKNOWN_ENGINE"
        assert exc.context["engine"] == "x"

    def test_context_defaults_to_empty_dict(self) -> None:
        exc = FlyProxyException("test")
        exc.context["key"] = "value"
        assert FlyProxyException("test2").context == {}


class TestExceptionHierarchy:
    def test_synthesis_failures_are_proxy_exceptions(self) -> None:
        assert issubclass(ProxyException, FlyProxyException)
        assert issubclass(TypeVisibilityException, ProxyException)
        assert issubclass(ConstructorNotFoundException, ProxyException)

    def test_unsupported_operations_are_not_implemented_errors(self) -> None:
        assert issubclass(UnsupportedProxyOperationException, NotImplementedError)
        assert issubclass(NoImplementationException, UnsupportedProxyOperationException)
        assert issubclass(EngineLimitationException, UnsupportedProxyOperationException)

    def test_request_errors_are_value_errors(self) -> None:
        assert issubclass(ConfigurationException, ValueError)
        assert issubclass(InvalidProxyRequestException, ValueError)

    def test_unsupported_is_not_a_proxy_exception(self) -> None:
        assert not issubclass(UnsupportedProxyOperationException, ProxyException)


class TestEngineLimitationException:
    def test_names_engine_method_and_suggestion(self) -> None:
        exc = EngineLimitationException("handler", "__len__", "subclass")
        message = str(exc)
        assert "handler engine" in message
        assert "'__len__'" in message
        assert "subclass engine" in message
        assert exc.engine == "handler"
        assert exc.suggestion == "subclass"
        assert exc.code == "ENGINE_LIMITATION"
        assert exc.context == {"engine": "handler", "method": "__len__", "suggestion": "subclass"}


class TestDispatchOutcome:
    def test_success(self) -> None:
        outcome = DispatchOutcome(value=4)
        assert outcome.ok
        assert outcome.unwrap() == 4
        assert outcome.to_dict() == {"ok": True, "value": 4}

    def test_failure_reraises_on_unwrap(self) -> None:
        error = NoImplementationException("nothing")
        outcome = DispatchOutcome(error=error, kind=FailureKind.UNSUPPORTED)
        assert not outcome.ok
        with pytest.raises(NoImplementationException):
            outcome.unwrap()
        assert outcome.to_dict() == {"ok": False, "kind": "UNSUPPORTED", "error": "nothing"}
