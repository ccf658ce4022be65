"""Tests for MethodId — method identity and signature equality."""

import pytest

from flyproxy.interception.method import IDENTITY_METHODS, MethodId


class Greeter:
    def greet(self, name, punctuation="!"):
        return f"hello {name}{punctuation}"

    def log(self, *args, **kwargs):
        pass


class TestMethodIdOf:
    def test_from_name(self):
        method = MethodId.of("size")
        assert method.name == "size"
        assert method.parameters is None
        assert method.arity is None
        assert method.declaring_type is None

    def test_from_function(self):
        method = MethodId.of(Greeter.greet, Greeter)
        assert method.name == "greet"
        assert method.parameters == ("name", "punctuation")
        assert method.declaring_type is Greeter

    def test_from_bound_method(self):
        method = MethodId.of(Greeter().greet)
        assert method.parameters == ("name", "punctuation")

    def test_from_builtin_descriptor(self):
        method = MethodId.of(list.append)
        assert method.name == "append"
        assert method.declaring_type is list
        assert method.arity == 1

    def test_from_bound_builtin_keeps_parameters(self):
        assert MethodId.of([].append).arity == 1

    def test_variadic_parameters(self):
        assert MethodId.of(Greeter.log).parameters == ("*args", "**kwargs")

    def test_existing_identity_is_returned(self):
        method = MethodId("size", (), list)
        assert MethodId.of(method) is method

    def test_rejects_non_callables(self):
        with pytest.raises(TypeError):
            MethodId.of(42)


class TestMethodIdEquality:
    def test_signature_equal_ignores_declaring_type(self):
        assert MethodId("__len__", (), list).signature_equals(MethodId("__len__", (), dict))

    def test_unknown_arity_matches_by_name(self):
        assert MethodId("append").signature_equals(MethodId("append", ("object",), list))

    def test_different_arity(self):
        assert not MethodId("add", ("x",)).signature_equals(MethodId("add", ("x", "y")))

    def test_different_name(self):
        assert not MethodId("add", ("x",)).signature_equals(MethodId("append", ("x",)))

    def test_values_are_hashable(self):
        assert len({MethodId("size", (), list), MethodId("size", (), list)}) == 1


class TestMethodIdRendering:
    def test_qualified_name(self):
        assert MethodId("greet", ("name",), Greeter).qualified_name == "Greeter.greet(name)"
        assert str(MethodId("size")) == "?.size(...)"

    def test_identity_methods(self):
        assert IDENTITY_METHODS == {"__eq__", "__ne__", "__hash__", "__repr__", "__str__"}
        assert MethodId("__hash__").is_identity
        assert not MethodId("__len__").is_identity
