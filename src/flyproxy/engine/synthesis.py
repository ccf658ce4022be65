# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Type synthesis — define a proxy type at runtime and instantiate it.

A synthesizer receives the bases and the routed methods of a proxy type and
returns a new class whose routed methods all call one handler
(``Dispatcher.dispatch``). The two implementations differ in what they put
in the class namespace:

* :class:`FunctionSynthesizer` binds real functions carrying the metadata
  of the method they override.
* :class:`DescriptorSynthesizer` binds :class:`HandlerMethod` descriptors
  that know nothing but the method identity and the handler.
"""

from __future__ import annotations

import enum
import functools
import inspect
import itertools
import types
import typing
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from flyproxy.engine.introspection import RoutedMethod
from flyproxy.interception.method import MethodId
from flyproxy.kernel.exceptions import ConstructorNotFoundException, ProxyException, TypeVisibilityException

Handler = Callable[[Any, MethodId, tuple, dict], Any]

_Py_TPFLAGS_HEAPTYPE = 1 << 9
_Py_TPFLAGS_BASETYPE = 1 << 10

_counter = itertools.count(1)


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def check_subclassable(cls: type) -> None:
    """Raise :class:`ProxyException` when *cls* cannot be a proxy base."""
    if getattr(cls, "__final__", False):
        raise ProxyException(f"{cls.__qualname__} is final and cannot be proxied")
    if not cls.__flags__ & _Py_TPFLAGS_BASETYPE:
        raise ProxyException(f"{cls.__qualname__} does not allow subclassing and cannot be proxied")
    if isinstance(cls, enum.EnumMeta) and len(cls.__members__) > 0:
        raise ProxyException(f"Enumeration {cls.__qualname__} has members and cannot be proxied")


def derive_metaclass(bases: Sequence[type]) -> type:
    """The most derived metaclass of *bases*.

    Raises :class:`TypeVisibilityException` when two bases have unrelated
    metaclasses, i.e. no single type can see both.
    """
    winner: type = type
    for base in bases:
        meta = type(base)
        if issubclass(winner, meta):
            continue
        if issubclass(meta, winner):
            winner = meta
            continue
        raise TypeVisibilityException(
            f"{base.__qualname__} (metaclass {meta.__qualname__}) cannot be combined with a base "
            f"whose metaclass is {winner.__qualname__}",
            code="METACLASS_CONFLICT",
            context={"base": base.__qualname__, "metaclass": meta.__qualname__, "conflicting": winner.__qualname__},
        )
    return winner


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def _accepts_no_arguments(cls: type) -> bool:
    try:
        inspect.signature(cls).bind()
    except (TypeError, ValueError):
        return False
    return True


def allocate(cls: type) -> Any:
    """Create an instance of *cls* without running any ``__init__``.

    Uses ``__new__`` of the nearest built-in base, which never calls
    user code.
    """
    for klass in cls.__mro__:
        if not klass.__flags__ & _Py_TPFLAGS_HEAPTYPE:
            return klass.__new__(cls)
    raise ProxyException(f"No allocator found for {cls.__qualname__}")


def _accepts_value(annotation: Any, value: Any) -> bool:
    if annotation is None or annotation is Any or annotation is inspect.Parameter.empty:
        return True
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        return any(_accepts_value(arg, value) for arg in typing.get_args(annotation))
    if value is None:
        # Primitive-typed parameters cannot take None.
        return annotation not in (int, float, bool, complex)
    if isinstance(origin, type):
        return isinstance(value, origin)
    if isinstance(annotation, type):
        return isinstance(value, annotation)
    return True


def match_constructor(cls: type, args: Sequence[Any], kwargs: Mapping[str, Any]) -> None:
    """Check that *cls* can be constructed from *args* and *kwargs*.

    Arity is checked by binding against the class call signature, then each
    annotated parameter against its value. ``None`` is accepted for any
    non-primitive parameter.

    Raises:
        ConstructorNotFoundException: When no signature accepts the values.
    """
    rendered = ", ".join(type(arg).__qualname__ if arg is not None else "None" for arg in args)
    try:
        signature = inspect.signature(cls)
        bound = signature.bind(*args, **kwargs)
    except (TypeError, ValueError) as exc:
        raise ConstructorNotFoundException(
            f"Did not find any constructor matching the provided arguments: [{rendered}]",
            code="CONSTRUCTOR_NOT_FOUND",
            context={"type": cls.__qualname__},
        ) from exc

    try:
        hints = typing.get_type_hints(cls.__init__)
    except Exception:
        hints = {}
    for name, value in bound.arguments.items():
        param = signature.parameters[name]
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        if not _accepts_value(hints.get(name), value):
            raise ConstructorNotFoundException(
                f"Did not find any constructor matching the provided arguments: [{rendered}]",
                code="CONSTRUCTOR_NOT_FOUND",
                context={"type": cls.__qualname__, "parameter": name},
            )


# ---------------------------------------------------------------------------
# Synthesizers
# ---------------------------------------------------------------------------


class TypeSynthesizer(ABC):
    """Defines proxy types and creates their instances."""

    def define_type(
        self,
        bases: Sequence[type],
        methods: Mapping[str, RoutedMethod],
        handler: Handler,
        attributes: Mapping[str, Any] | None = None,
    ) -> type:
        """Create a class with *bases* routing every entry of *methods* to *handler*.

        Raises:
            TypeVisibilityException: No metaclass is common to all bases.
            ProxyException: A base cannot be subclassed, or class creation
                failed for any other reason.
        """
        for base in bases:
            check_subclassable(base)
        metaclass = derive_metaclass(bases)

        lead = bases[0]
        namespace: dict[str, Any] = {name: self.bind(routed, handler) for name, routed in methods.items()}
        namespace.update(attributes or {})
        namespace["__module__"] = lead.__module__
        namespace["__qualname__"] = f"{lead.__qualname__}$$FlyProxy{next(_counter)}"
        name = namespace["__qualname__"].rpartition(".")[2]

        try:
            return types.new_class(name, tuple(bases), {"metaclass": metaclass}, lambda ns: ns.update(namespace))
        except TypeError as exc:
            raise ProxyException(f"Cannot synthesize a proxy type for {lead.__qualname__}: {exc}") from exc

    def instantiate(
        self,
        proxy_type: type,
        args: Sequence[Any] | None = None,
        kwargs: Mapping[str, Any] | None = None,
        *,
        construct: bool = True,
    ) -> Any:
        """Create an instance of *proxy_type*.

        With explicit *args* or *kwargs* the inherited constructor runs. Without
        them the constructor runs only if it takes no arguments; otherwise the
        instance is allocated without running any constructor. ``construct=False``
        always allocates.
        """
        if args is not None or kwargs is not None:
            return proxy_type(*(args or ()), **(kwargs or {}))
        if construct and _accepts_no_arguments(proxy_type):
            return proxy_type()
        return allocate(proxy_type)

    @abstractmethod
    def bind(self, routed: RoutedMethod, handler: Handler) -> Any:
        """Return the namespace entry routing *routed* to *handler*."""


class FunctionSynthesizer(TypeSynthesizer):
    """Binds plain functions wrapping the overridden method's metadata."""

    def bind(self, routed: RoutedMethod, handler: Handler) -> Any:
        method = routed.method

        def route(self: Any, *args: Any, **kwargs: Any) -> Any:
            return handler(self, method, args, kwargs)

        if isinstance(routed.implementation, types.FunctionType):
            functools.update_wrapper(route, routed.implementation)
        else:
            route.__name__ = method.name
            route.__qualname__ = method.qualified_name.partition("(")[0]
        # Copied along with the wrapped function's __dict__.
        route.__isabstractmethod__ = False  # type: ignore[attr-defined]
        return route


class HandlerMethod:
    """Descriptor routing one method to a handler.

    Holds only the method identity; the overridden implementation is
    unknown to it.
    """

    __isabstractmethod__ = False

    def __init__(self, method: MethodId, handler: Handler) -> None:
        self.method = method
        self.handler = handler
        self.__name__ = method.name
        self.__qualname__ = method.qualified_name.partition("(")[0]

    def __call__(self, proxy: Any, *args: Any, **kwargs: Any) -> Any:
        return self.handler(proxy, self.method, args, kwargs)

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def __repr__(self) -> str:
        return f"<handler method {self.method.qualified_name}>"


class DescriptorSynthesizer(TypeSynthesizer):
    """Binds :class:`HandlerMethod` descriptors."""

    def bind(self, routed: RoutedMethod, handler: Handler) -> Any:
        return HandlerMethod(routed.method, handler)
