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
"""Class introspection used to plan a proxy type before it is created.

Which methods a proxy routes is decided from the linearized bases of the
type about to be synthesized, so the complete namespace can be handed to
the type synthesizer in one step.
"""

from __future__ import annotations

import inspect
import types
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from flyproxy.interception.bean import is_getter_name, setter_name_for
from flyproxy.interception.interceptor import MANAGEMENT_METHODS, InterceptableProxy
from flyproxy.interception.method import IDENTITY_METHODS, MethodId
from flyproxy.kernel.exceptions import ProxyException

TARGET_CLASS_ATTR = "__flyproxy_target_class__"
INTERFACES_ATTR = "__flyproxy_interfaces__"

# Protocol dunders routed when a base defines them. In-place operators are
# left out: they return the receiver, which would leak the wrapped object.
ROUTED_DUNDERS: frozenset[str] = frozenset(
    {
        "__len__",
        "__iter__",
        "__next__",
        "__reversed__",
        "__contains__",
        "__getitem__",
        "__setitem__",
        "__delitem__",
        "__call__",
        "__bool__",
        "__enter__",
        "__exit__",
        "__lt__",
        "__le__",
        "__gt__",
        "__ge__",
        "__add__",
        "__radd__",
        "__sub__",
        "__rsub__",
        "__mul__",
        "__rmul__",
        "__truediv__",
        "__floordiv__",
        "__mod__",
        "__neg__",
        "__abs__",
    }
)

_METHOD_TYPES = (types.FunctionType, types.MethodDescriptorType, types.WrapperDescriptorType)


@dataclass(frozen=True)
class RoutedMethod:
    """A method the proxy type routes to its dispatcher.

    ``implementation`` is the inherited attribute that ``proceed()`` may
    reach, or ``None`` for abstract methods, protocol stubs and methods
    synthesized without a body.
    """

    method: MethodId
    implementation: Any = None

    @property
    def concrete(self) -> bool:
        return self.implementation is not None


# ---------------------------------------------------------------------------
# Bases
# ---------------------------------------------------------------------------


def linearize(bases: Sequence[type]) -> list[type]:
    """C3 linearization of a type that would have *bases*, excluding itself."""
    sequences = [list(base.__mro__) for base in bases] + [list(bases)]
    result: list[type] = []
    while True:
        sequences = [seq for seq in sequences if seq]
        if not sequences:
            return result
        for seq in sequences:
            head = seq[0]
            if not any(head in other[1:] for other in sequences):
                break
        else:
            names = ", ".join(base.__qualname__ for base in bases)
            raise ProxyException(f"Cannot create a consistent method resolution order for bases ({names})")
        result.append(head)
        for seq in sequences:
            if seq[0] is head:
                del seq[0]


def is_interface(cls: type) -> bool:
    """Protocol classes and abstract classes count as interfaces."""
    return bool(getattr(cls, "_is_protocol", False)) or inspect.isabstract(cls)


def is_proxy_type(cls: type) -> bool:
    return TARGET_CLASS_ATTR in vars(cls)


def unwrap_proxy_type(cls: type) -> tuple[type, tuple[type, ...]]:
    """Return the class and interfaces a synthesized proxy type was built from."""
    if not is_proxy_type(cls):
        return cls, ()
    target = vars(cls)[TARGET_CLASS_ATTR]
    return (target if target is not None else object), tuple(vars(cls)[INTERFACES_ATTR])


def interfaces_of(obj: Any) -> tuple[type, ...]:
    """Interfaces implemented by *obj*'s type, proxies resolved to their requests."""
    cls = type(obj)
    target, requested = unwrap_proxy_type(cls)
    found: list[type] = list(requested)
    for klass in target.__mro__:
        if klass is not target and is_interface(klass) and klass not in found:
            found.append(klass)
    if target is not object and is_interface(target) and target not in found:
        found.insert(0, target)
    return tuple(found)


def validate_interfaces(interfaces: Iterable[Any], base: type | None = None) -> tuple[type, ...]:
    """Deduplicate *interfaces*, dropping the marker and anything already implied."""
    result: list[type] = []
    for interface in interfaces:
        if not isinstance(interface, type):
            raise ProxyException(f"{interface!r} is not a class and cannot be implemented by a proxy")
        if interface is InterceptableProxy or interface is object or interface in result:
            continue
        if base is not None and interface in base.__mro__:
            continue
        result.append(interface)
    # MRO membership, not issubclass: plain protocols reject subclass checks.
    return tuple(i for i in result if not any(other is not i and i in other.__mro__ for other in result))


# ---------------------------------------------------------------------------
# Methods
# ---------------------------------------------------------------------------


def _is_routable_name(name: str) -> bool:
    return not name.startswith("_") or name in ROUTED_DUNDERS or name in IDENTITY_METHODS


def _has_body(klass: type, attr: Any, inherited: set[type]) -> bool:
    if getattr(attr, "__isabstractmethod__", False):
        return False
    # Protocol members are signatures unless the proxied class inherits them.
    return klass in inherited or not getattr(klass, "_is_protocol", False)


def discover_methods(bases: Sequence[type], base: type | None = None) -> dict[str, RoutedMethod]:
    """Methods a proxy with *bases* routes, keyed by name.

    Walks the linearized bases; the first class defining a name decides,
    so a non-method attribute shadows an inherited method of that name.
    Identity methods are always present. *base* is the proxied class, if
    any; only it makes protocol method bodies reachable.
    """
    inherited = set(base.__mro__) if base is not None else set()
    found: dict[str, RoutedMethod | None] = {}
    for klass in linearize(bases):
        if klass is object or klass is InterceptableProxy:
            continue
        for name, attr in vars(klass).items():
            if name in found:
                continue
            abstract = getattr(attr, "__isabstractmethod__", False)
            if not (abstract or _is_routable_name(name)):
                continue
            if not isinstance(attr, _METHOD_TYPES):
                found[name] = None
                continue
            implementation = attr if _has_body(klass, attr, inherited) else None
            found[name] = RoutedMethod(MethodId.of(attr, klass), implementation)

    methods = {name: routed for name, routed in found.items() if routed is not None}
    for name in IDENTITY_METHODS:
        if name not in methods:
            methods[name] = RoutedMethod(MethodId.of(getattr(object, name), object))
    return methods


def management_methods() -> dict[str, RoutedMethod]:
    return {method.name: RoutedMethod(method) for method in MANAGEMENT_METHODS}


def bean_setter_stubs(methods: Mapping[str, RoutedMethod], bean_type: type) -> dict[str, RoutedMethod]:
    """Setters to synthesize for *bean_type*'s getters that lack one.

    A getter is a routed zero-argument ``get*``/``is*`` method declared in
    *bean_type*'s hierarchy; its setter takes one ``value`` parameter and
    has no body.
    """
    stubs: dict[str, RoutedMethod] = {}
    hierarchy = set(bean_type.__mro__)
    for name, routed in methods.items():
        if not is_getter_name(name) or routed.method.arity != 0:
            continue
        if routed.method.declaring_type not in hierarchy:
            continue
        setter = setter_name_for(name)
        if setter is None or setter in methods or setter in stubs or hasattr(bean_type, setter):
            continue
        stubs[setter] = RoutedMethod(MethodId(setter, ("value",), bean_type))
    return stubs

