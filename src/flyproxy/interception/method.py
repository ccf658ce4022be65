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
"""Method identity — a stable value naming one interceptable operation.

A :class:`MethodId` is computed once per synthesized proxy type for every
routed method and handed to interceptors on each call. Two identities are
*signature equal* when name and arity match; the declaring type is carried
for diagnostics only, so ``list.__len__`` and ``Sized.__len__`` filter the
same calls.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any

# Object identity methods; always routed, answered
# structurally when nothing else does.
IDENTITY_METHODS: frozenset[str] = frozenset({"__eq__", "__ne__", "__hash__", "__repr__", "__str__"})


@dataclass(frozen=True)
class MethodId:
    """Name, parameter signature and declaring type of a method.

    Attributes:
        name: Attribute name, e.g. ``"append"`` or ``"__len__"``.
        parameters: Parameter names after the receiver, or ``None`` when
            the callable exposes no introspectable signature.
        declaring_type: The class whose namespace defines the method.
    """

    name: str
    parameters: tuple[str, ...] | None = None
    declaring_type: type | None = None

    @classmethod
    def of(cls, method: Any, declaring_type: type | None = None) -> MethodId:
        """Build an identity from a name, a function or a method descriptor.

        Accepts ``"size"``, ``list.append``, ``MyIface.get_name`` or an
        existing :class:`MethodId` (returned unchanged).
        """
        if isinstance(method, MethodId):
            return method
        if isinstance(method, str):
            return cls(name=method, declaring_type=declaring_type)

        func = method.__func__ if inspect.ismethod(method) else method
        name = getattr(func, "__name__", None)
        if not isinstance(name, str):
            raise TypeError(f"Cannot derive a method identity from {method!r}")
        if declaring_type is None:
            owner = getattr(func, "__objclass__", None)
            declaring_type = owner if isinstance(owner, type) else None

        # Bound builtins such as [].append already dropped their receiver.
        receiver = getattr(func, "__self__", None)
        bound_builtin = inspect.isbuiltin(func) and receiver is not None and not inspect.ismodule(receiver)
        return cls(
            name=name,
            parameters=_parameter_names(func, has_receiver=not bound_builtin),
            declaring_type=declaring_type,
        )

    @property
    def arity(self) -> int | None:
        return None if self.parameters is None else len(self.parameters)

    @property
    def is_identity(self) -> bool:
        return self.name in IDENTITY_METHODS

    @property
    def qualified_name(self) -> str:
        owner = self.declaring_type.__qualname__ if self.declaring_type is not None else "?"
        params = "..." if self.parameters is None else ", ".join(self.parameters)
        return f"{owner}.{self.name}({params})"

    def signature_equals(self, other: MethodId) -> bool:
        """Same name and, where both are known, the same arity."""
        if self.name != other.name:
            return False
        if self.arity is None or other.arity is None:
            return True
        return self.arity == other.arity

    def __str__(self) -> str:
        return self.qualified_name


def _parameter_names(func: Any, has_receiver: bool = True) -> tuple[str, ...] | None:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return None
    params = list(signature.parameters.values())
    # Unbound functions and descriptors list the receiver first.
    if has_receiver and params and params[0].kind in (params[0].POSITIONAL_ONLY, params[0].POSITIONAL_OR_KEYWORD):
        params = params[1:]
    return tuple(_render(p) for p in params)


def _render(param: inspect.Parameter) -> str:
    if param.kind is param.VAR_POSITIONAL:
        return f"*{param.name}"
    if param.kind is param.VAR_KEYWORD:
        return f"**{param.name}"
    return param.name
