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
"""Interceptor contract, the proxy marker type, and interceptor adapters."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from flyproxy.interception.invocation import Invocation
from flyproxy.interception.method import MethodId


@runtime_checkable
class Interceptor(Protocol):
    """Observes, short-circuits or forwards one call.

    Implementations return a result, raise, or call
    ``invocation.proceed()`` zero or more times. Any callable taking an
    :class:`Invocation` is accepted wherever an Interceptor is::

        def size10(invocation):
            if invocation.method_name == "__len__":
                return 10
            return invocation.proceed()
    """

    def intercept(self, invocation: Invocation) -> Any: ...


def invoke_interceptor(interceptor: Any, invocation: Invocation) -> Any:
    """Run *interceptor* against *invocation*, object or plain callable."""
    intercept = getattr(interceptor, "intercept", None)
    if intercept is None:
        return interceptor(invocation)
    return intercept(invocation)


class InterceptableProxy:
    """Marker base of every synthesized proxy.

    Proxy types override all three methods; they are answered by the
    proxy's dispatcher directly and never reach an interceptor.
    """

    def add_interceptor(self, interceptor: Any) -> None:
        """Push *interceptor*; the most recently added runs first."""
        raise NotImplementedError

    def remove_interceptor(self, interceptor: Any) -> None:
        """Remove the first occurrence equal to *interceptor*."""
        raise NotImplementedError

    def get_interceptor_list(self) -> list[Any]:
        """Return the interceptors in call order."""
        raise NotImplementedError


ADD_INTERCEPTOR = MethodId.of(InterceptableProxy.add_interceptor, InterceptableProxy)
REMOVE_INTERCEPTOR = MethodId.of(InterceptableProxy.remove_interceptor, InterceptableProxy)
GET_INTERCEPTOR_LIST = MethodId.of(InterceptableProxy.get_interceptor_list, InterceptableProxy)
MANAGEMENT_METHODS: tuple[MethodId, ...] = (ADD_INTERCEPTOR, REMOVE_INTERCEPTOR, GET_INTERCEPTOR_LIST)


class SingleMethodInterceptor:
    """Applies *interceptor* to one method only.

    Calls to any other method proceed as if this entry were absent; the
    entry still keeps its place in :meth:`get_interceptor_list`.
    """

    def __init__(self, interceptor: Any, method: Any) -> None:
        self.interceptor = interceptor
        self.method = MethodId.of(method)

    def intercept(self, invocation: Invocation) -> Any:
        if invocation.method.signature_equals(self.method):
            return invoke_interceptor(self.interceptor, invocation)
        return invocation.proceed()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SingleMethodInterceptor):
            return NotImplemented
        return self.interceptor == other.interceptor and self.method == other.method

    def __hash__(self) -> int:
        return hash((SingleMethodInterceptor, self.method))

    def __repr__(self) -> str:
        return f"SingleMethodInterceptor({self.interceptor!r}, {self.method.qualified_name})"


InvocationHandler = Callable[[Any, MethodId, list[Any]], Any]


class InvocationHandlerInterceptor:
    """Adapts a ``handler(proxy, method, arguments)`` callable to an interceptor.

    The handler replaces the call entirely; it is never given a way to
    proceed.
    """

    def __init__(self, handler: InvocationHandler) -> None:
        self.handler = handler

    def intercept(self, invocation: Invocation) -> Any:
        return self.handler(invocation.target, invocation.method, invocation.arguments)

    def __repr__(self) -> str:
        return f"InvocationHandlerInterceptor({self.handler!r})"
