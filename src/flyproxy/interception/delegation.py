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
"""Delegating interceptor — answer calls from another object when it can."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

from flyproxy.interception.dispatcher import as_receiver, is_proxy
from flyproxy.interception.invocation import Invocation
from flyproxy.interception.method import MethodId


def find_implementation(
    target: Any,
    method: MethodId,
    arguments: list[Any],
    keywords: dict[str, Any],
) -> Callable[..., Any] | None:
    """Return *target*'s bound method able to take the call, or ``None``.

    A method only inherited from :class:`object` does not count, and a
    proxy target never answers identity methods; both defer to the chain.
    """
    declared = getattr(type(target), method.name, None)
    if declared is None or not callable(declared):
        return None
    if declared is getattr(object, method.name, None):
        return None
    if method.is_identity and is_proxy(target):
        return None

    bound = getattr(target, method.name)
    try:
        inspect.signature(bound).bind(*arguments, **keywords)
    except ValueError:
        # No introspectable signature (some C builtins): the name decides.
        return bound
    except TypeError:
        return None
    return bound


class InterceptorDelegator:
    """Forwards every call *target* can answer; proceeds otherwise.

    Pushing one of these onto a proxy composes the proxy with *target*,
    e.g. a list proxy that also answers a bean's getters::

        proxy.add_interceptor(InterceptorDelegator(person))
    """

    def __init__(self, target: Any) -> None:
        self.target = target

    def intercept(self, invocation: Invocation) -> Any:
        arguments, keywords = as_receiver(
            self.target, invocation.target, invocation.method, invocation.arguments, invocation.keywords
        )
        implementation = find_implementation(self.target, invocation.method, arguments, keywords)
        if implementation is None:
            return invocation.proceed()
        return implementation(*arguments, **keywords)

    def __repr__(self) -> str:
        return f"InterceptorDelegator({type(self.target).__qualname__})"


def delegating_interceptor(target: Any) -> InterceptorDelegator:
    """Build an interceptor forwarding matching calls to *target*."""
    return InterceptorDelegator(target)
