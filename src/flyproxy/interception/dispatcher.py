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
"""Dispatcher — owns one proxy's interceptor stack and runs it per call.

Every routed method of a synthesized proxy type calls
:meth:`Dispatcher.dispatch`. The dispatcher:

1. answers the three management methods itself, and ``__ne__`` as the
   negation of a dispatched ``__eq__``;
2. snapshots the stack, so interceptors added or removed during a call only
   affect later calls;
3. hands the first interceptor an :class:`Invocation` whose
   ``remaining_chain`` is the rest of the snapshot;
4. when the chain is exhausted, answers identity methods structurally,
   forwards to the wrapped instance if there is one, and otherwise asks the
   engine's proceed target (the inherited implementation, or a failure).
"""

from __future__ import annotations

import dataclasses
import threading
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

import structlog

from flyproxy.interception.interceptor import (
    ADD_INTERCEPTOR,
    GET_INTERCEPTOR_LIST,
    REMOVE_INTERCEPTOR,
    invoke_interceptor,
)
from flyproxy.interception.invocation import Invocation
from flyproxy.interception.method import MethodId
from flyproxy.kernel.exceptions import NoImplementationException, UnsupportedProxyOperationException
from flyproxy.kernel.types import DispatchOutcome, FailureKind

logger = structlog.get_logger("flyproxy.interception.dispatcher")

DISPATCHER_ATTR = "__flyproxy_dispatcher__"

_NOTHING = object()


class ProceedTarget(Protocol):
    """What ``proceed()`` reaches once no interceptors remain."""

    def __call__(self, proxy: Any, method: MethodId, arguments: list[Any], keywords: dict[str, Any]) -> Any: ...


def no_implementation(proxy: Any, method: MethodId, arguments: list[Any], keywords: dict[str, Any]) -> Any:
    """Proceed target for proxies with nothing behind the chain."""
    raise NoImplementationException(
        f"No implementation reachable for {method.qualified_name} on {type(proxy).__qualname__}; "
        "add an interceptor that answers it",
        code="NO_IMPLEMENTATION",
        context={"method": method.name},
    )


def structural_identity(proxy: Any, method: MethodId, arguments: Sequence[Any]) -> Any:
    """Reference equality, identity hash and ``module.Type@id`` rendering."""
    name = method.name
    if name == "__eq__":
        return len(arguments) > 0 and proxy is arguments[0]
    if name == "__hash__":
        return object.__hash__(proxy)
    cls = type(proxy)
    return f"{cls.__module__}.{cls.__qualname__}@{id(proxy):x}"


def as_receiver(
    receiver: Any,
    proxy: Any,
    method: MethodId,
    arguments: list[Any],
    keywords: dict[str, Any],
) -> tuple[list[Any], dict[str, Any]]:
    """Arguments for forwarding a call on *proxy* to *receiver*.

    For dunder methods the proxy standing in for *receiver* is replaced by
    *receiver*, so ``proxy == proxy`` compares the receiver with itself
    rather than with the proxy's own, unused storage.
    """
    if not (method.name.startswith("__") and method.name.endswith("__")):
        return arguments, keywords
    return (
        [receiver if arg is proxy else arg for arg in arguments],
        {key: receiver if value is proxy else value for key, value in keywords.items()},
    )


class Dispatcher:
    """Per-proxy interceptor stack and invocation pipeline.

    Args:
        proceed_target: Called when a call runs off the end of the chain
            for a non-identity method.
        wrapped: The existing instance this proxy stands in for, if any.
            Calls that exhaust the chain are forwarded to it directly.
    """

    def __init__(self, proceed_target: ProceedTarget = no_implementation, wrapped: Any = _NOTHING) -> None:
        self._interceptors: list[Any] = []
        self._lock = threading.Lock()
        self._proceed_target = proceed_target
        self._wrapped = wrapped

    @property
    def wraps_instance(self) -> bool:
        return self._wrapped is not _NOTHING

    # ------------------------------------------------------------------
    # Stack management
    # ------------------------------------------------------------------

    def add_interceptor(self, interceptor: Any) -> None:
        if interceptor is None:
            raise TypeError("interceptor must not be None")
        with self._lock:
            self._interceptors.insert(0, interceptor)
            depth = len(self._interceptors)
        logger.debug("interceptor_added", interceptor=type(interceptor).__qualname__, depth=depth)

    def remove_interceptor(self, interceptor: Any) -> None:
        with self._lock:
            try:
                self._interceptors.remove(interceptor)
            except ValueError:
                return
            depth = len(self._interceptors)
        logger.debug("interceptor_removed", interceptor=type(interceptor).__qualname__, depth=depth)

    def get_interceptor_list(self) -> list[Any]:
        with self._lock:
            return list(self._interceptors)

    def snapshot(self) -> tuple[Any, ...]:
        with self._lock:
            return tuple(self._interceptors)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def dispatch(
        self,
        proxy: Any,
        method: MethodId,
        args: Sequence[Any] = (),
        kwargs: Mapping[str, Any] | None = None,
    ) -> Any:
        """Run one call on *proxy* through the current interceptor stack."""
        if method.signature_equals(ADD_INTERCEPTOR):
            return self.add_interceptor(*args, **(kwargs or {}))
        if method.signature_equals(REMOVE_INTERCEPTOR):
            return self.remove_interceptor(*args, **(kwargs or {}))
        if method.signature_equals(GET_INTERCEPTOR_LIST):
            return self.get_interceptor_list()

        if method.name == "__ne__":
            # Always the inverse of whatever answers __eq__.
            equal = self.dispatch(proxy, dataclasses.replace(method, name="__eq__"), args, kwargs)
            return equal if equal is NotImplemented else not equal

        chain = self.snapshot()
        return self.proceed(proxy, method, list(args), dict(kwargs or {}), chain)

    def try_dispatch(
        self,
        proxy: Any,
        method: MethodId,
        args: Sequence[Any] = (),
        kwargs: Mapping[str, Any] | None = None,
    ) -> DispatchOutcome:
        """Like :meth:`dispatch`, but report failures as a DispatchOutcome."""
        try:
            return DispatchOutcome(value=self.dispatch(proxy, method, args, kwargs))
        except UnsupportedProxyOperationException as exc:
            return DispatchOutcome(error=exc, kind=FailureKind.UNSUPPORTED)
        except Exception as exc:
            return DispatchOutcome(error=exc, kind=FailureKind.INTERCEPTOR)

    def proceed(
        self,
        proxy: Any,
        method: MethodId,
        arguments: list[Any],
        keywords: dict[str, Any],
        chain: Sequence[Any],
    ) -> Any:
        """Run *chain* for one call; the end of the chain completes the call."""
        if not chain:
            return self._complete(proxy, method, arguments, keywords)
        invocation = Invocation(self, proxy, method, arguments, keywords, chain[1:])
        return invoke_interceptor(chain[0], invocation)

    def _complete(self, proxy: Any, method: MethodId, arguments: list[Any], keywords: dict[str, Any]) -> Any:
        if method.is_identity:
            return structural_identity(proxy, method, arguments)
        if self._wrapped is not _NOTHING:
            original = getattr(self._wrapped, method.name, None)
            if original is not None:
                arguments, keywords = as_receiver(self._wrapped, proxy, method, arguments, keywords)
                return original(*arguments, **keywords)
        return self._proceed_target(proxy, method, arguments, keywords)

    def __repr__(self) -> str:
        return f"Dispatcher(interceptors={len(self._interceptors)}, wraps_instance={self.wraps_instance})"


def dispatcher_of(proxy: Any) -> Dispatcher:
    """Return the dispatcher behind a synthesized proxy."""
    dispatcher = getattr(type(proxy), DISPATCHER_ATTR, None)
    if not isinstance(dispatcher, Dispatcher):
        raise TypeError(f"{type(proxy).__qualname__} is not a flyproxy proxy")
    return dispatcher


def is_proxy(obj: Any) -> bool:
    return isinstance(getattr(type(obj), DISPATCHER_ATTR, None), Dispatcher)
