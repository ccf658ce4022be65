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
"""Invocation — the per-call record handed to each interceptor."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from flyproxy.interception.method import MethodId

if TYPE_CHECKING:
    from flyproxy.interception.dispatcher import Dispatcher


class Invocation:
    """One intercepted call, positioned somewhere in the interceptor chain.

    Attributes:
        target: The proxy the call was made on.
        method: Identity of the called method.
        arguments: Positional arguments. Mutable; interceptors may rewrite
            entries before calling :meth:`proceed`, and every later
            interceptor (and the original method) sees the rewrite.
        keywords: Keyword arguments, shared the same way.
        remaining_chain: Interceptors that :meth:`proceed` will run next.

    An Invocation lives for a single call and must not be retained.
    """

    __slots__ = ("_dispatcher", "_target", "_method", "arguments", "keywords", "_remaining")

    def __init__(
        self,
        dispatcher: Dispatcher,
        target: Any,
        method: MethodId,
        arguments: list[Any],
        keywords: dict[str, Any],
        remaining_chain: Sequence[Any],
    ) -> None:
        self._dispatcher = dispatcher
        self._target = target
        self._method = method
        self.arguments = arguments
        self.keywords = keywords
        self._remaining = tuple(remaining_chain)

    @property
    def target(self) -> Any:
        return self._target

    @property
    def method(self) -> MethodId:
        return self._method

    @property
    def method_name(self) -> str:
        return self._method.name

    @property
    def remaining_chain(self) -> tuple[Any, ...]:
        return self._remaining

    def argument(self, index: int) -> Any:
        """Return the positional argument at *index*, or ``None`` if absent."""
        if -len(self.arguments) <= index < len(self.arguments):
            return self.arguments[index]
        return None

    def proceed(self) -> Any:
        """Run the rest of the chain, then the inherited implementation.

        May be called any number of times; each call re-runs the remaining
        chain with the current ``arguments`` and ``keywords``.
        """
        return self._dispatcher.proceed(self._target, self._method, self.arguments, self.keywords, self._remaining)

    def __repr__(self) -> str:
        return (
            f"Invocation(method={self._method.qualified_name}, arguments={self.arguments!r}, "
            f"remaining={len(self._remaining)})"
        )
