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
"""Handler engine — every routed method goes through one handler object.

Proxies from this engine never hold a reference to the methods they
override, so ``proceed()`` past the last interceptor of a concrete method
fails with :class:`~flyproxy.kernel.exceptions.EngineLimitationException`
instead of running it. Interceptors that answer calls themselves, and
object proxies, which forward to the wrapped object, work as with the
subclass engine.

Fallbacks can be registered per method name to answer such calls anyway::

    engine = HandlerProxyEngine(fallbacks={"__len__": lambda proxy, method, args, kw: 0})
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flyproxy.engine.base import ProxyEngine
from flyproxy.engine.introspection import RoutedMethod
from flyproxy.engine.synthesis import DescriptorSynthesizer, TypeSynthesizer
from flyproxy.interception.dispatcher import ProceedTarget, no_implementation
from flyproxy.interception.method import MethodId
from flyproxy.kernel.exceptions import EngineLimitationException


class EngineLimitationTarget:
    """Fails every call that would need the overridden implementation."""

    def __init__(
        self,
        engine: str,
        concrete: frozenset[str],
        fallbacks: Mapping[str, ProceedTarget] | None = None,
        suggestion: str = "subclass",
    ) -> None:
        self._engine = engine
        self._concrete = concrete
        self._fallbacks = dict(fallbacks or {})
        self._suggestion = suggestion

    def __call__(self, proxy: Any, method: MethodId, arguments: list[Any], keywords: dict[str, Any]) -> Any:
        fallback = self._fallbacks.get(method.name)
        if fallback is not None:
            return fallback(proxy, method, arguments, keywords)
        if method.name in self._concrete:
            raise EngineLimitationException(self._engine, method.name, self._suggestion)
        return no_implementation(proxy, method, arguments, keywords)


class HandlerProxyEngine(ProxyEngine):
    """Capability-limited engine: no ``proceed()`` into inherited methods."""

    name = "handler"

    def __init__(
        self,
        synthesizer: TypeSynthesizer | None = None,
        fallbacks: Mapping[str, ProceedTarget] | None = None,
    ) -> None:
        super().__init__(synthesizer or DescriptorSynthesizer())
        self._fallbacks = dict(fallbacks or {})

    def proceed_target(self, methods: Mapping[str, RoutedMethod]) -> ProceedTarget:
        concrete = frozenset(name for name, routed in methods.items() if routed.concrete)
        return EngineLimitationTarget(self.name, concrete, self._fallbacks)
