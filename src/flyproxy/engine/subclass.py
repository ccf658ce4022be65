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
"""Subclass engine — routed methods can proceed to the inherited implementation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flyproxy.engine.base import ProxyEngine
from flyproxy.engine.introspection import RoutedMethod
from flyproxy.engine.synthesis import FunctionSynthesizer, TypeSynthesizer
from flyproxy.interception.dispatcher import ProceedTarget, no_implementation
from flyproxy.interception.method import MethodId


class OriginalMethodTarget:
    """Calls the implementation the proxy type overrides, bound to the proxy."""

    def __init__(self, methods: Mapping[str, RoutedMethod]) -> None:
        self._implementations = {name: routed.implementation for name, routed in methods.items() if routed.concrete}

    def __call__(self, proxy: Any, method: MethodId, arguments: list[Any], keywords: dict[str, Any]) -> Any:
        implementation = self._implementations.get(method.name)
        if implementation is None:
            return no_implementation(proxy, method, arguments, keywords)
        return implementation.__get__(proxy, type(proxy))(*arguments, **keywords)

    def __repr__(self) -> str:
        return f"OriginalMethodTarget(methods={sorted(self._implementations)})"


class SubclassProxyEngine(ProxyEngine):
    """Full-capability engine; the default."""

    name = "subclass"

    def __init__(self, synthesizer: TypeSynthesizer | None = None) -> None:
        super().__init__(synthesizer or FunctionSynthesizer())

    def proceed_target(self, methods: Mapping[str, RoutedMethod]) -> ProceedTarget:
        return OriginalMethodTarget(methods)
