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
"""Test fixtures for code that creates proxies."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from flyproxy import proxy
from flyproxy.engine.configuration import Engine
from flyproxy.interception.invocation import Invocation

ALL_ENGINES: tuple[Engine, ...] = tuple(Engine)


@contextmanager
def engine_scope(engine: Engine | str) -> Iterator[Engine]:
    """Select *engine* for the default factory within the block.

    The previous selection is restored and the engine cache cleared on
    exit, so every scope starts from fresh engines::

        with engine_scope(Engine.HANDLER):
            numbers = proxy.intercept([], size10)
    """
    factory = proxy.default_factory()
    previous = factory.current_engine()
    factory.clear_cache()
    factory.set_engine(engine)
    try:
        yield factory.current_engine()
    finally:
        factory.set_engine(previous)
        factory.clear_cache()


class RecordingInterceptor:
    """Records every call it sees, then proceeds.

    ``calls`` holds ``(method_name, arguments)`` pairs in call order.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    @property
    def method_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def intercept(self, invocation: Invocation) -> Any:
        self.calls.append((invocation.method_name, tuple(invocation.arguments)))
        return invocation.proceed()
