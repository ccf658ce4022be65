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
"""ProxyEngineProvider — one lazily created engine per engine kind."""

from __future__ import annotations

import threading
from collections.abc import Callable

import structlog

from flyproxy.engine.base import ProxyEngine
from flyproxy.engine.configuration import Engine, ProxyConfiguration
from flyproxy.engine.handler import HandlerProxyEngine
from flyproxy.engine.subclass import SubclassProxyEngine
from flyproxy.kernel.exceptions import ProxyException

logger = structlog.get_logger("flyproxy.engine.provider")

ENGINE_TYPES: dict[Engine, Callable[[], ProxyEngine]] = {
    Engine.SUBCLASS: SubclassProxyEngine,
    Engine.HANDLER: HandlerProxyEngine,
}


class ProxyEngineProvider:
    """Caches engines so every proxy of one kind shares an engine instance.

    Engines are created on first request. Concurrent first requests for the
    same kind still create exactly one engine.
    """

    _lock = threading.Lock()

    def __init__(
        self,
        configuration: ProxyConfiguration | None = None,
        engine_types: dict[Engine, Callable[[], ProxyEngine]] | None = None,
    ) -> None:
        self.configuration = configuration or ProxyConfiguration()
        self._engine_types = dict(engine_types or ENGINE_TYPES)
        self._engines: dict[Engine, ProxyEngine] = {}

    def get_factory(self, engine: Engine | str) -> ProxyEngine:
        """Return the cached engine for *engine*, creating it on first use."""
        kind = Engine.parse(engine)
        cached = self._engines.get(kind)
        if cached is not None:
            return cached
        with self._lock:
            cached = self._engines.get(kind)
            if cached is None:
                cached = self._create(kind)
                self._engines[kind] = cached
        return cached

    def get_current_factory(self) -> ProxyEngine:
        """Engine for the current selection of :attr:`configuration`."""
        return self.get_factory(self.configuration.engine)

    def clear_cache(self) -> None:
        """Drop all cached engines; the next request creates new ones."""
        with self._lock:
            self._engines.clear()
        logger.debug("engine_cache_cleared")

    def _create(self, kind: Engine) -> ProxyEngine:
        engine_type = self._engine_types.get(kind)
        if engine_type is None:
            raise ProxyException(f"No engine implementation registered for '{kind.value}'", code="ENGINE_MISSING")
        try:
            created = engine_type()
        except Exception as exc:
            raise ProxyException(
                f"Failed to create the {kind.value} proxy engine: {exc}",
                code="ENGINE_CREATION_FAILED",
                context={"engine": kind.value},
            ) from exc
        logger.debug("engine_created", engine=kind.value, engine_type=type(created).__qualname__)
        return created
