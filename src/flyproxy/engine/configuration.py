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
"""Engine selection — which engine new proxies are created with.

The default comes from configuration (``flyproxy.engine``, overridable with
the ``FLYPROXY_ENGINE`` environment variable) and is read once, on first
use. Unknown configured names fall back to the default engine with a
warning; programmatic selection of an unknown engine is an error.
"""

from __future__ import annotations

import enum
from pathlib import Path

import structlog

from flyproxy.core.config import Config
from flyproxy.core.settings import ProxySettings
from flyproxy.kernel.exceptions import ConfigurationException

logger = structlog.get_logger("flyproxy.engine.configuration")


class Engine(enum.Enum):
    """Available proxy engines."""

    SUBCLASS = "subclass"
    HANDLER = "handler"

    @classmethod
    def default(cls) -> Engine:
        return cls.SUBCLASS

    @classmethod
    def from_name(cls, name: str | None) -> Engine:
        """Resolve a configured engine name, case-insensitively.

        Empty or unknown names resolve to :meth:`default`; unknown ones are
        logged.
        """
        if name is None or not name.strip():
            return cls.default()
        try:
            return cls(name.strip().lower())
        except ValueError:
            logger.warning(
                "unknown_engine_configured",
                engine=name,
                fallback=cls.default().value,
                available=[engine.value for engine in cls],
            )
            return cls.default()

    @classmethod
    def parse(cls, engine: Engine | str | None) -> Engine:
        """Strict resolution for programmatic selection.

        Raises:
            ConfigurationException: *engine* is ``None`` or not a known name.
        """
        if isinstance(engine, Engine):
            return engine
        if engine is None:
            raise ConfigurationException("Engine must not be None", code="ENGINE_REQUIRED")
        try:
            return cls(str(engine).strip().lower())
        except ValueError:
            raise ConfigurationException(
                f"Unknown proxy engine '{engine}'. Available engines: {', '.join(e.value for e in cls)}",
                code="UNKNOWN_ENGINE",
                context={"engine": str(engine)},
            ) from None


class ProxyConfiguration:
    """Holds the current engine selection.

    Args:
        config: Source of ``flyproxy.engine``. Defaults to
            ``Config.from_sources(Path.cwd())`` on first use.
    """

    def __init__(self, config: Config | None = None) -> None:
        self._config = config
        self._default: Engine | None = None
        self._engine: Engine | None = None

    def configured_engine(self) -> Engine:
        """Engine named by the configuration, ignoring programmatic selection.

        Resolved on first call and remembered.
        """
        if self._default is None:
            config = self._config if self._config is not None else Config.from_sources(Path.cwd())
            self._default = Engine.from_name(config.bind(ProxySettings).engine)
        return self._default

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = self.configured_engine()
            logger.debug("engine_resolved", engine=self._engine.value)
        return self._engine

    def set_engine(self, engine: Engine | str | None) -> None:
        """Select the engine for subsequently created proxies."""
        selected = Engine.parse(engine)
        self._engine = selected
        logger.info("engine_selected", engine=selected.value)

    def reset(self) -> None:
        """Restore the configured engine resolved on first use."""
        self._engine = self.configured_engine()
        logger.debug("engine_reset", engine=self._engine.value)

    def __repr__(self) -> str:
        current = self._engine.value if self._engine is not None else "<unresolved>"
        return f"ProxyConfiguration(engine={current})"
