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
"""Typed view of the ``flyproxy`` configuration section."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from flyproxy.core.config import config_properties


class LoggingSettings(BaseModel):
    format: str = "console"
    level: dict[str, str] = Field(default_factory=lambda: {"root": "INFO"})


@config_properties(prefix="flyproxy")
class ProxySettings(BaseModel):
    """Library settings bound from ``flyproxy.*``.

    ``engine`` is kept as the raw configured name; unknown names are
    resolved leniently by :meth:`Engine.from_name`.
    """

    engine: str | None = None
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("engine")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None
