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
"""Dispatch result types.

``Dispatcher.try_dispatch`` reports failures as values so callers can
branch on the failure kind without relying on exception typing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FailureKind(Enum):
    """Classifies why a dispatched call did not produce a value."""

    UNSUPPORTED = "UNSUPPORTED"
    INTERCEPTOR = "INTERCEPTOR"


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of one dispatched call: a value or a classified failure."""

    value: Any = None
    error: BaseException | None = None
    kind: FailureKind | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the value, or raise the captured error."""
        if self.error is not None:
            raise self.error
        return self.value

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dict; failures carry the kind and message only."""
        if self.ok:
            return {"ok": True, "value": self.value}
        assert self.kind is not None
        return {"ok": False, "kind": self.kind.value, "error": str(self.error)}
