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
"""Bean support — accessor naming rules and an in-memory property store.

Accessors follow either naming style::

    get_name / is_male  ->  set_name / set_male
    getName  / isMale   ->  setName  / setMale
"""

from __future__ import annotations

import threading
import typing
from typing import Any

from flyproxy.interception.invocation import Invocation

GETTER_PREFIXES: tuple[str, ...] = ("get", "is")
SETTER_PREFIX = "set"

# Getter results before the first set; everything else starts as None.
_PRIMITIVE_DEFAULTS: dict[Any, Any] = {int: 0, float: 0.0, bool: False, complex: 0j}


def _strip_prefix(name: str, prefix: str) -> str | None:
    if not name.startswith(prefix) or len(name) == len(prefix):
        return None
    rest = name[len(prefix) :]
    if rest[0] == "_" or rest[0].isupper():
        return rest
    return None


def setter_name_for(getter_name: str) -> str | None:
    """``get_name`` -> ``set_name``; ``None`` when not an accessor name."""
    for prefix in GETTER_PREFIXES:
        rest = _strip_prefix(getter_name, prefix)
        if rest is not None:
            return SETTER_PREFIX + rest
    return None


def is_getter_name(name: str) -> bool:
    return setter_name_for(name) is not None


def property_key(accessor_name: str) -> str | None:
    """Property an accessor reads or writes: ``get_name``/``setName`` -> ``name``."""
    for prefix in (*GETTER_PREFIXES, SETTER_PREFIX):
        rest = _strip_prefix(accessor_name, prefix)
        if rest is not None:
            rest = rest.lstrip("_")
            return rest[:1].lower() + rest[1:] if rest else None
    return None


def default_for(declaring_type: type | None, getter_name: str) -> Any:
    """Initial value of a property, from the getter's return annotation."""
    if declaring_type is None:
        return None
    getter = getattr(declaring_type, getter_name, None)
    if getter is None:
        return None
    try:
        hints = typing.get_type_hints(getter)
    except Exception:
        # Unresolvable forward references leave the property untyped.
        return None
    return _PRIMITIVE_DEFAULTS.get(hints.get("return"))


class BeanInterceptor:
    """Answers getters and setters from an in-memory property map.

    Setters store their single argument; getters return the stored value or
    the type default of their return annotation. Other calls proceed.
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._lock = threading.Lock()

    @property
    def values(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._values)

    def intercept(self, invocation: Invocation) -> Any:
        name = invocation.method_name
        key = property_key(name)
        if key is None or invocation.keywords:
            return invocation.proceed()

        if name.startswith(SETTER_PREFIX) and len(invocation.arguments) == 1:
            with self._lock:
                self._values[key] = invocation.arguments[0]
            return None

        if is_getter_name(name) and not invocation.arguments:
            with self._lock:
                if key in self._values:
                    return self._values[key]
            return default_for(invocation.method.declaring_type, name)

        return invocation.proceed()

    def __repr__(self) -> str:
        return f"BeanInterceptor(properties={sorted(self._values)})"
