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
"""ProxyEngine — the six proxy creation operations, shared by every engine.

An engine plans a proxy type from the requested bases, attaches a fresh
:class:`~flyproxy.interception.dispatcher.Dispatcher` to it, lets its
:class:`~flyproxy.engine.synthesis.TypeSynthesizer` define the type and
instantiates it. Subclasses decide what ``proceed()`` reaches once the
interceptor chain is exhausted.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any

import structlog

from flyproxy.engine.introspection import (
    INTERFACES_ATTR,
    TARGET_CLASS_ATTR,
    RoutedMethod,
    bean_setter_stubs,
    discover_methods,
    management_methods,
    unwrap_proxy_type,
    validate_interfaces,
)
from flyproxy.engine.synthesis import TypeSynthesizer, match_constructor
from flyproxy.interception.delegation import InterceptorDelegator
from flyproxy.interception.dispatcher import DISPATCHER_ATTR, Dispatcher, ProceedTarget, is_proxy
from flyproxy.interception.interceptor import InterceptableProxy
from flyproxy.kernel.exceptions import InvalidProxyRequestException, ProxyException

logger = structlog.get_logger("flyproxy.engine")

_NOTHING = object()


class ProxyEngine(ABC):
    """Creates proxies of interfaces, classes and existing objects.

    Every proxy returned is an :class:`InterceptableProxy` with an empty
    interceptor stack, except object proxies, whose stack starts with a
    delegator to the wrapped object.
    """

    name: str = ""

    def __init__(self, synthesizer: TypeSynthesizer) -> None:
        self._synthesizer = synthesizer

    @property
    def engine_name(self) -> str:
        return self.name

    @abstractmethod
    def proceed_target(self, methods: Mapping[str, RoutedMethod]) -> ProceedTarget:
        """What ``proceed()`` reaches after the last interceptor of a proxy."""

    # ------------------------------------------------------------------
    # Creation operations
    # ------------------------------------------------------------------

    def create_interface_proxy(self, *interfaces: type) -> Any:
        """Proxy implementing *interfaces* with no implementation behind it."""
        with self._creating("interface proxy"):
            proxy_type = self._define(None, validate_interfaces(interfaces))
            return self._synthesizer.instantiate(proxy_type)

    def create_interface_bean_proxy(self, interface: type) -> Any:
        """Like :meth:`create_interface_proxy`, plus a setter stub per getter."""
        with self._creating("interface bean proxy"):
            proxy_type = self._define(None, validate_interfaces((interface,)), bean_type=interface)
            return self._synthesizer.instantiate(proxy_type)

    def create_class_proxy(self, superclass: type, *interfaces: type) -> Any:
        """Proxy subclassing *superclass*, created without running its constructor
        unless the constructor takes no arguments."""
        with self._creating("class proxy"):
            base, inherited = self._resolve_base(superclass)
            proxy_type = self._define(base, validate_interfaces((*inherited, *interfaces), base))
            return self._synthesizer.instantiate(proxy_type)

    def create_class_proxy_with_arguments(self, superclass: type, *args: Any, **kwargs: Any) -> Any:
        """Proxy subclassing *superclass*, constructed with *args* and *kwargs*.

        Raises:
            ConstructorNotFoundException: *superclass* cannot be constructed
                from the given values.
        """
        with self._creating("class proxy"):
            base, inherited = self._resolve_base(superclass)
            match_constructor(base, args, kwargs)
            proxy_type = self._define(base, validate_interfaces(inherited, base))
            return self._synthesizer.instantiate(proxy_type, args, kwargs)

    def create_class_bean_proxy(self, superclass: type, *interfaces: type) -> Any:
        """Class proxy with a setter stub for every getter lacking one."""
        with self._creating("class bean proxy"):
            base, inherited = self._resolve_base(superclass)
            proxy_type = self._define(base, validate_interfaces((*inherited, *interfaces), base), bean_type=base)
            return self._synthesizer.instantiate(proxy_type)

    def create_object_proxy_if_needed(self, obj: Any, *interfaces: type) -> Any:
        """Return *obj* when it is a proxy implementing *interfaces*, else wrap it.

        A new proxy extends the class of *obj* (the original class when *obj*
        is itself a proxy), implements every requested interface plus those
        an existing proxy already had, and answers calls from *obj* unless
        an interceptor does. The class constructor never runs again.
        """
        with self._creating("object proxy"):
            wanted = validate_interfaces(interfaces)
            if is_proxy(obj) and all(interface in type(obj).__mro__ for interface in wanted):
                return obj

            base, inherited = unwrap_proxy_type(type(obj))
            proxy_type = self._define(base, validate_interfaces((*inherited, *wanted), base), wrapped=obj)
            proxy = self._synthesizer.instantiate(proxy_type, construct=False)
            proxy.add_interceptor(InterceptorDelegator(obj))
            return proxy

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_base(superclass: Any) -> tuple[type, tuple[type, ...]]:
        if not isinstance(superclass, type):
            raise ProxyException(f"{superclass!r} is not a class and cannot be proxied")
        return unwrap_proxy_type(superclass)

    def _define(
        self,
        base: type | None,
        interfaces: Sequence[type],
        *,
        bean_type: type | None = None,
        wrapped: Any = _NOTHING,
    ) -> type:
        bases: list[type] = []
        if base is not None and base is not object:
            bases.append(base)
        bases.extend(interfaces)
        bases.append(InterceptableProxy)

        methods = discover_methods(bases, base)
        if bean_type is not None:
            methods.update(bean_setter_stubs(methods, bean_type))
        methods.update(management_methods())

        if wrapped is _NOTHING:
            dispatcher = Dispatcher(self.proceed_target(methods))
        else:
            dispatcher = Dispatcher(self.proceed_target(methods), wrapped=wrapped)
        proxy_type = self._synthesizer.define_type(
            bases,
            methods,
            dispatcher.dispatch,
            attributes={
                DISPATCHER_ATTR: dispatcher,
                TARGET_CLASS_ATTR: base,
                INTERFACES_ATTR: tuple(interfaces),
            },
        )
        logger.debug(
            "proxy_type_defined",
            engine=self.name,
            proxy_type=proxy_type,
            routed=len(methods),
            bean=bean_type is not None,
        )
        return proxy_type

    @contextmanager
    def _creating(self, kind: str) -> Iterator[None]:
        try:
            yield
        except (ProxyException, InvalidProxyRequestException):
            raise
        except Exception as exc:
            raise ProxyException(
                f"Failed to create {kind} with the {self.name} engine: {exc}",
                code="PROXY_CREATION_FAILED",
                context={"engine": self.name, "kind": kind},
            ) from exc

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
