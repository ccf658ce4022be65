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
"""User facade — intercept, delegate and bean proxies, plus a fluent builder.

Usage::

    from flyproxy import proxy

    numbers = proxy.intercept([], size10)
    numbers = proxy.with_([]).intercept_all(size10).intercept_all(times_two).get()
    person = proxy.bean(PersonBean)

Module-level functions use a process-wide :class:`ProxyFactory`, created
on first use from the working directory's configuration, or explicitly by
:func:`bootstrap`.
"""

from __future__ import annotations

import threading
from typing import Any, TypeVar

import structlog

from flyproxy.core.config import Config
from flyproxy.engine.base import ProxyEngine
from flyproxy.engine.configuration import Engine, ProxyConfiguration
from flyproxy.engine.introspection import interfaces_of, is_interface
from flyproxy.engine.provider import ProxyEngineProvider
from flyproxy.interception.bean import BeanInterceptor
from flyproxy.interception.delegation import InterceptorDelegator
from flyproxy.interception.dispatcher import is_proxy
from flyproxy.interception.interceptor import InterceptableProxy, SingleMethodInterceptor
from flyproxy.interception.timing import TimerInterceptor
from flyproxy.kernel.exceptions import InvalidProxyRequestException, ProxyException
from flyproxy.logging.port import LoggingPort
from flyproxy.logging.structlog_adapter import StructlogAdapter

T = TypeVar("T")

logger = structlog.get_logger("flyproxy.proxy")


class ProxyFactory:
    """Engine selection plus cached engines; every facade call goes through one.

    Args:
        configuration: Engine selection. A fresh :class:`ProxyConfiguration`
            reading the working directory's configuration when omitted.
    """

    def __init__(self, configuration: ProxyConfiguration | None = None) -> None:
        self.configuration = configuration or ProxyConfiguration()
        self.provider = ProxyEngineProvider(self.configuration)

    @property
    def engine(self) -> ProxyEngine:
        """Engine of the current selection."""
        return self.provider.get_current_factory()

    # -- selection -------------------------------------------------------

    def current_engine(self) -> Engine:
        return self.configuration.engine

    def set_engine(self, engine: Engine | str | None) -> None:
        self.configuration.set_engine(engine)

    def reset_engine(self) -> None:
        self.configuration.reset()

    def get_factory(self, engine: Engine | str) -> ProxyEngine:
        return self.provider.get_factory(engine)

    def clear_cache(self) -> None:
        self.provider.clear_cache()

    # -- proxies ---------------------------------------------------------

    def intercept(self, obj: Any, interceptor: Any, method: Any = None) -> Any:
        """Proxy *obj* if needed and push *interceptor*.

        With *method* the interceptor only sees calls of that method.
        """
        proxy = self.engine.create_object_proxy_if_needed(obj)
        proxy.add_interceptor(interceptor if method is None else SingleMethodInterceptor(interceptor, method))
        return proxy

    def delegate(self, obj: Any, delegate_obj: Any) -> Any:
        """Proxy *obj* so it also implements *delegate_obj*'s interfaces,
        answering every call *delegate_obj* can take from it."""
        proxy = self.engine.create_object_proxy_if_needed(obj, *interfaces_of(delegate_obj))
        proxy.add_interceptor(InterceptorDelegator(delegate_obj))
        return proxy

    def bean(self, type_: type[T]) -> T:
        """Bean proxy of an interface, backed by an in-memory property map.

        Raises:
            InvalidProxyRequestException: *type_* is a concrete class.
        """
        if not isinstance(type_, type) or not is_interface(type_):
            raise InvalidProxyRequestException(
                f"{getattr(type_, '__qualname__', type_)!r} is not an interface or abstract class",
                code="NOT_AN_INTERFACE",
            )
        engine = self.engine
        if _is_pure_interface(type_):
            proxy = engine.create_interface_bean_proxy(type_)
        else:
            proxy = engine.create_class_bean_proxy(type_)
        proxy.add_interceptor(BeanInterceptor())
        return proxy

    def add_timer_to_methods(self, obj: Any, level: str = "info") -> Any:
        """Log the duration of every call on *obj*'s proxy."""
        return self.intercept(obj, TimerInterceptor(level))

    def with_(self, target: Any, *args: Any, **kwargs: Any) -> ProxyBuilder:
        """Start a fluent proxy of a class, an interface or an existing object.

        *args* and *kwargs* construct a class proxy; interfaces and objects
        take none.
        """
        has_arguments = bool(args or kwargs)
        engine = self.engine
        if not isinstance(target, type):
            if has_arguments:
                raise ProxyException(f"An existing {type(target).__qualname__} does not need constructor arguments")
            proxy = engine.create_object_proxy_if_needed(target)
        elif _is_pure_interface(target):
            if has_arguments:
                raise ProxyException(f"{target.__qualname__} does not need constructor arguments")
            proxy = engine.create_interface_proxy(target)
        elif has_arguments:
            proxy = engine.create_class_proxy_with_arguments(target, *args, **kwargs)
        else:
            proxy = engine.create_class_proxy(target)
        return ProxyBuilder(self, proxy)

    @staticmethod
    def interceptable(obj: Any) -> InterceptableProxy:
        """Return *obj* as a manageable proxy.

        Raises:
            ProxyException: *obj* was not created by flyproxy.
        """
        if not is_proxy(obj):
            raise ProxyException(f"{type(obj).__qualname__} instance is not a proxy", code="NOT_A_PROXY")
        return obj

    def __repr__(self) -> str:
        return f"ProxyFactory({self.configuration!r})"


def _is_pure_interface(cls: type) -> bool:
    # A protocol, or an abstract class whose public methods are all abstract.
    if getattr(cls, "_is_protocol", False):
        return True
    if not is_interface(cls):
        return False
    for name in dir(cls):
        if name.startswith("_"):
            continue
        attr = getattr(cls, name, None)
        if callable(attr) and not getattr(attr, "__isabstractmethod__", False):
            return False
    return True


class ProxyBuilder:
    """Fluent configuration of one proxy; interceptors are pushed immediately."""

    def __init__(self, factory: ProxyFactory, proxy: Any) -> None:
        self._factory = factory
        self._proxy = proxy

    def intercept_all(self, interceptor: Any) -> ProxyBuilder:
        self._proxy.add_interceptor(interceptor)
        return self

    def intercept_method(self, interceptor: Any, method: Any) -> ProxyBuilder:
        self._proxy.add_interceptor(SingleMethodInterceptor(interceptor, method))
        return self

    def delegate(self, delegate_obj: Any) -> ProxyBuilder:
        self._proxy = self._factory.delegate(self._proxy, delegate_obj)
        return self

    def get(self) -> Any:
        return self._proxy

    def __repr__(self) -> str:
        return f"ProxyBuilder({type(self._proxy).__qualname__})"


# ---------------------------------------------------------------------------
# Process-wide default
# ---------------------------------------------------------------------------

_default_lock = threading.Lock()
_default_factory: ProxyFactory | None = None


def default_factory() -> ProxyFactory:
    """The factory used by the module-level functions."""
    global _default_factory
    if _default_factory is None:
        with _default_lock:
            if _default_factory is None:
                _default_factory = ProxyFactory()
    return _default_factory


def bootstrap(config: Config, logging_port: LoggingPort | None = None) -> ProxyFactory:
    """Configure logging from *config* and make it the source of engine selection.

    Returns the new default factory.
    """
    global _default_factory
    (logging_port or StructlogAdapter()).configure(config)
    factory = ProxyFactory(ProxyConfiguration(config))
    with _default_lock:
        _default_factory = factory
    logger.info("flyproxy_bootstrapped", engine=factory.current_engine().value, sources=config.loaded_sources)
    return factory


def intercept(obj: Any, interceptor: Any, method: Any = None) -> Any:
    return default_factory().intercept(obj, interceptor, method)


def delegate(obj: Any, delegate_obj: Any) -> Any:
    return default_factory().delegate(obj, delegate_obj)


def bean(type_: type[T]) -> T:
    return default_factory().bean(type_)


def add_timer_to_methods(obj: Any, level: str = "info") -> Any:
    return default_factory().add_timer_to_methods(obj, level)


def with_(target: Any, *args: Any, **kwargs: Any) -> ProxyBuilder:
    return default_factory().with_(target, *args, **kwargs)


def interceptable(obj: Any) -> InterceptableProxy:
    return ProxyFactory.interceptable(obj)


def current_engine() -> Engine:
    return default_factory().current_engine()


def set_engine(engine: Engine | str | None) -> None:
    default_factory().set_engine(engine)


def reset_engine() -> None:
    default_factory().reset_engine()


def get_factory(engine: Engine | str) -> ProxyEngine:
    return default_factory().get_factory(engine)


def clear_cache() -> None:
    default_factory().clear_cache()
