"""flyproxy engines — proxy type synthesis, engine selection and caching."""

from flyproxy.engine.base import ProxyEngine
from flyproxy.engine.configuration import Engine, ProxyConfiguration
from flyproxy.engine.handler import EngineLimitationTarget, HandlerProxyEngine
from flyproxy.engine.introspection import RoutedMethod, discover_methods, interfaces_of, is_interface
from flyproxy.engine.provider import ENGINE_TYPES, ProxyEngineProvider
from flyproxy.engine.subclass import OriginalMethodTarget, SubclassProxyEngine
from flyproxy.engine.synthesis import (
    DescriptorSynthesizer,
    FunctionSynthesizer,
    HandlerMethod,
    TypeSynthesizer,
)

__all__ = [
    # Engines
    "ProxyEngine",
    "SubclassProxyEngine",
    "HandlerProxyEngine",
    "OriginalMethodTarget",
    "EngineLimitationTarget",
    # Selection
    "Engine",
    "ENGINE_TYPES",
    "ProxyConfiguration",
    "ProxyEngineProvider",
    # Synthesis
    "TypeSynthesizer",
    "FunctionSynthesizer",
    "DescriptorSynthesizer",
    "HandlerMethod",
    # Introspection
    "RoutedMethod",
    "discover_methods",
    "interfaces_of",
    "is_interface",
]
