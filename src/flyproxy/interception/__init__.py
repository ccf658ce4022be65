"""flyproxy interception — interceptor contract, dispatch pipeline and stock interceptors."""

from flyproxy.interception.bean import BeanInterceptor, is_getter_name, property_key, setter_name_for
from flyproxy.interception.delegation import InterceptorDelegator, delegating_interceptor, find_implementation
from flyproxy.interception.dispatcher import (
    DISPATCHER_ATTR,
    Dispatcher,
    ProceedTarget,
    dispatcher_of,
    is_proxy,
    no_implementation,
    structural_identity,
)
from flyproxy.interception.interceptor import (
    ADD_INTERCEPTOR,
    GET_INTERCEPTOR_LIST,
    MANAGEMENT_METHODS,
    REMOVE_INTERCEPTOR,
    InterceptableProxy,
    Interceptor,
    InvocationHandler,
    InvocationHandlerInterceptor,
    SingleMethodInterceptor,
    invoke_interceptor,
)
from flyproxy.interception.invocation import Invocation
from flyproxy.interception.method import IDENTITY_METHODS, MethodId
from flyproxy.interception.timing import TimerInterceptor

__all__ = [
    # Contract
    "Interceptor",
    "InterceptableProxy",
    "Invocation",
    "MethodId",
    "IDENTITY_METHODS",
    "invoke_interceptor",
    # Management methods
    "ADD_INTERCEPTOR",
    "REMOVE_INTERCEPTOR",
    "GET_INTERCEPTOR_LIST",
    "MANAGEMENT_METHODS",
    # Dispatch
    "DISPATCHER_ATTR",
    "Dispatcher",
    "ProceedTarget",
    "dispatcher_of",
    "is_proxy",
    "no_implementation",
    "structural_identity",
    # Stock interceptors
    "BeanInterceptor",
    "InterceptorDelegator",
    "InvocationHandler",
    "InvocationHandlerInterceptor",
    "SingleMethodInterceptor",
    "TimerInterceptor",
    "delegating_interceptor",
    "find_implementation",
    # Bean naming
    "is_getter_name",
    "property_key",
    "setter_name_for",
]
