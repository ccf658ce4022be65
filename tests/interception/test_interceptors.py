"""Tests for Invocation, the Interceptor contract and the interceptor adapters."""

from flyproxy.interception.dispatcher import Dispatcher
from flyproxy.interception.interceptor import (
    Interceptor,
    InvocationHandlerInterceptor,
    SingleMethodInterceptor,
    invoke_interceptor,
)
from flyproxy.interception.invocation import Invocation
from flyproxy.interception.method import MethodId

SIZE = MethodId("size", (), None)
ADD = MethodId("add", ("item",), None)


class Target:
    pass


def ten(invocation):
    return 10


class TestInvocation:
    def test_accessors(self):
        target = Target()
        seen: list[Invocation] = []

        def capture(invocation):
            seen.append(invocation)
            return None

        dispatcher = Dispatcher()
        dispatcher.add_interceptor(capture)
        dispatcher.dispatch(target, ADD, ("x",), {"at": 0})
        invocation = seen[0]
        assert invocation.target is target
        assert invocation.method is ADD
        assert invocation.method_name == "add"
        assert invocation.arguments == ["x"]
        assert invocation.keywords == {"at": 0}
        assert invocation.remaining_chain == ()

    def test_argument_out_of_range_is_none(self):
        invocation = Invocation(Dispatcher(), Target(), ADD, ["x"], {}, ())
        assert invocation.argument(0) == "x"
        assert invocation.argument(1) is None

    def test_remaining_chain_excludes_current(self):
        lengths: list[int] = []

        def record(invocation):
            lengths.append(len(invocation.remaining_chain))
            return invocation.proceed()

        dispatcher = Dispatcher(lambda proxy, method, args, kw: None)
        dispatcher.add_interceptor(record)
        dispatcher.add_interceptor(record)
        dispatcher.dispatch(Target(), SIZE)
        assert lengths == [1, 0]


class TestInterceptorContract:
    def test_objects_with_intercept_conform(self):
        class Empty:
            def intercept(self, invocation):
                return invocation.proceed()

        assert isinstance(Empty(), Interceptor)

    def test_plain_callables_are_invoked_directly(self):
        invocation = Invocation(Dispatcher(), Target(), SIZE, [], {}, ())
        assert invoke_interceptor(ten, invocation) == 10


class TestSingleMethodInterceptor:
    def test_filters_by_method(self):
        dispatcher = Dispatcher(lambda proxy, method, args, kw: "original")
        dispatcher.add_interceptor(SingleMethodInterceptor(ten, "size"))
        assert dispatcher.dispatch(Target(), SIZE) == 10
        assert dispatcher.dispatch(Target(), ADD, ("x",)) == "original"

    def test_matches_on_arity_when_known(self):
        dispatcher = Dispatcher(lambda proxy, method, args, kw: "original")
        dispatcher.add_interceptor(SingleMethodInterceptor(ten, MethodId("add", ("a", "b"))))
        assert dispatcher.dispatch(Target(), ADD, ("x",)) == "original"

    def test_accepts_callables_as_method(self):
        interceptor = SingleMethodInterceptor(ten, list.append)
        assert interceptor.method.name == "append"

    def test_equality(self):
        assert SingleMethodInterceptor(ten, "size") == SingleMethodInterceptor(ten, "size")
        assert SingleMethodInterceptor(ten, "size") != SingleMethodInterceptor(ten, "add")

    def test_removable_by_equal_value(self):
        dispatcher = Dispatcher()
        dispatcher.add_interceptor(SingleMethodInterceptor(ten, "size"))
        dispatcher.remove_interceptor(SingleMethodInterceptor(ten, "size"))
        assert dispatcher.get_interceptor_list() == []


class TestInvocationHandlerInterceptor:
    def test_handler_replaces_the_call(self):
        def handler(proxy, method, arguments):
            return f"{method.name}{arguments[0]}"

        dispatcher = Dispatcher()
        dispatcher.add_interceptor(InvocationHandlerInterceptor(handler))
        assert dispatcher.dispatch(Target(), MethodId("get", ("index",)), (5,)) == "get5"
        assert dispatcher.dispatch(Target(), MethodId("remove", ("index",)), (0,)) == "remove0"
