"""Tests for bean accessor naming and the in-memory BeanInterceptor."""

from abc import ABC, abstractmethod

import pytest

from flyproxy.interception.bean import BeanInterceptor, default_for, is_getter_name, property_key, setter_name_for
from flyproxy.interception.dispatcher import Dispatcher
from flyproxy.interception.method import MethodId


class PersonBean(ABC):
    @abstractmethod
    def get_name(self) -> str: ...

    @abstractmethod
    def get_age(self) -> int: ...

    @abstractmethod
    def is_male(self) -> bool: ...

    @abstractmethod
    def getHeight(self) -> float: ...


class Target:
    pass


def call(dispatcher, name, *args, params=None):
    method = MethodId(name, params if params is not None else tuple(f"a{i}" for i in range(len(args))), PersonBean)
    return dispatcher.dispatch(Target(), method, args)


class TestAccessorNaming:
    @pytest.mark.parametrize(
        ("getter", "setter"),
        [("get_name", "set_name"), ("is_male", "set_male"), ("getName", "setName"), ("isMale", "setMale")],
    )
    def test_setter_names(self, getter, setter) -> None:
        assert setter_name_for(getter) == setter

    @pytest.mark.parametrize("name", ["get", "getter", "island", "size", "is"])
    def test_non_accessors(self, name) -> None:
        assert setter_name_for(name) is None
        assert not is_getter_name(name)

    def test_property_keys(self) -> None:
        assert property_key("get_name") == "name"
        assert property_key("setName") == "name"
        assert property_key("isMale") == "male"
        assert property_key("size") is None


class TestDefaults:
    def test_primitive_defaults_from_annotations(self) -> None:
        assert default_for(PersonBean, "get_age") == 0
        assert default_for(PersonBean, "is_male") is False
        assert default_for(PersonBean, "getHeight") == 0.0

    def test_other_types_default_to_none(self) -> None:
        assert default_for(PersonBean, "get_name") is None
        assert default_for(None, "get_name") is None


class TestBeanInterceptor:
    def test_round_trip(self) -> None:
        dispatcher = Dispatcher()
        bean = BeanInterceptor()
        dispatcher.add_interceptor(bean)
        assert call(dispatcher, "set_name", "Ada") is None
        assert call(dispatcher, "get_name") == "Ada"
        assert bean.values == {"name": "Ada"}

    def test_getter_before_setter_returns_default(self) -> None:
        dispatcher = Dispatcher()
        dispatcher.add_interceptor(BeanInterceptor())
        assert call(dispatcher, "get_age") == 0
        assert call(dispatcher, "get_name") is None

    def test_camel_case_and_snake_case_share_properties(self) -> None:
        dispatcher = Dispatcher()
        dispatcher.add_interceptor(BeanInterceptor())
        call(dispatcher, "setMale", True)
        assert call(dispatcher, "is_male") is True

    def test_other_methods_proceed(self) -> None:
        dispatcher = Dispatcher(lambda proxy, method, args, kw: "original")
        dispatcher.add_interceptor(BeanInterceptor())
        assert call(dispatcher, "describe") == "original"
        assert call(dispatcher, "set_name", "a", "b") == "original"
