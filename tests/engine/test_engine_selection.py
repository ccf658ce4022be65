"""Tests for engine selection and the engine provider cache."""

import threading
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from flyproxy.core.config import Config
from flyproxy.engine.base import ProxyEngine
from flyproxy.engine.configuration import Engine, ProxyConfiguration
from flyproxy.engine.handler import HandlerProxyEngine
from flyproxy.engine.provider import ProxyEngineProvider
from flyproxy.engine.subclass import SubclassProxyEngine
from flyproxy.kernel.exceptions import ConfigurationException, ProxyException


class TestEngineNames:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("subclass", Engine.SUBCLASS), ("HANDLER", Engine.HANDLER), ("  handler ", Engine.HANDLER)],
    )
    def test_from_name(self, name, expected) -> None:
        assert Engine.from_name(name) is expected

    def test_missing_name_is_default(self) -> None:
        assert Engine.from_name(None) is Engine.SUBCLASS
        assert Engine.from_name("") is Engine.SUBCLASS

    def test_unknown_configured_name_falls_back_with_warning(self) -> None:
        with capture_logs() as logs:
            assert Engine.from_name("metaclass") is Engine.SUBCLASS
        warnings = [entry for entry in logs if entry["log_level"] == "warning"]
        assert warnings[0]["event"] == "unknown_engine_configured"
        assert warnings[0]["engine"] == "metaclass"

    def test_parse_is_strict(self) -> None:
        assert Engine.parse(Engine.HANDLER) is Engine.HANDLER
        assert Engine.parse("handler") is Engine.HANDLER
        with pytest.raises(ConfigurationException):
            Engine.parse(None)
        with pytest.raises(ConfigurationException, match="Unknown proxy engine 'nope'"):
            Engine.parse("nope")


class TestProxyConfiguration:
    def test_default_from_packaged_configuration(self) -> None:
        assert ProxyConfiguration(Config.from_file("missing.yaml")).engine is Engine.SUBCLASS

    def test_configured_engine(self, tmp_path: Path) -> None:
        (tmp_path / "flyproxy.yaml").write_text("flyproxy:\n  engine: handler\n")
        configuration = ProxyConfiguration(Config.from_sources(tmp_path))
        assert configuration.engine is Engine.HANDLER

    def test_env_var_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "flyproxy.yaml").write_text("flyproxy:\n  engine: subclass\n")
        monkeypatch.setenv("FLYPROXY_ENGINE", "handler")
        assert ProxyConfiguration(Config.from_sources(tmp_path)).engine is Engine.HANDLER

    def test_default_is_read_once(self, monkeypatch: pytest.MonkeyPatch) -> None:
        configuration = ProxyConfiguration(Config({}))
        assert configuration.engine is Engine.SUBCLASS
        monkeypatch.setenv("FLYPROXY_ENGINE", "handler")
        assert configuration.engine is Engine.SUBCLASS

    def test_set_and_reset(self) -> None:
        configuration = ProxyConfiguration(Config({"flyproxy": {"engine": "subclass"}}))
        configuration.set_engine("handler")
        assert configuration.engine is Engine.HANDLER
        configuration.reset()
        assert configuration.engine is Engine.SUBCLASS
        configuration.reset()
        assert configuration.engine is Engine.SUBCLASS

    def test_reset_restores_first_resolved_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        configuration = ProxyConfiguration(Config({}))
        assert configuration.engine is Engine.SUBCLASS
        monkeypatch.setenv("FLYPROXY_ENGINE", "handler")
        configuration.set_engine(Engine.HANDLER)
        configuration.reset()
        assert configuration.engine is Engine.SUBCLASS
        assert configuration.configured_engine() is Engine.SUBCLASS

    @pytest.mark.parametrize("bad", [None, "metaclass"])
    def test_invalid_selection_leaves_state_unchanged(self, bad) -> None:
        configuration = ProxyConfiguration(Config({}))
        configuration.set_engine(Engine.HANDLER)
        with pytest.raises(ConfigurationException):
            configuration.set_engine(bad)
        assert configuration.engine is Engine.HANDLER


class TestProxyEngineProvider:
    def test_engine_types(self) -> None:
        provider = ProxyEngineProvider(ProxyConfiguration(Config({})))
        assert isinstance(provider.get_factory(Engine.SUBCLASS), SubclassProxyEngine)
        assert isinstance(provider.get_factory("handler"), HandlerProxyEngine)
        assert provider.get_factory(Engine.HANDLER).engine_name == "handler"

    def test_engines_are_cached(self) -> None:
        provider = ProxyEngineProvider(ProxyConfiguration(Config({})))
        assert provider.get_factory(Engine.SUBCLASS) is provider.get_factory(Engine.SUBCLASS)
        assert provider.get_factory(Engine.SUBCLASS) is not provider.get_factory(Engine.HANDLER)

    def test_clear_cache(self) -> None:
        provider = ProxyEngineProvider(ProxyConfiguration(Config({})))
        first = provider.get_factory(Engine.SUBCLASS)
        provider.clear_cache()
        assert provider.get_factory(Engine.SUBCLASS) is not first

    def test_current_factory_follows_selection(self) -> None:
        configuration = ProxyConfiguration(Config({}))
        provider = ProxyEngineProvider(configuration)
        assert provider.get_current_factory().engine_name == "subclass"
        configuration.set_engine(Engine.HANDLER)
        assert provider.get_current_factory().engine_name == "handler"

    def test_concurrent_first_requests_create_one_engine(self) -> None:
        created: list[ProxyEngine] = []

        def make():
            engine = SubclassProxyEngine()
            created.append(engine)
            return engine

        provider = ProxyEngineProvider(ProxyConfiguration(Config({})), {Engine.SUBCLASS: make})
        results: list[ProxyEngine] = []
        threads = [threading.Thread(target=lambda: results.append(provider.get_factory("subclass"))) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert len(created) == 1
        assert all(result is created[0] for result in results)

    def test_creation_failure_is_wrapped(self) -> None:
        def broken():
            raise RuntimeError("no bytecode today")

        provider = ProxyEngineProvider(ProxyConfiguration(Config({})), {Engine.SUBCLASS: broken})
        with pytest.raises(ProxyException) as exc_info:
            provider.get_factory(Engine.SUBCLASS)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_missing_engine_type(self) -> None:
        provider = ProxyEngineProvider(ProxyConfiguration(Config({})), {Engine.SUBCLASS: SubclassProxyEngine})
        with pytest.raises(ProxyException):
            provider.get_factory(Engine.HANDLER)
