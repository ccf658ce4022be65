"""flyproxy core: configuration loading and typed settings."""

from flyproxy.core.config import Config, config_properties
from flyproxy.core.settings import LoggingSettings, ProxySettings

__all__ = ["Config", "LoggingSettings", "ProxySettings", "config_properties"]
