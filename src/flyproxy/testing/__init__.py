"""flyproxy testing — engine fixtures and proxy assertions."""

from flyproxy.testing.assertions import assert_interceptors, assert_is_proxy
from flyproxy.testing.fixtures import ALL_ENGINES, RecordingInterceptor, engine_scope

__all__ = [
    "ALL_ENGINES",
    "RecordingInterceptor",
    "assert_interceptors",
    "assert_is_proxy",
    "engine_scope",
]
