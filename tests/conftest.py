"""Shared pytest fixtures for introspection tests.

Provides options, an in-memory store driven by a controllable clock, and
isolation from OAUTH2_INTROSPECTION_* variables set on the host.
"""

from __future__ import annotations

import os

import pytest

from oauth2_introspection.cache.store import InMemoryDistributedStore
from oauth2_introspection.options import IntrospectionOptions
from tests.factories import (
    INTROSPECTION_URL,
    TEST_CLIENT_ID,
    TEST_CLIENT_SECRET,
    FrozenClock,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove OAUTH2_INTROSPECTION_* variables for the duration of each test."""
    for name in list(os.environ):
        if name.startswith("OAUTH2_INTROSPECTION_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def frozen_clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def store(frozen_clock: FrozenClock) -> InMemoryDistributedStore:
    return InMemoryDistributedStore(clock=frozen_clock)


@pytest.fixture
def options() -> IntrospectionOptions:
    """Options pointing at a fixed endpoint, caching disabled."""
    return IntrospectionOptions(
        introspection_endpoint=INTROSPECTION_URL,
        client_id=TEST_CLIENT_ID,
        client_secret=TEST_CLIENT_SECRET,
    )


@pytest.fixture
def caching_options() -> IntrospectionOptions:
    """Options with caching enabled and a recognisable key prefix."""
    return IntrospectionOptions(
        introspection_endpoint=INTROSPECTION_URL,
        client_id=TEST_CLIENT_ID,
        client_secret=TEST_CLIENT_SECRET,
        enable_caching=True,
        cache_key_prefix="introspection:",
    )
