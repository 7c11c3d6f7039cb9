"""pytest fixtures that scope stubs to a single test.

Enable from a ``conftest.py``::

    pytest_plugins = ["cloudstub.pytest_plugin"]
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from cloudstub.boto import boto3_registry
from cloudstub.config import StubConfig
from cloudstub.manager import StubManager

if TYPE_CHECKING:
    from collections.abc import Iterator

    from cloudstub.registry import ClientRegistry


@pytest.fixture
def cloudstub_config() -> StubConfig:
    """Settings loaded from preset, ``cloudstub.yaml`` and environment."""
    return StubConfig.load()


@pytest.fixture
def client_registry(cloudstub_config: StubConfig) -> ClientRegistry:
    """boto3 client types for the configured services."""
    return boto3_registry(cloudstub_config.services)


@pytest.fixture
def sdk_stubs(
    client_registry: ClientRegistry,
    cloudstub_config: StubConfig,
) -> Iterator[StubManager]:
    """Stub manager over ``client_registry``; every stub is restored at teardown."""
    with StubManager(
        client_registry,
        strict_restore=cloudstub_config.strict_restore,
    ) as manager:
        yield manager
