"""Shared pytest fixtures for cloudstub tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from cloudstub.manager import StubManager
from tests.fixtures.fake_sdk import build_fake_registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from cloudstub.registry import ClientRegistry

pytest_plugins = ["cloudstub.pytest_plugin"]

DATA = {"Body": b"hello world"}

_ISOLATED_ENV_VARS = (
    "CLOUDSTUB_CONFIG",
    "CLOUDSTUB_SERVICES",
    "CLOUDSTUB_STRICT_RESTORE",
    "AWS_PROFILE",
    "AWS_DEFAULT_PROFILE",
    "AWS_CONFIG_FILE",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's cloudstub and AWS settings out of every test."""
    for var in _ISOLATED_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("AWS_EC2_METADATA_DISABLED", "true")


@pytest.fixture
def registry() -> ClientRegistry:
    """Fresh fake SDK registry per test."""
    return build_fake_registry()


@pytest.fixture
def stubs(registry: ClientRegistry) -> Iterator[StubManager]:
    """Stub manager over the fake registry, restored at teardown."""
    with StubManager(registry) as manager:
        yield manager


class Results:
    """Callable that records ``(err, data)`` deliveries from app callbacks."""

    def __init__(self) -> None:
        self.calls: list[tuple[BaseException | None, object]] = []

    def __call__(self, err: BaseException | None, data: object = None) -> None:
        self.calls.append((err, data))


@pytest.fixture
def results() -> Results:
    """Fresh callback recorder."""
    return Results()
