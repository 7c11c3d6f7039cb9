"""Synthetic SDK request/response objects for stand-in completion paths.

A synthetic object is a real ``EventEmitter`` so tests can still drive
``success``/``error`` delivery, with every other method of the SDK type
overlaid by a ``MagicMock`` recorder the test can program
(``request.promise.return_value = resolved(data)``).
"""

from __future__ import annotations

import inspect
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any
from unittest import mock

from cloudstub.events import EventEmitter
from cloudstub.sdk_types import Request, Response

_MAPPING_ATTRIBUTES = frozenset({"params"})


@dataclass
class StubContext:
    """Request/response pair handed to a replacement function."""

    request: Any
    response: Any


def _public_methods(sdk_type: type) -> list[str]:
    """Return public method names declared on *sdk_type* and its bases."""
    return sorted(
        name
        for name, _ in inspect.getmembers(sdk_type, callable)
        if not name.startswith("_")
    )


_EMITTER_METHODS = frozenset(_public_methods(EventEmitter))


def _data_attributes(sdk_type: type) -> list[str]:
    """Return annotated (non-method) attribute names of *sdk_type*."""
    names: list[str] = []
    for klass in reversed(sdk_type.__mro__):
        for name in inspect.get_annotations(klass):
            if not name.startswith("_") and name not in names:
                names.append(name)
    return names


def _synthesize(sdk_type: type, label: str) -> EventEmitter:
    emitter = EventEmitter()
    for name in _public_methods(sdk_type):
        if name in _EMITTER_METHODS:
            continue
        setattr(emitter, name, mock.MagicMock(name=f"{label}.{name}"))
    for name in _data_attributes(sdk_type):
        setattr(emitter, name, {} if name in _MAPPING_ATTRIBUTES else None)
    return emitter


def stub_request(request_type: type = Request) -> Any:  # noqa: ANN401
    """Build a synthetic request mirroring *request_type*."""
    return _synthesize(request_type, request_type.__name__)


def stub_response(response_type: type = Response) -> Any:  # noqa: ANN401
    """Build a synthetic response mirroring *response_type*."""
    return _synthesize(response_type, response_type.__name__)


def resolved(value: Any = None) -> Future[Any]:  # noqa: ANN401
    """Return a deferred result that already completed with *value*."""
    future: Future[Any] = Future()
    future.set_result(value)
    return future


def rejected(error: BaseException) -> Future[Any]:
    """Return a deferred result that already failed with *error*."""
    future: Future[Any] = Future()
    future.set_exception(error)
    return future
