"""cloudstub -- stub individual SDK client methods in tests."""

from cloudstub.boto import boto3_client_type, boto3_registry
from cloudstub.config import StubConfig
from cloudstub.events import EventEmitter
from cloudstub.exceptions import (
    CallbackNotFoundError,
    CloudstubError,
    NotStubbedError,
    UnhandledErrorEvent,
    UnknownClientTypeError,
    UnknownMethodError,
)
from cloudstub.manager import ClientSpy, StubManager, spy_of
from cloudstub.registry import ClientRegistry
from cloudstub.stand_in import MethodStub
from cloudstub.synthetic import (
    StubContext,
    rejected,
    resolved,
    stub_request,
    stub_response,
)

__all__ = [
    "CallbackNotFoundError",
    "ClientRegistry",
    "ClientSpy",
    "CloudstubError",
    "EventEmitter",
    "MethodStub",
    "NotStubbedError",
    "StubConfig",
    "StubContext",
    "StubManager",
    "UnhandledErrorEvent",
    "UnknownClientTypeError",
    "UnknownMethodError",
    "boto3_client_type",
    "boto3_registry",
    "rejected",
    "resolved",
    "stub_request",
    "spy_of",
    "stub_response",
]
