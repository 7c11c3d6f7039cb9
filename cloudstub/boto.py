"""boto3 client types and registries.

This is the only module that imports ``boto3``/``botocore``.  boto3 builds
its client classes on the fly inside ``Session.client``; to get a class
that can be registered and stubbed before any client exists, a thin
delegating type is generated from the botocore service model instead.
Construction creates the real boto3 client, which performs no network
I/O.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import boto3
import botocore.session
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from boto3.s3.transfer import S3Transfer
from botocore import xform_name
from botocore.exceptions import UnknownServiceError
from botocore.utils import get_service_module_name
from loguru import logger

from cloudstub.exceptions import UnknownClientTypeError
from cloudstub.registry import ClientRegistry

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

# Public helpers every botocore client inherits from ``BaseClient``.
_BASE_CLIENT_METHODS = (
    "can_paginate",
    "close",
    "generate_presigned_url",
    "get_paginator",
    "get_waiter",
)

# Methods boto3 injects into specific clients (see ``boto3.s3.inject``).
_INJECTED_METHODS: dict[str, tuple[str, ...]] = {
    "s3": (
        "copy",
        "download_file",
        "download_fileobj",
        "generate_presigned_post",
        "upload_file",
        "upload_fileobj",
    ),
}

# Helper classes registered under a service's path, e.g. "S3.Transfer".
_NESTED_TYPES: dict[str, dict[str, type]] = {
    "s3": {"Transfer": S3Transfer},
    "dynamodb": {
        "TypeDeserializer": TypeDeserializer,
        "TypeSerializer": TypeSerializer,
    },
}


def _client_method(name: str, doc: str | None = None) -> Callable[..., Any]:
    def method(self: Any, *args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
        return getattr(self.client, name)(*args, **kwargs)

    method.__name__ = name
    method.__doc__ = doc
    return method


def _service_model(service_name: str) -> Any:  # noqa: ANN401
    try:
        return botocore.session.get_session().get_service_model(service_name)
    except UnknownServiceError:
        available = botocore.session.get_session().get_available_services()
        raise UnknownClientTypeError(service_name, available) from None


def boto3_client_type(
    service_name: str,
    session: boto3.session.Session | None = None,
) -> type:
    """Build a client class for *service_name* (``"s3"``, ``"dynamodb"``).

    The class is named like botocore's generated client (``S3``,
    ``DynamoDB``) and declares one method per API operation, named as
    boto3 names them (``get_object``), plus the ``BaseClient`` helpers and
    any methods boto3 injects for the service.  ``cls(**config)`` calls
    ``session.client(service_name, **config)`` and forwards to the result.
    """
    model = _service_model(service_name)
    class_name = get_service_module_name(model)

    def __init__(self: Any, **config: Any) -> None:  # noqa: N807
        client_session = session if session is not None else boto3.session.Session()
        self.config = config
        self.client = client_session.client(service_name, **config)

    def __getattr__(self: Any, name: str) -> Any:  # noqa: ANN401, N807
        if name == "client":
            raise AttributeError(name)
        return getattr(self.client, name)

    def __repr__(self: Any) -> str:  # noqa: N807
        return f"<{class_name} client {self.config!r}>"

    namespace: dict[str, Any] = {
        "__init__": __init__,
        "__getattr__": __getattr__,
        "__repr__": __repr__,
        "__doc__": f"Delegating boto3 client type for {service_name!r}.",
        "__module__": __name__,
        "service_name": service_name,
    }
    for operation_name in model.operation_names:
        name = xform_name(operation_name)
        namespace[name] = _client_method(name, f"Forward to ``{operation_name}``.")
    for name in (*_BASE_CLIENT_METHODS, *_INJECTED_METHODS.get(service_name, ())):
        namespace[name] = _client_method(name)
    logger.trace(
        f"Built client type {class_name} for {service_name!r} "
        f"({len(model.operation_names)} operations)"
    )
    return type(class_name, (), namespace)


def boto3_registry(
    services: Iterable[str],
    session: boto3.session.Session | None = None,
) -> ClientRegistry:
    """Register a client type, plus its nested helpers, for each service."""
    registry = ClientRegistry()
    for service_name in services:
        client_type = boto3_client_type(service_name, session)
        registry.register(client_type.__name__, client_type)
        for nested, nested_type in _NESTED_TYPES.get(service_name, {}).items():
            registry.register(f"{client_type.__name__}.{nested}", nested_type)
    return registry
