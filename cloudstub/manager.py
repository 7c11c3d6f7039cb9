"""Install and restore recording proxies for client types in a registry.

``StubManager.stub(path, method)`` registers a proxy class at *path*: a
subclass of the original whose instances build the original client with
the same arguments and forward every call to it, except for methods
replaced by a ``MethodStub``.  Constructor calls are recorded by the
``ClientSpy`` held on the proxy class.  The original class is never
modified, so restoring is a single registry assignment.
"""

from __future__ import annotations

import functools
import inspect
from typing import TYPE_CHECKING, Any
from unittest import mock

from loguru import logger

from cloudstub.exceptions import NotStubbedError, UnknownMethodError
from cloudstub.sdk_types import Request, Response
from cloudstub.stand_in import MethodStub

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from cloudstub.registry import ClientRegistry


def method_surface(client_type: type) -> frozenset[str]:
    """Return public method names of *client_type*, inherited ones included."""
    return frozenset(
        name
        for name, _ in inspect.getmembers(client_type, inspect.isroutine)
        if not name.startswith("_")
    )


def _forwarder(name: str, original: Callable[..., Any]) -> Callable[..., Any]:
    """Build a proxy method that calls *name* on the wrapped client."""

    @functools.wraps(original)
    def forward(self: Any, *args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
        return getattr(self.__wrapped__, name)(*args, **kwargs)

    return forward


class RecordingType(type):
    """Metaclass of proxy classes: construction goes through the class's spy."""

    def __call__(cls, *args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
        spy = cls.__dict__.get("_cloudstub_spy")
        if spy is None:
            return cls._cloudstub_construct(*args, **kwargs)
        return spy(*args, **kwargs)

    def _cloudstub_construct(cls, *args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
        return super().__call__(*args, **kwargs)


def _recording_metaclass(original: type) -> type:
    meta = type(original)
    if issubclass(meta, RecordingType):
        return meta
    if meta is type:
        return RecordingType
    return type(f"Recording{meta.__name__}", (RecordingType, meta), {})


def build_proxy_class(original: type) -> type:
    """Create a delegating subclass of *original*.

    Instances construct ``original(*args, **kwargs)`` and forward method
    calls and attribute reads to it.  Instance methods are redeclared on
    the proxy class so they can be replaced individually; class attributes,
    class methods and static methods are inherited unchanged.
    """
    if not isinstance(original, type):
        msg = f"Only classes can be stubbed, got {original!r}"
        raise TypeError(msg)
    surface = method_surface(original)

    def __init__(self: Any, *args: Any, **kwargs: Any) -> None:  # noqa: N807
        object.__setattr__(self, "__wrapped__", original(*args, **kwargs))

    def __getattr__(self: Any, name: str) -> Any:  # noqa: ANN401, N807
        if name == "__wrapped__":
            raise AttributeError(name)
        return getattr(self.__wrapped__, name)

    def __repr__(self: Any) -> str:  # noqa: N807
        return f"<{original.__name__} proxy of {self.__wrapped__!r}>"

    namespace: dict[str, Any] = {
        "__init__": __init__,
        "__getattr__": __getattr__,
        "__repr__": __repr__,
        "__doc__": original.__doc__,
        "__module__": original.__module__,
        "__qualname__": original.__qualname__,
        "_cloudstub_original": original,
        "_cloudstub_surface": surface,
    }
    for name in surface:
        if isinstance(
            inspect.getattr_static(original, name), (classmethod, staticmethod)
        ):
            continue
        namespace[name] = _forwarder(name, getattr(original, name))
    metaclass = _recording_metaclass(original)
    return metaclass(original.__name__, (original,), namespace)


def spy_of(client_type: object) -> ClientSpy | None:
    """Return the spy of a proxy class registered by ``StubManager``, if any."""
    if not isinstance(client_type, type):
        return None
    spy = vars(client_type).get("_cloudstub_spy")
    return spy if isinstance(spy, ClientSpy) else None


class ClientSpy(mock.Mock):
    """Constructor recorder attached to a stubbed client type's proxy class.

    Constructing the proxy class goes through the spy, so tests can assert
    ``spy.assert_called_once_with({"region": ...})``.  The spy is also the
    stub record for its path: ``original``, ``proxy_class`` and the
    installed ``stand_ins``.
    """

    def __init__(
        self,
        path: str,
        original: type,
        registry: ClientRegistry,
        **kwargs: Any,
    ) -> None:
        """Build a proxy of *original* for *path* in *registry* and attach to it."""
        proxy_class = build_proxy_class(original)
        super().__init__(wraps=proxy_class._cloudstub_construct, name=path, **kwargs)  # noqa: SLF001
        self.path = path
        self.original = original
        self.proxy_class = proxy_class
        self.stand_ins: dict[str, MethodStub] = {}
        self._registry = registry
        proxy_class._cloudstub_spy = self  # noqa: SLF001

    def _get_child_mock(self, **kw: Any) -> mock.Mock:
        return mock.Mock(**kw)

    @property
    def installed(self) -> bool:
        """Return True while this spy's proxy class is registered at its path."""
        return self._registry.get(self.path) is self.proxy_class

    def install_method(self, method: str, stand_in: MethodStub) -> MethodStub:
        """Replace *method* on the proxy class with *stand_in*."""
        if method not in self.proxy_class._cloudstub_surface:  # noqa: SLF001
            raise UnknownMethodError(self.path, method)
        setattr(self.proxy_class, method, stand_in)
        self.stand_ins[method] = stand_in
        return stand_in

    def restore(self) -> None:
        """Register the original class at this spy's path again."""
        if not self.installed:
            msg = f"Client type {self.path!r} is not stubbed by this proxy"
            raise NotStubbedError(msg)
        self._registry.set(self.path, self.original)
        logger.debug(
            f"Restored {self.path!r} "
            f"(dropped stubs: {', '.join(sorted(self.stand_ins)) or '<none>'})"
        )


class StubManager:
    """Stub individual methods of client types held in a ``ClientRegistry``.

    Use as a context manager to guarantee every stubbed path is restored::

        with StubManager(registry) as stubs:
            get_object = stubs.stub("S3", "get_object")
            ...
    """

    def __init__(
        self,
        registry: ClientRegistry,
        *,
        strict_restore: bool = True,
        request_type: type = Request,
        response_type: type = Response,
    ) -> None:
        """Bind to *registry*; synthetic objects mirror the given SDK types."""
        self.registry = registry
        self.strict_restore = strict_restore
        self._request_type = request_type
        self._response_type = response_type
        self._spies: dict[str, ClientSpy] = {}

    def __enter__(self) -> StubManager:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.restore_all()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def stub(
        self,
        path: str,
        method: str,
        replacement: Callable[..., Any] | None = None,
    ) -> MethodStub:
        """Replace *method* of the client type at *path* with a ``MethodStub``.

        Without *replacement* each call returns a fresh synthetic request.
        With it, each call runs ``replacement(context, *args, **kwargs)``
        and returns ``context.request``.
        """
        spy = self._ensure_spy(path, method)
        stand_in = MethodStub(
            name=f"{path}.{method}",
            request_type=self._request_type,
            response_type=self._response_type,
        )
        if replacement is not None:
            stand_in.calls_through(replacement)
        spy.install_method(method, stand_in)
        logger.debug(f"Stubbed {path}.{method}")
        return stand_in

    def is_stubbed(self, path: str) -> bool:
        """Return True iff the entry at *path* is a recording proxy."""
        return spy_of(self.registry.get(path)) is not None

    def spy(self, path: str) -> ClientSpy:
        """Return the spy of the recording proxy installed at *path*."""
        spy = spy_of(self.registry.get(path))
        if spy is None:
            msg = f"Client type {path!r} is not stubbed"
            raise NotStubbedError(msg)
        return spy

    def restore(self, path: str) -> None:
        """Reinstate the original class at *path*.

        Restoring a path that is not stubbed raises ``NotStubbedError``, or
        only logs a warning when ``strict_restore`` is off.
        """
        spy = spy_of(self.registry.get(path))
        self._spies.pop(path, None)
        if spy is None:
            if self.strict_restore:
                msg = f"Client type {path!r} is not stubbed"
                raise NotStubbedError(msg)
            logger.warning(f"Ignoring restore of {path!r}: not stubbed")
            return
        spy.restore()

    def restore_all(self) -> None:
        """Restore every path this manager stubbed that is still stubbed."""
        spies = list(self._spies.values())
        self._spies.clear()
        for spy in spies:
            if spy.installed:
                spy.restore()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_spy(self, path: str, method: str) -> ClientSpy:
        """Return the spy at *path*, installing one on first use."""
        current = self.registry.get(path)
        existing = spy_of(current)
        if existing is not None:
            self._spies.setdefault(path, existing)
            return existing
        if method not in method_surface(current):
            raise UnknownMethodError(path, method)
        spy = ClientSpy(path, current, self.registry)
        self.registry.set(path, spy.proxy_class)
        self._spies[path] = spy
        logger.debug(f"Installed recording proxy for {path!r} ({current!r})")
        return spy
