"""Type definitions for the SDK request/response surface.

Synthetic requests and responses are built from these protocols: every
public method listed here that is not an event method becomes a
programmable recorder.
"""

from __future__ import annotations

from typing import IO, TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable
    from concurrent.futures import Future


class Request(Protocol):
    """Structural protocol for an in-flight SDK request."""

    operation: str | None
    params: dict[str, Any]

    def on(self, event: str, listener: Callable[..., Any]) -> Request:
        """Subscribe *listener* to *event* (``success``, ``error``, ``complete``)."""
        ...

    def emit(self, event: str, *args: Any) -> bool:
        """Deliver *event* to its listeners."""
        ...

    def send(self, callback: Callable[..., Any] | None = None) -> None:
        """Dispatch the request."""
        ...

    def promise(self) -> Future[Any]:
        """Dispatch the request and return a deferred result."""
        ...

    def create_read_stream(self) -> IO[bytes]:
        """Dispatch the request and stream the response body."""
        ...

    def abort(self) -> Request:
        """Cancel the request."""
        ...

    def event_names(self) -> list[str]:
        """Return the events that currently have listeners."""
        ...


class Response(Protocol):
    """Structural protocol for the response attached to a completed request."""

    data: Any
    error: BaseException | None
    request_id: str | None
    retry_count: int | None

    def has_next_page(self) -> bool:
        """Return True when a paginated operation has more results."""
        ...

    def next_page(self, callback: Callable[..., Any] | None = None) -> Request | None:
        """Request the next page of results."""
        ...
