"""Custom exception hierarchy for cloudstub.

All library-specific exceptions inherit from ``CloudstubError`` so consumers
can catch ``except CloudstubError`` to handle any cloudstub failure.  Lookup
failures also inherit from the matching builtin so code written against
plain attribute/key access keeps working.
"""


class CloudstubError(Exception):
    """Base exception for all cloudstub errors."""


class UnknownClientTypeError(CloudstubError, LookupError):
    """Raised when a client type path does not resolve in the registry."""

    def __init__(self, path: str, available: list[str]) -> None:
        """Initialize with the requested path and the registered paths."""
        self.path = path
        self.available = available
        super().__init__(
            f"Unknown client type {path!r}. "
            f"Registered: {', '.join(available) or '<none>'}."
        )


class UnknownMethodError(CloudstubError, AttributeError):
    """Raised when a client type has no public method with the given name."""

    def __init__(self, path: str, method: str) -> None:
        """Initialize with the client type path and the missing method."""
        self.path = path
        self.method = method
        super().__init__(f"Client type {path!r} has no method {method!r}")


class NotStubbedError(CloudstubError):
    """Raised when restoring a path that has no recording proxy installed."""


class CallbackNotFoundError(CloudstubError, TypeError):
    """Raised when a stand-in programmed to yield receives no callback."""


class UnhandledErrorEvent(CloudstubError):
    """Raised when an ``error`` event is emitted with no listener attached."""
