"""Explicit registry of SDK client types addressed by dotted path.

``ClientRegistry`` is the single seam between application code and the
SDK's client classes.  Application code receives a registry and constructs
clients through it; tests hand the same registry to ``StubManager`` which
swaps entries for recording proxies and back.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from cloudstub.exceptions import UnknownClientTypeError


def split_path(path: str) -> tuple[str, ...]:
    """Split a dotted client type path into its segments.

    Raises ``ValueError`` for empty paths or empty segments
    (``"S3."``, ``".S3"``, ``"S3..Transfer"``).
    """
    parts = tuple(path.split("."))
    if not path or not all(parts):
        msg = f"Invalid client type path: {path!r}"
        raise ValueError(msg)
    return parts


class ClientRegistry:
    """Mapping of dotted paths (``"S3"``, ``"DynamoDB.TypeSerializer"``) to classes."""

    def __init__(self, types: dict[str, type] | None = None) -> None:
        """Create a registry, optionally pre-populated with *types*."""
        self._types: dict[str, Any] = {}
        for path, client_type in (types or {}).items():
            self.register(path, client_type)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and path in self._types

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self) -> str:
        return f"ClientRegistry({sorted(self._types)!r})"

    def paths(self) -> list[str]:
        """Return all registered paths, sorted."""
        return sorted(self._types)

    def children(self, prefix: str) -> dict[str, Any]:
        """Return direct nested entries of *prefix* keyed by their last segment.

        ``children("DynamoDB")`` yields ``{"TypeSerializer": ..., ...}`` but
        not deeper descendants.
        """
        depth = len(split_path(prefix)) + 1
        result: dict[str, Any] = {}
        for path, client_type in self._types.items():
            parts = split_path(path)
            if len(parts) == depth and path.startswith(f"{prefix}."):
                result[parts[-1]] = client_type
        return result

    def register(self, path: str, client_type: Any) -> None:  # noqa: ANN401
        """Add or replace the entry at *path*."""
        split_path(path)
        self._types[path] = client_type
        logger.trace(f"Registered client type {path!r}: {client_type!r}")

    def get(self, path: str) -> Any:  # noqa: ANN401
        """Return whatever is currently registered at *path*."""
        split_path(path)
        try:
            return self._types[path]
        except KeyError:
            raise UnknownClientTypeError(path, self.paths()) from None

    def set(self, path: str, client_type: Any) -> None:  # noqa: ANN401
        """Replace the entry at an already registered *path*."""
        self.get(path)
        self._types[path] = client_type

    def client(self, path: str, *args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
        """Construct a client of the type registered at *path*."""
        return self.get(path)(*args, **kwargs)
