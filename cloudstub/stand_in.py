"""Programmable recorder installed in place of a single client method."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from unittest import mock

from cloudstub.exceptions import CallbackNotFoundError
from cloudstub.synthetic import StubContext, stub_request, stub_response

if TYPE_CHECKING:
    from collections.abc import Callable

    Replacement = Callable[..., Any]


def find_callback(args: tuple[Any, ...], kwargs: dict[str, Any]) -> Callable[..., Any]:
    """Return the ``callback`` keyword, else the last callable positional argument."""
    callback = kwargs.get("callback")
    if callable(callback):
        return callback
    for arg in reversed(args):
        if callable(arg):
            return arg
    msg = "Stub was programmed to yield but was called without a callback"
    raise CallbackNotFoundError(msg)


class MethodStub(mock.MagicMock):
    """``MagicMock`` recording calls to one stubbed client method.

    By default every call returns a freshly synthesized request.  Use
    ``returns``, ``yields`` or ``calls_through`` (or plain ``side_effect``)
    to program a different behaviour; the call history is kept either way.
    """

    def __init__(
        self,
        *args: Any,
        request_type: type | None = None,
        response_type: type | None = None,
        **kwargs: Any,
    ) -> None:
        """Create a stub that synthesizes *request_type*/*response_type* objects."""
        super().__init__(*args, **kwargs)
        self._request_type = request_type
        self._response_type = response_type
        self.side_effect = self._fresh_request

    def _get_child_mock(self, **kw: Any) -> mock.MagicMock:
        return mock.MagicMock(**kw)

    def _new_request(self) -> Any:  # noqa: ANN401
        if self._request_type is None:
            return stub_request()
        return stub_request(self._request_type)

    def _new_response(self) -> Any:  # noqa: ANN401
        if self._response_type is None:
            return stub_response()
        return stub_response(self._response_type)

    def _fresh_request(self, *_args: Any, **_kwargs: Any) -> Any:  # noqa: ANN401
        return self._new_request()

    def returns(self, value: Any) -> MethodStub:  # noqa: ANN401
        """Return *value* from every subsequent call."""
        self.side_effect = None
        self.return_value = value
        return self

    def yields(self, *callback_args: Any) -> MethodStub:
        """Invoke the call's callback with *callback_args* on every subsequent call."""

        def _yield(*args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
            find_callback(args, kwargs)(*callback_args)
            return self._new_request()

        self.side_effect = _yield
        return self

    def calls_through(self, replacement: Replacement) -> MethodStub:
        """Run *replacement* with a request/response context on every call.

        *replacement* is called as ``replacement(context, *args, **kwargs)``
        where ``context`` is a ``StubContext``; the context's request is
        returned to the caller.  Anything *replacement* raises propagates.
        """

        def _call_through(*args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
            context = StubContext(
                request=self._new_request(),
                response=self._new_response(),
            )
            replacement(context, *args, **kwargs)
            return context.request

        self.side_effect = _call_through
        return self

    def reset(self) -> MethodStub:
        """Forget call history and programming; go back to fresh requests."""
        self.reset_mock(return_value=True, side_effect=True)
        self.side_effect = self._fresh_request
        return self
