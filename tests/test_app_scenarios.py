"""End-to-end tests: application code driven through stubbed clients.

Each scenario comes in two flavours: programming the returned
``MethodStub`` directly, and passing a replacement function that drives
the synthetic request/response pair.
"""

from __future__ import annotations

import io
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any
from unittest import mock

from cloudstub.events import EventEmitter
from cloudstub.synthetic import rejected, resolved
from tests.conftest import DATA
from tests.fixtures import storage_app
from tests.fixtures.storage_app import PARAMS, REGION

if TYPE_CHECKING:
    from collections.abc import Callable

    from cloudstub.manager import StubManager
    from cloudstub.registry import ClientRegistry
    from cloudstub.synthetic import StubContext
    from tests.conftest import Results

_OK = [(None, "hello world")]


def _assert_one_client(stubs: StubManager) -> None:
    spy = stubs.spy("Storage")
    assert spy.call_count == 1, "one storage client created"
    spy.assert_called_once_with({"region": REGION})


class TestUseCallback:
    def test_programmed_stub(
        self, registry: ClientRegistry, stubs: StubManager, results: Results
    ) -> None:
        get_object = stubs.stub("Storage", "get_object")
        get_object.yields(None, DATA)

        storage_app.use_callback(registry, results)

        assert results.calls == _OK
        _assert_one_client(stubs)
        get_object.assert_called_once_with(PARAMS, mock.ANY)

        stubs.restore("Storage")
        assert not stubs.is_stubbed("Storage")

    def test_replacement_function(
        self, registry: ClientRegistry, stubs: StubManager, results: Results
    ) -> None:
        def fake_get(
            _ctx: StubContext, _params: dict[str, Any], callback: Callable[..., None]
        ) -> None:
            callback(None, DATA)

        get_object = stubs.stub("Storage", "get_object", fake_get)

        storage_app.use_callback(registry, results)

        assert results.calls == _OK
        _assert_one_client(stubs)
        assert get_object.call_count == 1
        assert get_object.call_args.args[0] == PARAMS

    def test_assertions_inside_replacement(
        self, registry: ClientRegistry, stubs: StubManager, results: Results
    ) -> None:
        seen: list[dict[str, Any]] = []

        def fake_get(
            _ctx: StubContext, params: dict[str, Any], callback: Callable[..., None]
        ) -> None:
            assert params == PARAMS
            seen.append(params)
            callback(None, DATA)

        stubs.stub("Storage", "get_object", fake_get)

        storage_app.use_callback(registry, results)

        assert seen == [PARAMS], "replacement was called once"
        assert results.calls == _OK


class TestUsePromise:
    def test_programmed_stub(
        self, registry: ClientRegistry, stubs: StubManager, results: Results
    ) -> None:
        get_object = stubs.stub("Storage", "get_object")
        get_object.returns(SimpleNamespace(promise=lambda: resolved(DATA)))

        storage_app.use_promise(registry, results)

        assert results.calls == _OK
        _assert_one_client(stubs)
        get_object.assert_called_once_with(PARAMS)

    def test_replacement_function(
        self, registry: ClientRegistry, stubs: StubManager, results: Results
    ) -> None:
        def fake_get(ctx: StubContext, _params: dict[str, Any]) -> None:
            ctx.request.promise.return_value = resolved(DATA)

        get_object = stubs.stub("Storage", "get_object", fake_get)

        storage_app.use_promise(registry, results)

        assert results.calls == _OK
        _assert_one_client(stubs)
        get_object.assert_called_once_with(PARAMS)

    def test_rejected_promise_reaches_callback(
        self, registry: ClientRegistry, stubs: StubManager, results: Results
    ) -> None:
        error = PermissionError("AccessDenied")

        def fake_get(ctx: StubContext, _params: dict[str, Any]) -> None:
            ctx.request.promise.return_value = rejected(error)

        stubs.stub("Storage", "get_object", fake_get)

        storage_app.use_promise(registry, results)

        assert results.calls == [(error, None)]


class TestStreaming:
    def test_programmed_stub(
        self, registry: ClientRegistry, stubs: StubManager, results: Results
    ) -> None:
        get_object = stubs.stub("Storage", "get_object")
        get_object.returns(
            SimpleNamespace(create_read_stream=lambda: io.BytesIO(DATA["Body"]))
        )

        storage_app.streaming(registry, results)

        assert results.calls == _OK
        _assert_one_client(stubs)
        get_object.assert_called_once_with(PARAMS)

    def test_replacement_function(
        self, registry: ClientRegistry, stubs: StubManager, results: Results
    ) -> None:
        def fake_get(ctx: StubContext, _params: dict[str, Any]) -> None:
            ctx.request.create_read_stream.return_value = io.BytesIO(DATA["Body"])

        get_object = stubs.stub("Storage", "get_object", fake_get)

        storage_app.streaming(registry, results)

        assert results.calls == _OK
        _assert_one_client(stubs)
        get_object.assert_called_once_with(PARAMS)


class TestUseEvents:
    def test_programmed_stub(
        self, registry: ClientRegistry, stubs: StubManager, results: Results
    ) -> None:
        get_object = stubs.stub("Storage", "get_object")
        request = EventEmitter()
        request.send = lambda: request.emit(  # type: ignore[attr-defined]
            "success", SimpleNamespace(data=DATA)
        )
        get_object.returns(request)

        storage_app.use_events(registry, results)

        assert results.calls == _OK
        _assert_one_client(stubs)
        get_object.assert_called_once_with(PARAMS)

    def test_emit_from_deferred_step(
        self, registry: ClientRegistry, stubs: StubManager, results: Results
    ) -> None:
        scheduled: list[Callable[[], None]] = []
        sends: list[mock.MagicMock] = []

        def fake_get(ctx: StubContext, _params: dict[str, Any]) -> None:
            sends.append(ctx.request.send)
            ctx.response.data = DATA
            scheduled.append(lambda: ctx.request.emit("success", ctx.response))

        get_object = stubs.stub("Storage", "get_object", fake_get)

        storage_app.use_events(registry, results)
        assert results.calls == [], "nothing delivered before the deferred step"
        for step in scheduled:
            step()

        assert results.calls == _OK
        _assert_one_client(stubs)
        get_object.assert_called_once_with(PARAMS)
        assert len(sends) == 1
        sends[0].assert_called_once_with()

    def test_emit_error_event(
        self, registry: ClientRegistry, stubs: StubManager, results: Results
    ) -> None:
        error = TimeoutError("RequestTimeout")

        def fake_get(ctx: StubContext, _params: dict[str, Any]) -> None:
            ctx.request.send.side_effect = lambda: ctx.request.emit("error", error)

        stubs.stub("Storage", "get_object", fake_get)

        storage_app.use_events(registry, results)

        assert results.calls == [(error, None)]


class TestMultipleMethods:
    def test_shared_state_between_replacements(
        self, registry: ClientRegistry, stubs: StubManager, results: Results
    ) -> None:
        stored: dict[str, bytes] = {}

        def fake_put(ctx: StubContext, params: dict[str, Any]) -> None:
            stored["body"] = params["Body"]
            ctx.request.promise.return_value = resolved()

        def fake_get(ctx: StubContext, _params: dict[str, Any]) -> None:
            ctx.request.promise.return_value = resolved({"Body": stored["body"]})

        put_object = stubs.stub("Storage", "put_object", fake_put)
        get_object = stubs.stub("Storage", "get_object", fake_get)

        storage_app.multiple_methods(registry, results)

        assert results.calls == _OK
        _assert_one_client(stubs)
        put_object.assert_called_once_with({**PARAMS, "Body": stored["body"]})
        get_object.assert_called_once_with(PARAMS)

        stubs.restore("Storage")
        assert not stubs.is_stubbed("Storage")


class TestInheritedMethods:
    def test_upload_defined_on_base_class(
        self, registry: ClientRegistry, stubs: StubManager, results: Results
    ) -> None:
        def fake_upload(
            _ctx: StubContext, _params: dict[str, Any], callback: Callable[..., None]
        ) -> None:
            callback(None, DATA)

        upload = stubs.stub("Storage", "upload", fake_upload)

        storage_app.upload(registry, results)

        assert results.calls == _OK
        _assert_one_client(stubs)
        assert upload.call_count == 1
        assert upload.call_args.args[0] == PARAMS
