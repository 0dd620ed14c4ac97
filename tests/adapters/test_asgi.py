from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpipe.adapters.asgi import (
    PipeApp,
    PipeMiddleware,
    as_asgi_app,
    build_response,
    from_asgi_app,
    from_endpoint,
    run_pipe,
)
from httpipe.core.algebra import always, choose, compose, never
from httpipe.core.result import NOT_MATCHED, Matched
from httpipe.exceptions import BodyTooLargeError
from httpipe.http import (
    GET,
    POST,
    Ok,
    add_header,
    body,
    if_path,
    parse_path,
    respond,
    set_header,
    set_status,
)
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse


def serve(pipe, **kwargs) -> TestClient:
    return TestClient(as_asgi_app(pipe, **kwargs), raise_server_exceptions=False)


# --- build_response ---


def test_build_response_copies_status_headers_body(make_context):
    context = make_context()
    context.response.set_header("X-Multi", ["a", "b"])
    context.response.set_header("Content-Type", "text/plain")
    context.response.write_head(201)
    context.response.write("made")

    response = build_response(context)

    assert response.status_code == 201
    assert response.body == b"made"
    assert response.headers.getlist("x-multi") == ["a", "b"]
    assert response.headers["content-type"] == "text/plain"
    assert response.headers["content-length"] == "4"


def test_build_response_respects_explicit_content_length(make_context):
    context = make_context()
    context.response.set_header("Content-Length", "0")
    context.response.write_head(200)

    response = build_response(context)

    assert response.headers.getlist("content-length") == ["0"]


# --- run_pipe ---


@pytest.mark.asyncio
async def test_run_pipe_reports_match(make_context):
    assert await run_pipe(always, make_context()) is True
    assert await run_pipe(never, make_context()) is False


@pytest.mark.asyncio
@patch("httpipe.adapters.asgi.log_pipe_outcome")
async def test_run_pipe_logs_and_reraises(mock_log, make_context):
    failing = AsyncMock(side_effect=RuntimeError("kaput"))
    context = make_context()

    with pytest.raises(RuntimeError, match="kaput"):
        await run_pipe(failing, context)

    args, kwargs = mock_log.call_args
    assert args == (str(context.exchange_id), "error")
    assert kwargs["error"] == "kaput"
    assert kwargs["details"]["error_type"] == "RuntimeError"


# --- Inbound: standalone app ---


def test_hello_world_end_to_end():
    client = serve(GET(if_path("/", lambda: Ok("Hello World!"))))

    response = client.get("/")
    assert response.status_code == 200
    assert response.text == "Hello World!"

    missing = client.get("/other")
    assert missing.status_code == 404
    assert missing.text == "Not Found"


def test_method_mismatch_falls_back_to_404():
    client = serve(GET(if_path("/", lambda: Ok("Hello World!"))))
    assert client.post("/").status_code == 404


def test_echo_body_end_to_end():
    client = serve(POST(body(lambda buf: Ok(buf.decode()))))

    response = client.post("/", content=b"ping")

    assert response.status_code == 200
    assert response.text == "ping"


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/route/first/some/beer", '{"foo": "first", "bar": "beer"}'),
        ("/route/first%20one/some/beer", '{"foo": "first one", "bar": "beer"}'),
    ],
)
def test_path_params_end_to_end(path, expected):
    import json

    client = serve(parse_path("/route/:foo/some/:bar", lambda params: Ok(json.dumps(params))))

    response = client.get(path)

    assert response.status_code == 200
    assert response.text == expected


def test_missing_path_segment_is_404():
    client = serve(parse_path("/route/:foo/some", lambda params: Ok(params["foo"])))
    assert client.get("/route/some").status_code == 404


def test_first_match_wins_end_to_end():
    client = serve(choose([never, Ok("first"), respond(500, "second")]))

    response = client.get("/anything")

    assert response.status_code == 200
    assert response.text == "first"


def test_headers_reach_the_client():
    client = serve(compose(set_header("X-Tag", "a"), add_header("X-Tag", "b"), Ok("tagged")))

    response = client.get("/")

    assert response.headers.get_list("x-tag") == ["a", "b"]


def test_custom_fallback():
    fallback = PlainTextResponse("nothing here", status_code=410)
    client = serve(never, fallback=fallback)

    response = client.get("/")

    assert response.status_code == 410
    assert response.text == "nothing here"


def test_unexpected_error_becomes_500_not_404():
    async def broken(context):
        raise RuntimeError("handler blew up")

    client = serve(choose([broken, Ok("should not run")]))

    response = client.get("/")

    assert response.status_code == 500


def test_pipe_error_uses_its_status_code():
    client = serve(POST(body(lambda buf: Ok(buf), limit=3)))

    response = client.post("/", content=b"way too long")

    assert response.status_code == 413
    assert "exceeds the limit" in response.json()["detail"]
    assert "error_type" not in response.json()


def test_pipe_error_includes_type_in_dev_mode(monkeypatch):
    monkeypatch.setenv("RUN_MODE", "dev")
    client = serve(compose(set_status(200), set_status(201)))

    response = client.get("/")

    assert response.status_code == 500
    assert response.json()["error_type"] == "HeadersSentError"


def test_errors_raise_with_raising_client():
    async def broken(context):
        raise BodyTooLargeError("too big")

    client = TestClient(PipeApp(broken))

    with pytest.raises(BodyTooLargeError):
        client.get("/")


def test_lifespan_is_acknowledged():
    with TestClient(as_asgi_app(Ok("up"))) as client:
        assert client.get("/").text == "up"


@pytest.mark.asyncio
async def test_pipe_app_rejects_websocket_scope():
    app = PipeApp(always)
    with pytest.raises(RuntimeError, match="only serves HTTP"):
        await app({"type": "websocket"}, AsyncMock(), AsyncMock())


# --- Inbound: middleware ---


@pytest.fixture
def fastapi_app() -> FastAPI:
    app = FastAPI()

    @app.get("/framework")
    async def framework_route():
        return {"handled_by": "fastapi"}

    @app.post("/framework/echo")
    async def framework_echo(request: Request):
        return {"body": (await request.body()).decode()}

    return app


def test_middleware_handles_matching_requests(fastapi_app):
    fastapi_app.add_middleware(PipeMiddleware, pipe=GET(if_path("/pipe", lambda: Ok("from pipe"))))
    client = TestClient(fastapi_app)

    response = client.get("/pipe")

    assert response.status_code == 200
    assert response.text == "from pipe"


def test_middleware_falls_through_on_not_matched(fastapi_app):
    fastapi_app.add_middleware(PipeMiddleware, pipe=GET(if_path("/pipe", lambda: Ok("from pipe"))))
    client = TestClient(fastapi_app)

    response = client.get("/framework")

    assert response.status_code == 200
    assert response.json() == {"handled_by": "fastapi"}


def test_middleware_replays_materialized_body(fastapi_app):
    peek = POST(body(lambda buf: never))
    fastapi_app.add_middleware(PipeMiddleware, pipe=peek)
    client = TestClient(fastapi_app)

    response = client.post("/framework/echo", content=b"still here")

    assert response.json() == {"body": "still here"}


def test_middleware_errors_do_not_fall_through(fastapi_app):
    async def broken(context):
        raise RuntimeError("middleware pipe failed")

    fastapi_app.add_middleware(PipeMiddleware, pipe=broken)
    client = TestClient(fastapi_app, raise_server_exceptions=False)

    assert client.get("/framework").status_code == 500


# --- Outbound ---


@pytest.mark.asyncio
async def test_from_asgi_app_captures_response(make_context):
    foreign = JSONResponse({"ok": True}, status_code=202, headers={"X-Foreign": "yes"})
    context = make_context()

    result = await from_asgi_app(foreign)(context)

    assert result == Matched(context)
    assert context.response.status_code == 202
    assert context.response.get_header("x-foreign") == "yes"
    assert context.response.get_header("content-length") is None
    assert bytes(context.response.body) == b'{"ok":true}'


@pytest.mark.asyncio
async def test_from_asgi_app_replaces_single_valued_headers(make_context):
    context = make_context()
    context.response.set_header("Content-Type", "text/html")
    context.response.set_header("Set-Cookie", "a=1")
    foreign = PlainTextResponse("plain")
    foreign.set_cookie("b", "2")

    await from_asgi_app(foreign)(context)

    assert context.response.get_header("content-type") == "text/plain; charset=utf-8"
    cookies = context.response.get_header("set-cookie")
    assert cookies[0] == "a=1"
    assert cookies[1].startswith("b=2")


@pytest.mark.asyncio
async def test_from_asgi_app_errors_propagate(make_context):
    async def foreign(scope, receive, send):
        raise ValueError("foreign failure")

    with pytest.raises(ValueError, match="foreign failure"):
        await from_asgi_app(foreign)(make_context())


@pytest.mark.asyncio
async def test_from_asgi_app_after_status_written_fails(make_context):
    context = make_context()
    context.response.write_head(200)

    from httpipe.exceptions import HeadersSentError

    with pytest.raises(HeadersSentError):
        await from_asgi_app(PlainTextResponse("late"))(context)


def test_from_asgi_app_embeds_fastapi_with_replayed_body(fastapi_app):
    pipe = POST(body(lambda buf: from_asgi_app(fastapi_app) if buf else never))
    client = serve(pipe)

    response = client.post("/framework/echo", content=b"relayed")

    assert response.status_code == 200
    assert response.json() == {"body": "relayed"}


def test_from_endpoint_async():
    async def endpoint(request: Request):
        return PlainTextResponse(f"hi {request.path_params.get('name', request.url.path)}", status_code=203)

    client = serve(GET(from_endpoint(endpoint)))

    response = client.get("/there")

    assert response.status_code == 203
    assert response.text == "hi /there"


def test_from_endpoint_sync():
    def endpoint(request: Request):
        return PlainTextResponse(request.query_params["q"])

    client = serve(from_endpoint(endpoint))

    assert client.get("/?q=sync").text == "sync"


def test_from_endpoint_composes_with_pipe_headers():
    async def endpoint(request: Request):
        return PlainTextResponse("wrapped")

    client = serve(compose(set_header("X-Pipe", "1"), from_endpoint(endpoint)))

    response = client.get("/")

    assert response.text == "wrapped"
    assert response.headers["x-pipe"] == "1"
    assert response.headers["content-type"].startswith("text/plain")


def test_from_endpoint_content_type_overrides_earlier_stage():
    async def endpoint(request: Request):
        return JSONResponse({"ok": True})

    client = serve(compose(set_header("Content-Type", "text/plain"), from_endpoint(endpoint)))

    response = client.get("/")

    assert response.headers.get_list("content-type") == ["application/json"]
    assert response.json() == {"ok": True}


@pytest.mark.asyncio
async def test_from_endpoint_is_always_matched(make_context):
    async def endpoint(request: Request):
        return PlainTextResponse("", status_code=404)

    context = make_context()
    result = await from_endpoint(endpoint)(context)

    assert result != NOT_MATCHED
    assert context.response.status_code == 404


def test_route_table_end_to_end():
    routes = choose(
        [
            GET(if_path("/", lambda: Ok("index"))),
            GET(parse_path("/users/:id", lambda params: Ok(f"user {params['id']}"))),
            POST(if_path("/users", lambda: body(lambda buf: respond(201, buf)))),
        ]
    )
    client = serve(routes)

    assert client.get("/").text == "index"
    assert client.get("/users/42").text == "user 42"
    created = client.post("/users", content=b"new")
    assert (created.status_code, created.text) == (201, "new")
    assert client.delete("/users/42").status_code == 404
