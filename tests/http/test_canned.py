import pytest
from httpipe.core.algebra import choose, never
from httpipe.core.result import Matched
from httpipe.http import canned
from httpipe.http.canned import (
    STATUS_CONSTRUCTORS,
    Found,
    InternalServerError,
    MovedPermanently,
    NoContent,
    NotFound,
    Ok,
    Unauthorized,
)

pytestmark = pytest.mark.asyncio

REDIRECTS = {"MovedPermanently", "Found"}


@pytest.mark.parametrize("code, name", sorted(STATUS_CONSTRUCTORS.items()))
async def test_constructor_writes_its_code(make_context, code, name):
    constructor = getattr(canned, name)
    if name in REDIRECTS:
        pipe = constructor("/elsewhere")
    elif name == "Unauthorized":
        pipe = constructor("Basic")
    else:
        pipe = constructor()

    context = make_context()
    assert await pipe(context) == Matched(context)
    assert context.response.status_code == code
    assert bytes(context.response.body) == b""


@pytest.mark.parametrize(
    "name",
    [n for n in STATUS_CONSTRUCTORS.values() if n not in REDIRECTS and n != "Unauthorized"],
)
async def test_constructor_accepts_body_and_encoding(make_context, name):
    context = make_context()
    await getattr(canned, name)("café", "latin-1")(context)
    assert bytes(context.response.body) == "café".encode("latin-1")


async def test_status_table_is_complete():
    assert sorted(STATUS_CONSTRUCTORS) == [
        100, 101, 200, 201, 202, 204, 301, 302, 304, 400, 401, 403, 404, 405, 406, 408,
        409, 410, 415, 422, 428, 429, 500, 501, 502, 503, 504, 505,
    ]  # fmt: skip
    for name in STATUS_CONSTRUCTORS.values():
        assert callable(getattr(canned, name))


async def test_ok_with_bytes(context):
    await Ok(b"\x00\x01")(context)
    assert bytes(context.response.body) == b"\x00\x01"


async def test_moved_permanently_sets_location(context):
    await MovedPermanently("https://example.com/new")(context)
    assert context.response.status_code == 301
    assert context.response.get_header("location") == "https://example.com/new"


async def test_found_sets_location(context):
    await Found("/login")(context)
    assert context.response.status_code == 302
    assert context.response.get_header("Location") == "/login"


async def test_unauthorized_sets_challenge_and_body(context):
    await Unauthorized('Bearer realm="api"', "denied")(context)
    assert context.response.status_code == 401
    assert context.response.get_header("WWW-Authenticate") == 'Bearer realm="api"'
    assert bytes(context.response.body) == b"denied"


async def test_unauthorized_multiple_challenges(context):
    await Unauthorized(["Basic", "Bearer"])(context)
    assert context.response.get_header("www-authenticate") == ["Basic", "Bearer"]


async def test_no_content_without_body(context):
    await NoContent()(context)
    assert context.response.status_code == 204


async def test_first_match_wins(context):
    pipe = choose([never, Ok(), InternalServerError()])
    assert await pipe(context) == Matched(context)
    assert context.response.status_code == 200


async def test_not_found_body(context):
    await NotFound("missing")(context)
    assert (context.response.status_code, bytes(context.response.body)) == (404, b"missing")
