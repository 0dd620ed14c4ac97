"""Sample pipes, served by `python -m httpipe` when HTTPIPE_APP is not set."""

from httpipe.core.algebra import choose, compose
from httpipe.http import GET, POST, Ok, body, if_path, parse_path, set_header

hello = GET(if_path("/", lambda: Ok("Hello World!")))

echo = POST(if_path("/echo", lambda: body(lambda buf: Ok(buf))))

greet = GET(
    parse_path(
        "/hello/:name",
        lambda params: compose(set_header("Content-Type", "text/plain; charset=utf-8"), Ok(f"Hello {params['name']}!")),
    )
)

pipe = choose([hello, echo, greet])
