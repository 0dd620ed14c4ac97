from httpipe.adapters.asgi import (
    PipeApp,
    PipeMiddleware,
    as_asgi_app,
    build_response,
    from_asgi_app,
    from_endpoint,
    pipe_error_handler,
    run_pipe,
)

__all__ = [
    "PipeApp",
    "PipeMiddleware",
    "as_asgi_app",
    "build_response",
    "from_asgi_app",
    "from_endpoint",
    "pipe_error_handler",
    "run_pipe",
]
