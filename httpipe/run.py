"""
Script to serve a pipe with uvicorn.
"""

import importlib
import logging

import uvicorn
from starlette.types import ASGIApp

from httpipe.adapters.asgi import as_asgi_app
from httpipe.core.logging import setup_logging
from httpipe.exceptions import AppLoadError
from httpipe.http.context import HttpPipe
from httpipe.settings import Settings

logger = logging.getLogger(__name__)


def load_pipe(target: str) -> HttpPipe:
    """
    Imports the pipe named by a 'module:attribute' target.

    Args:
        target: e.g. "httpipe.demo:pipe". Dotted attributes are followed.

    Returns:
        The pipe object.

    Raises:
        AppLoadError: If the target is malformed, the module cannot be imported,
            or the attribute is missing or not callable.
    """
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise AppLoadError(f"App target must look like 'module:attribute', got '{target}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise AppLoadError(f"Could not import module '{module_name}' for app target '{target}': {e}") from e

    obj = module
    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as e:
            raise AppLoadError(f"Module '{module_name}' has no attribute '{attr_path}'") from e

    if not callable(obj):
        raise AppLoadError(f"App target '{target}' is not a pipe (got {type(obj).__name__})")
    return obj


def create_app() -> ASGIApp:
    """Uvicorn factory: configures logging and serves the pipe named by HTTPIPE_APP."""
    setup_logging()
    settings = Settings()
    target = settings.get_app_target()
    pipe = load_pipe(target)
    logger.info(f"Serving pipe '{target}' (run mode: {settings.get_run_mode()})")
    return as_asgi_app(pipe, debug=settings.dev_mode())


def main():
    """Run the server."""
    settings = Settings()

    uvicorn.run(
        "httpipe.run:create_app",
        factory=True,
        host=settings.get_app_host(),
        port=settings.get_app_port(),
        reload=settings.get_app_reload(),
        log_level=settings.get_log_level().lower(),
    )


if __name__ == "__main__":
    main()
