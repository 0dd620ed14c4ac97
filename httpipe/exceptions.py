# httpipe exceptions
#
# Everything here belongs to the failure channel. A pipe that merely declines
# an exchange returns NotMatched instead of raising.


class HttpPipeError(Exception):
    """Base exception for all pipeline failures."""

    def __init__(self, *args, status_code: int | None = None, detail: str | None = None):
        super().__init__(*args)
        self.status_code = status_code
        # Use the first arg as detail if detail kwarg is not provided and args exist
        self.detail = detail or (args[0] if args else None)


class PatternCompileError(ValueError, HttpPipeError):
    """Raised when a path template cannot be compiled."""

    def __init__(self, *args, status_code: int | None = None, detail: str | None = None):
        HttpPipeError.__init__(self, *args, status_code=status_code, detail=detail)


class HeadersSentError(HttpPipeError):
    """Raised when the status line or headers are changed after the head was written."""

    def __init__(self, detail: str, status_code: int = 500):
        super().__init__(detail, status_code=status_code, detail=detail)


class BodyReadError(HttpPipeError):
    """Raised when the request body could not be read."""

    def __init__(self, detail: str, status_code: int = 400):
        super().__init__(detail, status_code=status_code, detail=detail)


class BodyTooLargeError(BodyReadError):
    """Raised when the request body exceeds the configured limit."""

    def __init__(self, detail: str, status_code: int = 413):
        super().__init__(detail, status_code=status_code)


class AppLoadError(ValueError, HttpPipeError):
    """Raised when the runner cannot import the configured pipe."""

    def __init__(self, *args, status_code: int | None = None, detail: str | None = None):
        HttpPipeError.__init__(self, *args, status_code=status_code, detail=detail)
