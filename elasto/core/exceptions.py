from typing import Any

__all__ = [
    "BaseError",
    "EngineError",
    "NotFoundError",
    "ParseError",
    "TransportError",
    "ValidationError",
]


class BaseError(Exception):
    status_code: int

    def __init__(self, message: str = "", *args: Any):
        super().__init__(message, *args)
        self.message = message


class ValidationError(BaseError):
    """Caller misuse detected before any request is sent."""

    status_code = 400


class TransportError(BaseError):
    """Engine could not be reached."""

    status_code = 503


class ParseError(BaseError):
    """Engine response body is not valid JSON."""

    status_code = 502

    def __init__(self, message: str = "", content: str | None = None):
        super().__init__(message)
        self.content = content


class EngineError(BaseError):
    """Engine rejected the request."""

    status_code = 500

    def __init__(
        self,
        message: str = "",
        status_code: int | None = None,
        body: Any = None,
    ):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
        self.body = body


class NotFoundError(EngineError):
    status_code = 404
