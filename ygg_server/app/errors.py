"""Error taxonomy shared by every texture endpoint.

Each error carries the HTTP status it is rendered with and the Yggdrasil
``{"error", "errorMessage"}`` body pair.
"""
from __future__ import annotations

from typing import Dict

MESSAGE_INVALID_TOKEN = "Invalid token."
MESSAGE_INVALID_TEXTURE_TYPE = "Invalid texture type."
MESSAGE_FILE_TOO_LARGE = "File too large(more than 1MiB)"
MESSAGE_CANNOT_OPEN_FILE = "Can not open file."


class YggdrasilError(Exception):
    """Base error rendered as a JSON body with a fixed status."""

    status: int = 500
    error: str = "Internal Server Error"

    def __init__(self, message: str = "", status: int | None = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status

    def as_response(self) -> Dict[str, str]:
        return {"error": self.error, "errorMessage": self.message}


class IllegalArgumentError(YggdrasilError):
    status = 400
    error = "IllegalArgumentException"


class ForbiddenOperationError(YggdrasilError):
    status = 403
    error = "ForbiddenOperationException"


class InvalidTokenError(ForbiddenOperationError):
    """Missing or malformed bearer token; same body as 403, status 401."""

    status = 401

    def __init__(self, message: str = MESSAGE_INVALID_TOKEN):
        super().__init__(message)


class NotFoundError(YggdrasilError):
    status = 404
    error = "Not Found"


class GenericProcessingError(YggdrasilError):
    status = 500
    error = "Internal Server Error"


class InternalError(YggdrasilError):
    status = 500
    error = "Internal Server Error"


class UpstreamError(YggdrasilError):
    """An external lookup failed; ``status`` is the upstream status when known."""

    status = 502
    error = "Upstream Error"


class UpstreamNoContent(UpstreamError):
    """The upstream answered 204: the account exists but has nothing public."""

    status = 204

    def __init__(self, message: str = "No content"):
        super().__init__(message)


def error_body(exc: Exception) -> Dict[str, str]:
    if isinstance(exc, YggdrasilError):
        return exc.as_response()
    return {"error": "Internal Server Error", "errorMessage": str(exc)}


def error_status(exc: Exception) -> int:
    if isinstance(exc, YggdrasilError):
        return exc.status
    return 500


__all__ = [
    "YggdrasilError",
    "IllegalArgumentError",
    "ForbiddenOperationError",
    "InvalidTokenError",
    "NotFoundError",
    "GenericProcessingError",
    "InternalError",
    "UpstreamError",
    "UpstreamNoContent",
    "error_body",
    "error_status",
]
