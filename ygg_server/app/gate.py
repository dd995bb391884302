"""Request validation shared by the texture endpoints."""
from __future__ import annotations

import json
from typing import Any, Optional, Tuple, Union
from uuid import UUID

from pydantic import ValidationError

from .errors import (
    MESSAGE_INVALID_TEXTURE_TYPE,
    ForbiddenOperationError,
    IllegalArgumentError,
    InvalidTokenError,
)
from .schemas import SetTextureRequest, TextureType

BEARER_PREFIX_LENGTH = len("Bearer ")


def parse_access_token(authorization: Optional[str]) -> str:
    """Strip the scheme from an ``Authorization`` header value."""
    if authorization is None or len(authorization) <= BEARER_PREFIX_LENGTH:
        raise InvalidTokenError()
    return authorization[BEARER_PREFIX_LENGTH:]


def parse_profile_id(raw: str) -> UUID:
    """Accept both the dashed and the undashed rendering of a profile id."""
    try:
        return UUID(raw)
    except (TypeError, ValueError) as exc:
        raise IllegalArgumentError(f"Invalid UUID string: {raw}") from exc


def parse_texture_type(raw: str) -> TextureType:
    try:
        return TextureType(raw)
    except ValueError as exc:
        raise IllegalArgumentError(MESSAGE_INVALID_TEXTURE_TYPE) from exc


def bind_set_texture_request(body: Union[bytes, str, Any]) -> SetTextureRequest:
    """Bind a raw JSON body; every binding failure is a 403."""
    try:
        if isinstance(body, (bytes, str)):
            payload = json.loads(body or "null")
        else:
            payload = body
        if not isinstance(payload, dict):
            raise ForbiddenOperationError("request body must be a JSON object")
        return SetTextureRequest.model_validate(payload)
    except json.JSONDecodeError as exc:
        raise ForbiddenOperationError(f"invalid JSON body: {exc.msg}") from exc
    except ValidationError as exc:
        raise ForbiddenOperationError(_describe(exc)) from exc


def check_texture_path(
    authorization: Optional[str], raw_profile_id: str, raw_texture_type: str
) -> Tuple[str, UUID, TextureType]:
    """Token, profile id and texture type, checked in that order."""
    access_token = parse_access_token(authorization)
    profile_id = parse_profile_id(raw_profile_id)
    texture_type = parse_texture_type(raw_texture_type)
    return access_token, profile_id, texture_type


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts)


__all__ = [
    "parse_access_token",
    "parse_profile_id",
    "parse_texture_type",
    "bind_set_texture_request",
    "check_texture_path",
]
