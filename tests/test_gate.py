import json
from uuid import UUID

import pytest

from ygg_server.app.errors import ForbiddenOperationError, IllegalArgumentError, InvalidTokenError
from ygg_server.app.gate import (
    bind_set_texture_request,
    check_texture_path,
    parse_access_token,
    parse_profile_id,
    parse_texture_type,
)
from ygg_server.app.schemas import ModelType, ModelVariant, TextureType

PROFILE_ID = "069a79f4-44e9-4726-a5be-fca90e38aaf5"


def test_access_token_strips_scheme():
    assert parse_access_token("Bearer abc123") == "abc123"
    assert parse_access_token("Bearer x") == "x"


@pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer "])
def test_short_token_is_rejected(header):
    with pytest.raises(InvalidTokenError) as info:
        parse_access_token(header)
    assert info.value.status == 401
    assert info.value.as_response() == {
        "error": "ForbiddenOperationException",
        "errorMessage": "Invalid token.",
    }


def test_profile_id_accepts_dashed_and_undashed():
    expected = UUID(PROFILE_ID)
    assert parse_profile_id(PROFILE_ID) == expected
    assert parse_profile_id(expected.hex) == expected


def test_profile_id_rejects_garbage():
    with pytest.raises(IllegalArgumentError) as info:
        parse_profile_id("not-a-uuid")
    assert info.value.status == 400


def test_texture_type():
    assert parse_texture_type("skin") is TextureType.SKIN
    assert parse_texture_type("cape") is TextureType.CAPE
    with pytest.raises(IllegalArgumentError) as info:
        parse_texture_type("SKIN")
    assert info.value.message == "Invalid texture type."


def test_path_checks_token_first():
    with pytest.raises(InvalidTokenError):
        check_texture_path("short", "bad", "elytra")
    with pytest.raises(IllegalArgumentError):
        check_texture_path("Bearer token", "bad", "skin")
    assert check_texture_path("Bearer token", PROFILE_ID, "cape") == (
        "token",
        UUID(PROFILE_ID),
        TextureType.CAPE,
    )


def test_bind_defaults_model_and_level():
    request = bind_set_texture_request(json.dumps({"url": "https://example.com/skin.png"}))
    assert request.url == "https://example.com/skin.png"
    assert request.model is ModelVariant.CLASSIC
    assert request.model.model_type is ModelType.STEVE
    assert request.force_mojang_skin == 0
    assert request.username is None


def test_bind_keeps_url_verbatim():
    request = bind_set_texture_request(b'{"url": "https://example.com", "model": ""}')
    assert request.url == "https://example.com"
    assert request.model is ModelVariant.CLASSIC


def test_bind_reads_import_fields():
    request = bind_set_texture_request(
        {"url": "https://example.com/a.png", "model": "slim", "forceMojangSkin": 2, "username": "Notch"}
    )
    assert request.model.model_type is ModelType.ALEX
    assert request.force_mojang_skin == 2
    assert request.username == "Notch"


@pytest.mark.parametrize(
    "body",
    [
        b"",
        b"not json",
        b"[]",
        json.dumps({"model": "default"}),
        json.dumps({"url": "not a url"}),
        json.dumps({"url": "https://example.com/a.png", "model": "wide"}),
    ],
)
def test_bind_failures_are_forbidden(body):
    with pytest.raises(ForbiddenOperationError) as info:
        bind_set_texture_request(body)
    assert info.value.status == 403
    assert info.value.message
