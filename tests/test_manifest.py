import base64
import json

from ygg_server.app.manifest import decode_manifest, find_skin_url


def encode(document) -> str:
    return base64.b64encode(json.dumps(document).encode("utf-8")).decode("ascii")


def textures_property(skin_url=None, cape_url=None):
    textures = {}
    if skin_url:
        textures["SKIN"] = {"url": skin_url}
    if cape_url:
        textures["CAPE"] = {"url": cape_url}
    return {"name": "textures", "value": encode({"textures": textures})}


def test_decode_manifest_reads_skin_and_cape():
    manifest = decode_manifest(
        textures_property("https://example/s.png", "https://example/c.png")["value"]
    )
    assert manifest.skin_url == "https://example/s.png"
    assert manifest.textures.cape == {"url": "https://example/c.png"}


def test_decode_manifest_rejects_bad_payloads():
    assert decode_manifest("%%% not base64 %%%") is None
    assert decode_manifest(base64.b64encode(b"not json").decode()) is None
    assert decode_manifest(encode(["textures"])) is None
    assert decode_manifest(encode({"textures": "SKIN"})) is None


def test_find_skin_url_first_match_wins():
    properties = [
        {"name": "other", "value": encode({"textures": {"SKIN": {"url": "https://example/x.png"}}})},
        textures_property("https://example/first.png"),
        textures_property("https://example/second.png"),
    ]
    assert find_skin_url(properties) == "https://example/first.png"


def test_find_skin_url_skips_malformed_entries():
    properties = [
        "not an object",
        {"name": "textures"},
        {"name": "textures", "value": 42},
        {"name": "textures", "value": "!!corrupt!!"},
        textures_property(cape_url="https://example/c.png"),
        textures_property("https://example/s.png"),
    ]
    assert find_skin_url(properties) == "https://example/s.png"


def test_find_skin_url_miss():
    assert find_skin_url([{"name": "textures", "value": "!!corrupt!!"}]) is None
    assert find_skin_url([]) is None


def test_malformed_cape_does_not_hide_skin():
    value = encode({"textures": {"SKIN": {"url": "https://example/s.png"}, "CAPE": "x"}})
    assert find_skin_url([{"name": "textures", "value": value}]) == "https://example/s.png"


def test_unexpected_signature_does_not_hide_skin():
    prop = dict(textures_property("https://example/s.png"), signature=1)
    assert find_skin_url([prop]) == "https://example/s.png"
