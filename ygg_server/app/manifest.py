"""Decoding of the base64 ``textures`` profile property."""
from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from .schemas import ProfileProperty, SkinManifest

logger = logging.getLogger(__name__)

TEXTURES_PROPERTY = "textures"


def decode_manifest(value: str) -> Optional[SkinManifest]:
    """Return the manifest inside a property value, or ``None`` if it is malformed."""
    try:
        decoded = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return None
    try:
        return SkinManifest.model_validate(json.loads(decoded))
    except (ValueError, ValidationError):
        return None


def find_skin_url(properties: Iterable[Any]) -> Optional[str]:
    """First SKIN url among the ``textures`` properties, in upstream order."""
    for index, entry in enumerate(properties):
        try:
            prop = ProfileProperty.model_validate(entry)
        except ValidationError:
            continue
        if prop.name != TEXTURES_PROPERTY:
            continue

        manifest = decode_manifest(prop.value)
        skin_url = manifest.skin_url if manifest else None
        if skin_url is None:
            logger.warning("Skipping undecodable textures property #%d", index)
            continue
        return skin_url
    return None


__all__ = ["decode_manifest", "find_skin_url", "TEXTURES_PROPERTY"]
