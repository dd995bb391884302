"""Filesystem texture store."""
from __future__ import annotations

import hashlib
import io
import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Callable, Dict, Optional, Protocol
from uuid import UUID

import requests
from PIL import Image, UnidentifiedImageError

from .config import settings
from .errors import (
    MESSAGE_FILE_TOO_LARGE,
    MESSAGE_INVALID_TOKEN,
    ForbiddenOperationError,
    IllegalArgumentError,
    NotFoundError,
)
from .schemas import ModelType, TextureType

logger = logging.getLogger(__name__)

HASH_PATTERN = re.compile(r"^[0-9a-f]{64}$")


class TextureStore(Protocol):
    def get_texture(self, texture_hash: str) -> bytes:
        ...

    def assign_url(
        self,
        access_token: str,
        profile_id: UUID,
        url: str,
        texture_type: TextureType,
        model: ModelType,
    ) -> None:
        ...

    def assign_upload(
        self,
        access_token: str,
        profile_id: UUID,
        stream: BinaryIO,
        texture_type: TextureType,
        model: ModelType,
    ) -> None:
        ...

    def remove(self, access_token: str, profile_id: UUID, texture_type: TextureType) -> None:
        ...


def textures_root() -> Path:
    root = settings.data_root / "textures"
    root.mkdir(parents=True, exist_ok=True)
    return root


def profiles_root() -> Path:
    root = settings.data_root / "profiles"
    root.mkdir(parents=True, exist_ok=True)
    return root


def texture_path(texture_hash: str) -> Path:
    return textures_root() / f"{texture_hash}.png"


def profile_record_path(profile_id: UUID) -> Path:
    return profiles_root() / f"{profile_id.hex}.json"


def load_profile_record(profile_id: UUID) -> Dict[str, Dict[str, str]]:
    record_path = profile_record_path(profile_id)
    if not record_path.exists():
        return {}
    return json.loads(record_path.read_text(encoding="utf-8"))


def save_profile_record(profile_id: UUID, record: Dict[str, Dict[str, str]]) -> None:
    record_path = profile_record_path(profile_id)
    record_path.write_text(json.dumps(record, indent=2, ensure_ascii=False), encoding="utf-8")


def utc_timestamp() -> str:
    return datetime.utcnow().replace(microsecond=0).isoformat() + "Z"


def normalize_png(data: bytes) -> bytes:
    """Decode ``data`` as a PNG and re-encode it as RGBA."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            if image.format != "PNG":
                raise IllegalArgumentError("Texture must be a PNG image.")
            if image.mode != "RGBA":
                image = image.convert("RGBA")
            output = io.BytesIO()
            image.save(output, format="PNG")
    except (UnidentifiedImageError, OSError) as exc:
        raise IllegalArgumentError(f"Invalid texture image: {exc}") from exc
    return output.getvalue()


def fetch_texture(url: str, max_bytes: int, timeout: float) -> bytes:
    """Download at most ``max_bytes`` of an image."""
    try:
        with requests.get(url, stream=True, timeout=timeout) as response:
            if response.status_code != 200:
                raise IllegalArgumentError(
                    f"Cannot download texture: {url} (status={response.status_code})"
                )
            buffer = bytearray()
            for chunk in response.iter_content(chunk_size=64 * 1024):
                buffer.extend(chunk)
                if len(buffer) > max_bytes:
                    raise IllegalArgumentError(MESSAGE_FILE_TOO_LARGE)
    except requests.RequestException as exc:
        raise IllegalArgumentError(f"Cannot download texture: {url} ({exc})") from exc
    return bytes(buffer)


class LocalTextureStore:
    """Stores textures as ``textures/<sha256>.png`` and one JSON record per profile."""

    def __init__(
        self,
        authorize: Optional[Callable[[str, UUID], bool]] = None,
        max_bytes: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        self._authorize = authorize
        self.max_bytes = max_bytes if max_bytes is not None else settings.max_upload_bytes
        self.timeout = timeout if timeout is not None else settings.request_timeout

    def get_texture(self, texture_hash: str) -> bytes:
        if not HASH_PATTERN.match(texture_hash):
            raise NotFoundError(f"Texture {texture_hash} not found.")
        path = texture_path(texture_hash)
        if not path.exists():
            raise NotFoundError(f"Texture {texture_hash} not found.")
        return path.read_bytes()

    def assign_url(
        self,
        access_token: str,
        profile_id: UUID,
        url: str,
        texture_type: TextureType,
        model: ModelType,
    ) -> None:
        self._check_token(access_token, profile_id)
        data = fetch_texture(url, self.max_bytes, self.timeout)
        self._assign(profile_id, data, texture_type, model)

    def assign_upload(
        self,
        access_token: str,
        profile_id: UUID,
        stream: BinaryIO,
        texture_type: TextureType,
        model: ModelType,
    ) -> None:
        self._check_token(access_token, profile_id)
        data = stream.read(self.max_bytes + 1)
        if len(data) > self.max_bytes:
            raise IllegalArgumentError(MESSAGE_FILE_TOO_LARGE)
        self._assign(profile_id, data, texture_type, model)

    def remove(self, access_token: str, profile_id: UUID, texture_type: TextureType) -> None:
        self._check_token(access_token, profile_id)
        record = load_profile_record(profile_id)
        if record.pop(texture_type.value, None) is None:
            return
        save_profile_record(profile_id, record)
        logger.info("Removed %s of profile %s", texture_type.value, profile_id)

    def _check_token(self, access_token: str, profile_id: UUID) -> None:
        if self._authorize is not None and not self._authorize(access_token, profile_id):
            raise ForbiddenOperationError(MESSAGE_INVALID_TOKEN)

    def _assign(
        self, profile_id: UUID, data: bytes, texture_type: TextureType, model: ModelType
    ) -> None:
        png = normalize_png(data)
        texture_hash = hashlib.sha256(png).hexdigest()
        path = texture_path(texture_hash)
        if not path.exists():
            path.write_bytes(png)

        record = load_profile_record(profile_id)
        entry = {"hash": texture_hash, "updated_at": utc_timestamp()}
        if texture_type is TextureType.SKIN:
            entry["model"] = model.value
        record[texture_type.value] = entry
        save_profile_record(profile_id, record)
        logger.info("Assigned %s %s to profile %s", texture_type.value, texture_hash, profile_id)


__all__ = [
    "TextureStore",
    "LocalTextureStore",
    "fetch_texture",
    "load_profile_record",
    "normalize_png",
    "utc_timestamp",
]
