"""Pydantic schemas used by the API."""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional
from uuid import UUID

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

_URL_ADAPTER = TypeAdapter(AnyUrl)


class TextureType(str, Enum):
    SKIN = "skin"
    CAPE = "cape"


class ModelVariant(str, Enum):
    CLASSIC = "default"
    SLIM = "slim"

    @property
    def model_type(self) -> "ModelType":
        return ModelType.ALEX if self is ModelVariant.SLIM else ModelType.STEVE


class ModelType(str, Enum):
    """Model name as recorded by the texture store."""

    STEVE = "STEVE"
    ALEX = "ALEX"

    @classmethod
    def from_form(cls, value: Optional[str]) -> "ModelType":
        if value and value.strip().lower() in ("alex", "slim"):
            return cls.ALEX
        return cls.STEVE


class SetTextureRequest(BaseModel):
    """Body of ``PUT /texture/{uuid}/{textureType}``."""

    url: str = Field(..., description="Texture URL to assign")
    model: ModelVariant = Field(ModelVariant.CLASSIC, description="Skin model")
    force_mojang_skin: int = Field(
        0,
        alias="forceMojangSkin",
        description="0: use url, 1: import the profile's Mojang skin, 2: import by username",
    )
    username: Optional[str] = Field(None, description="Mojang username for import level 2")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        # keep the caller's spelling, AnyUrl normalises trailing slashes
        try:
            _URL_ADAPTER.validate_python(value)
        except ValidationError as exc:
            raise ValueError(f"invalid url: {exc.errors()[0]['msg']}") from exc
        return value

    @field_validator("model", mode="before")
    @classmethod
    def default_model(cls, value):
        if value in (None, ""):
            return ModelVariant.CLASSIC
        return value

    @field_validator("force_mojang_skin", mode="before")
    @classmethod
    def default_level(cls, value):
        return 0 if value is None else value


class ExternalAccount(BaseModel):
    id: UUID
    name: str


class ProfileProperty(BaseModel):
    name: str
    value: str
    signature: Any = None


class TextureEntry(BaseModel):
    url: Optional[str] = None
    metadata: Any = None


class ManifestTextures(BaseModel):
    skin: Optional[TextureEntry] = Field(None, alias="SKIN")
    cape: Any = Field(None, alias="CAPE")


class SkinManifest(BaseModel):
    textures: ManifestTextures

    @property
    def skin_url(self) -> Optional[str]:
        return self.textures.skin.url if self.textures.skin else None


class ErrorResponse(BaseModel):
    error: str
    errorMessage: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str
