"""Mojang skin import: replace a client supplied url with the official skin.

``forceMojangSkin`` on a set-texture request selects how far the import
escalates:

* ``0`` keeps the client's url.
* ``1`` looks up the path profile id on the session server and takes the
  SKIN url out of its ``textures`` property.
* ``2`` first resolves ``username`` to an account id on api.mojang.com and
  then continues as ``1`` with that id.

A profile that carries no decodable ``textures`` property leaves the client
url in place without raising.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type
from uuid import UUID

from pydantic import ValidationError

from .errors import (
    GenericProcessingError,
    NotFoundError,
    UpstreamError,
    UpstreamNoContent,
    YggdrasilError,
)
from .manifest import find_skin_url
from .mojang import ExternalProfileClient
from .schemas import ExternalAccount, SetTextureRequest

logger = logging.getLogger(__name__)


class SkinImportPolicy(Enum):
    NONE = "none"
    IMPORT_BY_PROFILE = "profile"
    IMPORT_BY_ACCOUNT = "account"

    @classmethod
    def from_level(cls, level: int) -> "SkinImportPolicy":
        if level == 2:
            return cls.IMPORT_BY_ACCOUNT
        if level > 0:
            return cls.IMPORT_BY_PROFILE
        return cls.NONE


class AccountLookupOutcome(Enum):
    RESOLVED = "resolved"
    MISSING_USERNAME = "missing username"
    NO_CONTENT = "no content"
    TRANSPORT_FAILURE = "transport failure"
    MISSING_NAME = "missing name"
    MALFORMED_ID = "malformed id"


# Every unresolved username is reported the same way, whatever the cause.
ACCOUNT_LOOKUP_ERRORS: Dict[AccountLookupOutcome, Type[YggdrasilError]] = {
    AccountLookupOutcome.MISSING_USERNAME: NotFoundError,
    AccountLookupOutcome.NO_CONTENT: NotFoundError,
    AccountLookupOutcome.TRANSPORT_FAILURE: NotFoundError,
    AccountLookupOutcome.MISSING_NAME: NotFoundError,
    AccountLookupOutcome.MALFORMED_ID: NotFoundError,
}


class MojangSkinResolver:
    def __init__(self, client: ExternalProfileClient):
        self.client = client

    def resolve(self, request: SetTextureRequest, profile_id: UUID) -> str:
        """Return the url the store should assign for ``request``."""
        policy = SkinImportPolicy.from_level(request.force_mojang_skin)
        if policy is SkinImportPolicy.NONE:
            return request.url

        target_id = profile_id
        if policy is SkinImportPolicy.IMPORT_BY_ACCOUNT:
            target_id = self.resolve_account(request.username).id

        skin_url = self.resolve_profile_skin(target_id)
        if skin_url is None:
            logger.info(
                "No Mojang skin found for %s, keeping client url %s", target_id, request.url
            )
            return request.url

        logger.info("Imported Mojang skin for %s (%s): %s", profile_id, policy.value, skin_url)
        return skin_url

    def resolve_account(self, username: Optional[str]) -> ExternalAccount:
        outcome, account = self._lookup_account(username)
        if account is None:
            logger.warning("Mojang account %r not resolved: %s", username, outcome.value)
            raise ACCOUNT_LOOKUP_ERRORS[outcome](f"Mojang account {username!r} not found")
        return account

    def _lookup_account(
        self, username: Optional[str]
    ) -> Tuple[AccountLookupOutcome, Optional[ExternalAccount]]:
        if not username:
            return AccountLookupOutcome.MISSING_USERNAME, None
        try:
            payload = self.client.resolve_account(username)
        except UpstreamNoContent:
            return AccountLookupOutcome.NO_CONTENT, None
        except UpstreamError:
            return AccountLookupOutcome.TRANSPORT_FAILURE, None

        if not isinstance(payload.get("name"), str):
            return AccountLookupOutcome.MISSING_NAME, None
        try:
            account = ExternalAccount.model_validate(payload)
        except ValidationError:
            return AccountLookupOutcome.MALFORMED_ID, None
        return AccountLookupOutcome.RESOLVED, account

    def resolve_profile_skin(self, profile_id: UUID) -> Optional[str]:
        """SKIN url of a public profile, ``None`` when no property decodes."""
        try:
            payload = self.client.resolve_profile(profile_id)
        except UpstreamNoContent as exc:
            raise NotFoundError(f"Mojang profile {profile_id.hex} has no public profile") from exc

        properties = _properties_of(payload)
        if not properties:
            raise GenericProcessingError("properties not found or of incorrect type in result")
        return find_skin_url(properties)


def _properties_of(payload: Dict[str, Any]) -> Optional[list]:
    properties = payload.get("properties")
    return properties if isinstance(properties, list) else None


__all__ = [
    "SkinImportPolicy",
    "AccountLookupOutcome",
    "ACCOUNT_LOOKUP_ERRORS",
    "MojangSkinResolver",
]
