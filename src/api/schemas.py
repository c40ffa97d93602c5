"""Request models. The JSON "changes" blobs are validated here, at the boundary."""

import json
from datetime import date
from typing import Literal, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from pingpal.application import FriendChanges, Invalid

ModelT = TypeVar("ModelT", bound=BaseModel)


class AccountDetailsBody(BaseModel):
    model_config = ConfigDict(extra="forbid")

    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    birthdate: date | None = None
    sex: Literal["M", "F", "O"] | None = None


class AccountChanges(BaseModel):
    """Editable account fields. Anything else sent by the client is dropped."""

    model_config = ConfigDict(extra="ignore")

    label: str | None = None
    avatar_url: str | None = None
    details: AccountDetailsBody | None = None
    flags: list[str] | None = None

    def to_changes(self) -> dict:
        return self.model_dump(mode="json", exclude_unset=True)


class FriendChangesBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    favorite: bool | None = None
    last_contacted: str | None = None

    def to_changes(self) -> FriendChanges:
        return FriendChanges(favorite=self.favorite, last_contacted=self.last_contacted)


class UserCreatedBody(BaseModel):
    """Payload the identity provider posts after a signup."""

    uid: str
    email: str
    display_name: str | None = None
    photo_url: str | None = None


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def parse_changes(raw: str | None, model: type[ModelT]) -> ModelT | Invalid:
    """Parse a query-string JSON object into model."""
    if raw is None or not raw.strip():
        return Invalid(reason="Changes not provided.")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        return Invalid(reason=f"Changes are not valid JSON: {e.msg}")
    if not isinstance(data, dict):
        return Invalid(reason="Changes must be a JSON object.")
    if not data:
        return Invalid(reason="No changes provided.")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        return Invalid(reason=_describe(e))
