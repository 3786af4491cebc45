"""Pydantic models shared by every VISOR response."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ResponseCode(StrEnum):
    SUCCESS = "Success"
    INCOMPLETE_BODY = "IncompleteBody"
    NOT_FOUND = "NotFound"
    INTERNAL_ERROR = "InternalError"
    WARNING = "Warning"
    IMMUTABLE_REPORT = "ImmutableReport"
    CONFLICT = "Conflict"
    UNAUTHORIZED = "Unauthorized"


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys, accepting either form on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(BaseModel):
    """Standard response envelope: ``{message, code, data?}``."""

    model_config = ConfigDict(extra="forbid")

    message: str
    code: ResponseCode
    data: Any | None = None


def envelope(message: str, code: ResponseCode = ResponseCode.SUCCESS, data: Any = None) -> dict:
    """Render an envelope as a JSON-ready dict, omitting empty ``data``."""
    body = Envelope(message=message, code=code, data=data).model_dump(mode="json")
    if data is None:
        body.pop("data")
    return body
