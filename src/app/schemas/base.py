"""Base schema classes.

Every schema serializes with camelCase keys and accepts either camelCase or
snake_case on input.

- ``APIRequest``: incoming request bodies
- ``APIResponse``: outgoing response bodies
- ``DownstreamRequest``: bodies sent to third-party APIs
- ``DownstreamResponse``: bodies received from third-party APIs
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _BaseSchema(BaseModel):
    """Shared configuration. Inherit from one of the public subclasses."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
        serialize_by_alias=True,
    )


class APIRequest(_BaseSchema):
    """Incoming request body. Unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")


class APIResponse(_BaseSchema):
    """Outgoing response body. Only declared fields are allowed.

    Built from repository models with ``model_validate(obj)``; attributes
    the response does not declare are not read.
    """

    model_config = ConfigDict(extra="forbid", from_attributes=True)


class DownstreamRequest(_BaseSchema):
    """Body sent to a third-party API."""

    model_config = ConfigDict(extra="forbid")


class DownstreamResponse(_BaseSchema):
    """Body received from a third-party API; new upstream fields are ignored."""

    model_config = ConfigDict(extra="ignore")


class SuccessResponse(APIResponse):
    success: bool = True


class IdResponse(APIResponse):
    id: int
