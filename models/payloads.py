"""Input schemas for category mutations.

Payloads arrive as plain dictionaries from the calling layer and are parsed
here before any store access happens.
"""

from typing import Annotated, Any, Dict, Optional, Type, TypeVar, Union

import pydantic
from pydantic import BaseModel, ConfigDict, StringConstraints, field_validator

import errors
from models.category import CategoryType

MAX_NAME_LENGTH = 100

CategoryName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_NAME_LENGTH)
]
ColorCode = Annotated[str, StringConstraints(pattern=r"^#[0-9A-Fa-f]{6}$")]


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class CategoryCreate(BaseModel):
    """Payload for creating a category."""

    model_config = ConfigDict(extra="forbid")

    name: CategoryName
    type: CategoryType
    color: Optional[ColorCode] = None
    parent_id: Optional[str] = None

    @field_validator("parent_id", mode="before")
    @classmethod
    def clean_parent(cls, value):
        return _blank_to_none(value)


class CategoryUpdate(BaseModel):
    """Payload for updating a category.

    Only the fields present in the payload are changed; ``type`` is not
    accepted because it is immutable. An explicit ``parent_id`` of None moves
    the category to the root, an explicit ``color`` of None clears it.
    """

    model_config = ConfigDict(extra="forbid")

    name: Optional[CategoryName] = None
    color: Optional[ColorCode] = None
    parent_id: Optional[str] = None

    @field_validator("parent_id", mode="before")
    @classmethod
    def clean_parent(cls, value):
        return _blank_to_none(value)

    @field_validator("name")
    @classmethod
    def name_not_null(cls, value):
        if value is None:
            raise ValueError("name cannot be null")
        return value

    def changes(self) -> Dict[str, Any]:
        """Return only the fields the caller actually sent."""
        return {name: getattr(self, name) for name in self.model_fields_set}


PayloadT = TypeVar("PayloadT", bound=BaseModel)


def parse_payload(schema: Type[PayloadT], data: Union[PayloadT, Dict[str, Any]]) -> PayloadT:
    """Validate raw input against a schema.

    Raises:
        errors.ValidationError: With per-field messages in details["fields"].
    """
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data or {})
    except pydantic.ValidationError as e:
        fields = {
            ".".join(str(part) for part in err["loc"]) or "payload": err["msg"]
            for err in e.errors()
        }
        raise errors.ValidationError(
            "Invalid category data: "
            + "; ".join(f"{k}: {v}" for k, v in fields.items()),
            {"fields": fields},
        ) from e
