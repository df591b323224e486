from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator
from typing import Annotated, Optional, List, Any
from enum import Enum
import re
import time


USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")


def now_epoch() -> int:
    return int(time.time())


def stringify_object_ids(values: Any) -> Any:
    if isinstance(values, dict):
        return {
            key: str(value) if isinstance(value, ObjectId) else value
            for key, value in values.items()
        }
    return values


def normalize_username(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    value = value.strip()
    if not USERNAME_PATTERN.match(value):
        raise ValueError("username may only contain letters and digits")
    return value.lower()


class PlanDuration(str, Enum):
    THREE_MONTH = "THREE_MONTH"
    SIX_MONTH = "SIX_MONTH"
    ONE_YEAR = "ONE_YEAR"


class DocumentOut(BaseModel):
    """Base for anything read back from the store: ``_id`` and references become strings.

    The id is serialized under its alias, so responses carry ``_id``.
    """

    id: Optional[str] = Field(default=None, alias="_id")
    createdAt: Optional[int] = None
    updatedAt: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def convert_objectid(cls, values):
        return stringify_object_ids(values)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Address(BaseModel):
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    country: str = Field(min_length=1)
    pincode: str = Field(min_length=1)


Username = Annotated[str, BeforeValidator(normalize_username), Field(min_length=3, max_length=40)]
