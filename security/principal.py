from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Optional, Union

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class PrincipalKind(str, Enum):
    SUPER_ADMIN = "superAdmin"
    RESTAURANT = "restaurant"
    WORKER = "worker"


class _PrincipalBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    username: str
    displayName: Optional[str] = None
    status: bool = True

    @field_validator("id", mode="before")
    @classmethod
    def convert_objectid(cls, value: Any) -> Any:
        if isinstance(value, ObjectId):
            return str(value)
        return value


class SuperAdminPrincipal(_PrincipalBase):
    kind: Literal["superAdmin"] = "superAdmin"


class RestaurantPrincipal(_PrincipalBase):
    kind: Literal["restaurant"] = "restaurant"

    @property
    def restro_id(self) -> str:
        return self.id


class WorkerPrincipal(_PrincipalBase):
    kind: Literal["worker"] = "worker"
    restroId: str
    roleId: Optional[str] = None
    shiftId: Optional[str] = None

    @field_validator("restroId", "roleId", "shiftId", mode="before")
    @classmethod
    def convert_reference(cls, value: Any) -> Any:
        if isinstance(value, ObjectId):
            return str(value)
        return value

    @property
    def restro_id(self) -> str:
        return self.restroId


SessionPrincipal = Annotated[
    Union[SuperAdminPrincipal, RestaurantPrincipal, WorkerPrincipal],
    Field(discriminator="kind"),
]
StaffPrincipal = Union[RestaurantPrincipal, WorkerPrincipal]

_session_principal_adapter: TypeAdapter[SessionPrincipal] = TypeAdapter(SessionPrincipal)


def principal_from_document(kind: PrincipalKind, document: Mapping[str, Any]) -> SessionPrincipal:
    """Build the request-context principal for a stored record of ``kind``."""
    return _session_principal_adapter.validate_python({**document, "kind": kind.value})
