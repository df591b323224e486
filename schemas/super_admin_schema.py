from schemas.imports import *
from security.hash import hash_password


class SuperAdminRegister(BaseModel):
    displayName: str = Field(min_length=1)
    username: Username
    password: str = Field(min_length=6)

    model_config = {"extra": "forbid"}


class SuperAdminCreate(SuperAdminRegister):
    status: bool = True
    createdAt: int = Field(default_factory=now_epoch)
    updatedAt: int = Field(default_factory=now_epoch)

    model_config = {"extra": "ignore"}

    @model_validator(mode="after")
    def obscure_password(self):
        self.password = hash_password(self.password)
        return self


class SuperAdminUpdate(BaseModel):
    displayName: Optional[str] = Field(default=None, min_length=1)
    username: Optional[Username] = None

    model_config = {"extra": "forbid"}


class SuperAdminOut(DocumentOut):
    displayName: str
    username: str
    status: bool = True
