from schemas.imports import *


class LoginRequest(BaseModel):
    username: Optional[str] = None
    phoneNumber: Optional[str] = None
    password: Optional[str] = None

    model_config = {"extra": "forbid"}


class RefreshRequest(BaseModel):
    refreshToken: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    oldPassword: str = Field(min_length=1)
    newPassword: str = Field(min_length=6)

    model_config = {"extra": "forbid"}


class SetPasswordRequest(BaseModel):
    newPassword: str = Field(min_length=6)

    model_config = {"extra": "forbid"}
