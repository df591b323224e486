from schemas.imports import *
from security.hash import hash_password


class WorkerInsert(Address):
    roleId: str
    shiftId: str
    displayName: str = Field(min_length=1)
    username: Username
    password: str = Field(min_length=6)
    position: str = Field(min_length=1)
    phoneNumber: str = Field(min_length=5)
    dob: int
    aadharCard: str = Field(min_length=1)
    panCard: str = Field(min_length=1)

    model_config = {"extra": "forbid"}


class WorkerCreate(WorkerInsert):
    restroId: str
    avatar: Optional[str] = None
    status: bool = True
    isLoggedIn: bool = False
    createdAt: int = Field(default_factory=now_epoch)
    updatedAt: int = Field(default_factory=now_epoch)

    model_config = {"extra": "ignore"}

    @model_validator(mode="after")
    def obscure_password(self):
        self.password = hash_password(self.password)
        return self


class WorkerSelfUpdate(BaseModel):
    displayName: Optional[str] = Field(default=None, min_length=1)
    phoneNumber: Optional[str] = Field(default=None, min_length=5)
    address: Optional[str] = Field(default=None, min_length=1)
    city: Optional[str] = Field(default=None, min_length=1)
    state: Optional[str] = Field(default=None, min_length=1)
    country: Optional[str] = Field(default=None, min_length=1)
    pincode: Optional[str] = Field(default=None, min_length=1)

    model_config = {"extra": "forbid"}


class WorkerUpdate(WorkerSelfUpdate):
    roleId: Optional[str] = None
    shiftId: Optional[str] = None
    position: Optional[str] = Field(default=None, min_length=1)
    dob: Optional[int] = None
    aadharCard: Optional[str] = Field(default=None, min_length=1)
    panCard: Optional[str] = Field(default=None, min_length=1)
    status: Optional[bool] = None


class WorkerOut(DocumentOut):
    restroId: str
    roleId: Optional[str] = None
    shiftId: Optional[str] = None
    displayName: str
    username: str
    position: Optional[str] = None
    phoneNumber: Optional[str] = None
    dob: Optional[int] = None
    aadharCard: Optional[str] = None
    panCard: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    pincode: Optional[str] = None
    avatar: Optional[str] = None
    status: bool = True
    isLoggedIn: bool = False


class WorkerProfileOut(WorkerOut):
    restaurantName: Optional[str] = None
    roleName: Optional[str] = None
    shiftName: Optional[str] = None
