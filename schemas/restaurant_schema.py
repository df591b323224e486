from schemas.imports import *
from security.hash import hash_password


class RestaurantRegister(Address):
    displayName: str = Field(min_length=1)
    username: Username
    password: str = Field(min_length=6)
    managerName: str = Field(min_length=1)
    phoneNumber: str = Field(min_length=5)

    model_config = {"extra": "forbid"}


class RestaurantCreate(RestaurantRegister):
    avatar: Optional[str] = None
    status: bool = True
    createdAt: int = Field(default_factory=now_epoch)
    updatedAt: int = Field(default_factory=now_epoch)

    model_config = {"extra": "ignore"}

    @model_validator(mode="after")
    def obscure_password(self):
        self.password = hash_password(self.password)
        return self


class RestaurantUpdate(BaseModel):
    displayName: Optional[str] = Field(default=None, min_length=1)
    managerName: Optional[str] = Field(default=None, min_length=1)
    phoneNumber: Optional[str] = Field(default=None, min_length=5)
    address: Optional[str] = Field(default=None, min_length=1)
    city: Optional[str] = Field(default=None, min_length=1)
    state: Optional[str] = Field(default=None, min_length=1)
    country: Optional[str] = Field(default=None, min_length=1)
    pincode: Optional[str] = Field(default=None, min_length=1)

    model_config = {"extra": "forbid"}


class RestaurantOut(DocumentOut):
    displayName: str
    username: str
    managerName: Optional[str] = None
    phoneNumber: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    pincode: Optional[str] = None
    avatar: Optional[str] = None
    status: bool = True
