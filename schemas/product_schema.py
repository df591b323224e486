from schemas.imports import *


class ProductCreate(BaseModel):
    categoryId: str
    displayName: str = Field(min_length=1)
    description: str = ""
    price: float = Field(ge=0)
    mrp: Optional[float] = Field(default=None, ge=0)
    status: bool = True

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def price_not_above_mrp(self):
        if self.mrp is not None and self.price > self.mrp:
            raise ValueError("price cannot exceed mrp")
        return self


class ProductUpdate(BaseModel):
    categoryId: Optional[str] = None
    displayName: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    mrp: Optional[float] = Field(default=None, ge=0)
    status: Optional[bool] = None

    model_config = {"extra": "forbid"}


class ProductOut(DocumentOut):
    restroId: str
    categoryId: str
    displayName: str
    description: str = ""
    price: float
    mrp: Optional[float] = None
    avatar: Optional[str] = None
    status: bool = True
