from schemas.imports import *


class OrderItem(BaseModel):
    productId: str = Field(min_length=1)
    quantity: int = Field(gt=0)
    price: float = Field(ge=0)

    @model_validator(mode="before")
    @classmethod
    def convert_objectid(cls, values):
        return stringify_object_ids(values)


class OrderPlace(BaseModel):
    statusId: str
    items: List[OrderItem] = Field(min_length=1)
    customerName: str = Field(min_length=1)
    customerNumber: Optional[str] = None
    tableNumber: int = Field(ge=0)
    totalAmount: float = Field(ge=0)

    model_config = {"extra": "forbid"}


class OrderStaffUpdate(BaseModel):
    statusId: Optional[str] = None
    items: Optional[List[OrderItem]] = Field(default=None, min_length=1)
    customerName: Optional[str] = Field(default=None, min_length=1)
    customerNumber: Optional[str] = None
    tableNumber: Optional[int] = Field(default=None, ge=0)
    totalAmount: Optional[float] = Field(default=None, ge=0)

    model_config = {"extra": "forbid"}


class OrderCustomerUpdate(BaseModel):
    # identifies the customer; never written
    customerName: str = Field(min_length=1)
    customerNumber: Optional[str] = None

    statusId: Optional[str] = None
    items: Optional[List[OrderItem]] = Field(default=None, min_length=1)
    totalAmount: Optional[float] = Field(default=None, ge=0)

    model_config = {"extra": "forbid"}


class OrderOut(DocumentOut):
    restroId: str
    statusId: str
    items: List[OrderItem] = Field(default_factory=list)
    customerName: str
    customerNumber: Optional[str] = None
    tableNumber: int
    totalAmount: float
