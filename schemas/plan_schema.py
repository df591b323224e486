from schemas.imports import *


class PlanCreate(BaseModel):
    displayName: str = Field(min_length=1)
    duration: PlanDuration
    mrp: float = Field(ge=0)
    price: float = Field(ge=0)
    status: bool = True

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def price_not_above_mrp(self):
        if self.price > self.mrp:
            raise ValueError("price cannot exceed mrp")
        return self


class PlanUpdate(BaseModel):
    displayName: Optional[str] = Field(default=None, min_length=1)
    duration: Optional[PlanDuration] = None
    mrp: Optional[float] = Field(default=None, ge=0)
    price: Optional[float] = Field(default=None, ge=0)
    status: Optional[bool] = None

    model_config = {"extra": "forbid"}


class PlanOut(DocumentOut):
    displayName: str
    duration: PlanDuration
    mrp: float
    price: float
    status: bool = True
