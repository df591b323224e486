from schemas.imports import *


class LabelCreate(BaseModel):
    displayName: str = Field(min_length=1, max_length=80)
    status: bool = True

    model_config = {"extra": "forbid"}


class LabelUpdate(BaseModel):
    displayName: Optional[str] = Field(default=None, min_length=1, max_length=80)
    status: Optional[bool] = None

    model_config = {"extra": "forbid"}


class LabelOut(DocumentOut):
    restroId: str
    displayName: str
    status: bool = True
