from pydantic import BaseModel, ConfigDict, Field


class CostCenterBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class CostCenterCreate(CostCenterBase):
    pass


class CostCenterUpdate(CostCenterBase):
    pass


class CostCenterOut(CostCenterBase):
    id: int

    model_config = ConfigDict(from_attributes=True)
