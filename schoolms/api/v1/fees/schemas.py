from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from schoolms.core.schemas import ApiResponse


class FeeCreate(BaseModel):
    grade: str = Field(..., max_length=50, description="'Grade 3' or '3'")
    tuition_fee: float = Field(..., ge=0)
    admission_fee: float = Field(..., ge=0)


class FeeUpdate(BaseModel):
    grade: Optional[str] = Field(None, max_length=50)
    tuition_fee: Optional[float] = Field(None, ge=0)
    admission_fee: Optional[float] = Field(None, ge=0)


class FeeResponse(BaseModel):
    id: str
    grade: str
    tuition_fee: float
    admission_fee: float
    created_at: datetime


class FeeListData(BaseModel):
    fees: List[FeeResponse]


class FeeListResponse(ApiResponse):
    count: int
    data: FeeListData


class FeeData(BaseModel):
    fee: FeeResponse


class FeeEnvelope(ApiResponse):
    data: FeeData
