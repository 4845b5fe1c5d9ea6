from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from schoolms.core.enums import TeacherStatus
from schoolms.core.schemas import ApiResponse


class TeacherCreate(BaseModel):
    teacher_code: str = Field(..., max_length=50, description="Readable ID, e.g. T001")
    name: str = Field(..., max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    subject: Optional[str] = Field(None, max_length=100)
    qualification: Optional[str] = Field(None, max_length=255)
    join_date: Optional[date] = None
    status: TeacherStatus = TeacherStatus.ACTIVE


class TeacherUpdate(BaseModel):
    teacher_code: Optional[str] = Field(None, max_length=50)
    name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    subject: Optional[str] = Field(None, max_length=100)
    qualification: Optional[str] = Field(None, max_length=255)
    join_date: Optional[date] = None
    status: Optional[TeacherStatus] = None


class TeacherResponse(BaseModel):
    id: str
    teacher_code: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    subject: Optional[str] = None
    qualification: Optional[str] = None
    join_date: Optional[date] = None
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class TeacherListData(BaseModel):
    teachers: List[TeacherResponse]


class TeacherListResponse(ApiResponse):
    count: int
    data: TeacherListData


class TeacherData(BaseModel):
    teacher: TeacherResponse


class TeacherEnvelope(ApiResponse):
    data: TeacherData
