from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from schoolms.core.enums import StudentStatus
from schoolms.core.schemas import ApiResponse


class StudentCreate(BaseModel):
    student_code: str = Field(..., max_length=50, description="Readable ID, e.g. S001")
    name: str = Field(..., max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    class_name: Optional[str] = Field(None, max_length=100, description="e.g. 'Grade 1 Section A' or 'Grade 1A'")
    section: Optional[str] = Field(None, max_length=20)
    gender: Optional[str] = Field(None, max_length=20)
    date_of_birth: Optional[date] = None
    parent_name: Optional[str] = Field(None, max_length=255)
    parent_phone: Optional[str] = Field(None, max_length=50)
    status: StudentStatus = StudentStatus.ACTIVE


class StudentUpdate(BaseModel):
    student_code: Optional[str] = Field(None, max_length=50)
    name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    class_name: Optional[str] = Field(None, max_length=100)
    section: Optional[str] = Field(None, max_length=20)
    gender: Optional[str] = Field(None, max_length=20)
    date_of_birth: Optional[date] = None
    parent_name: Optional[str] = Field(None, max_length=255)
    parent_phone: Optional[str] = Field(None, max_length=50)
    status: Optional[StudentStatus] = None


class StudentResponse(BaseModel):
    id: str
    student_code: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    class_name: Optional[str] = None
    section: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = None
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class StudentListData(BaseModel):
    students: List[StudentResponse]


class StudentListResponse(ApiResponse):
    count: int
    data: StudentListData


class StudentData(BaseModel):
    student: StudentResponse


class StudentEnvelope(ApiResponse):
    data: StudentData
