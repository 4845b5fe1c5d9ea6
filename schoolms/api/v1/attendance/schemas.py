from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from schoolms.core.enums import AttendanceStatus
from schoolms.core.schemas import ApiResponse


class AttendanceMarkIn(BaseModel):
    student_id: str = Field(..., description="Student object id or student code")
    status: AttendanceStatus
    remarks: Optional[str] = Field(None, max_length=500)


class AttendanceCreate(BaseModel):
    class_name: str = Field(..., min_length=1, max_length=100, description="e.g. 'Grade 1 Section A'")
    date: date
    students: List[AttendanceMarkIn]
    marked_by: Optional[str] = Field(None, description="Teacher code or object id")


class AttendanceUpdate(BaseModel):
    """Update carries the marks only; class and date of a document never change."""

    students: List[AttendanceMarkIn]
    marked_by: Optional[str] = None


class AttendanceMarkOut(BaseModel):
    student_id: str
    student_code: Optional[str] = None
    student_name: Optional[str] = None
    status: str
    remarks: Optional[str] = None


class AttendanceResponse(BaseModel):
    id: str
    class_name: str
    date: date
    marked_by: Optional[str] = None
    students: List[AttendanceMarkOut]
    created_at: datetime
    updated_at: datetime


class AttendanceListData(BaseModel):
    attendance: List[AttendanceResponse]


class AttendanceListResponse(ApiResponse):
    count: int
    data: AttendanceListData


class AttendanceData(BaseModel):
    attendance: AttendanceResponse


class AttendanceEnvelope(ApiResponse):
    data: AttendanceData
