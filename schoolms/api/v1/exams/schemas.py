import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from schoolms.core.enums import ExamStatus
from schoolms.core.schemas import ApiResponse


class ExamCreate(BaseModel):
    exam_code: str = Field(..., max_length=50)
    name: str = Field(..., max_length=255)
    subject: str = Field(..., max_length=255, description="Subject code, object id or display name")
    grades: List[str] = Field(default_factory=list)
    date: dt.date
    time: str = Field(..., description="HH:MM")
    duration: str = Field(..., max_length=50)
    total_marks: int = Field(..., ge=1)
    passing_marks: Optional[int] = Field(None, ge=0)
    description: Optional[str] = Field(None, max_length=1000)
    status: ExamStatus = ExamStatus.SCHEDULED

    @model_validator(mode="after")
    def passing_within_total(self) -> "ExamCreate":
        if self.passing_marks is not None and self.passing_marks > self.total_marks:
            raise ValueError("passing_marks cannot exceed total_marks")
        return self


class ExamUpdate(BaseModel):
    exam_code: Optional[str] = Field(None, max_length=50)
    name: Optional[str] = Field(None, max_length=255)
    subject: Optional[str] = Field(None, max_length=255)
    grades: Optional[List[str]] = None
    date: Optional[dt.date] = None
    time: Optional[str] = None
    duration: Optional[str] = Field(None, max_length=50)
    total_marks: Optional[int] = Field(None, ge=1)
    passing_marks: Optional[int] = Field(None, ge=0)
    description: Optional[str] = Field(None, max_length=1000)
    status: Optional[ExamStatus] = None


class ExamResponse(BaseModel):
    id: str
    exam_code: str
    name: str
    subject: str
    subject_id: Optional[str] = None
    grades: List[str]
    date: dt.date
    time: str
    duration: str
    total_marks: int
    passing_marks: Optional[int] = None
    description: Optional[str] = None
    status: str
    created_at: dt.datetime

    class Config:
        from_attributes = True


class ExamResultIn(BaseModel):
    student_id: str = Field(..., description="Student code or object id")
    marks_obtained: float = Field(..., ge=0)
    total_marks: Optional[float] = Field(None, gt=0, description="Defaults to the exam's total marks")
    grade: Optional[str] = Field(None, max_length=2)
    status: Optional[str] = None
    remarks: Optional[str] = Field(None, max_length=500)


class ExamResultsSubmit(BaseModel):
    results: List[ExamResultIn]


class ExamResultResponse(BaseModel):
    id: str
    exam_id: str
    student_id: str
    student_code: Optional[str] = None
    student_name: Optional[str] = None
    marks_obtained: float
    total_marks: float
    percentage: float
    grade: Optional[str] = None
    status: str
    remarks: Optional[str] = None
    graded_at: dt.datetime


class ExamListData(BaseModel):
    exams: List[ExamResponse]


class ExamListResponse(ApiResponse):
    count: int
    data: ExamListData


class ExamData(BaseModel):
    exam: ExamResponse


class ExamEnvelope(ApiResponse):
    data: ExamData


class ExamResultListData(BaseModel):
    results: List[ExamResultResponse]


class ExamResultListResponse(ApiResponse):
    count: int
    data: ExamResultListData
