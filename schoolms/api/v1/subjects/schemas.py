from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from schoolms.core.enums import RecordStatus, normalize_day
from schoolms.core.schemas import ApiResponse


class ScheduleEntryIn(BaseModel):
    """One day of a subject's schedule. `slot` is an index into the room's time slots."""

    day: str
    start_time: str = Field(..., description="HH:MM")
    end_time: str = Field(..., description="HH:MM")
    room: Optional[str] = Field(None, max_length=50)
    slot: Optional[Union[int, str]] = None
    grade: Optional[str] = Field(None, max_length=50)
    section: Optional[str] = Field(None, max_length=20)
    teacher_id: Optional[str] = Field(None, description="Teacher code or object id")

    @field_validator("day")
    @classmethod
    def canonical_day(cls, value: str) -> str:
        day = normalize_day(value)
        if day is None:
            raise ValueError(f"Invalid day: {value}")
        return day


class ScheduleEntryOut(BaseModel):
    day: str
    start_time: str
    end_time: str
    room: Optional[str] = None
    slot: Optional[str] = None
    grade: Optional[str] = None
    section: Optional[str] = None
    teacher_id: Optional[str] = None

    class Config:
        from_attributes = True


class SubjectCreate(BaseModel):
    code: str = Field(..., max_length=50)
    name: str = Field(..., max_length=255)
    category: str = Field(..., max_length=100)
    level: str = Field(..., max_length=100)
    credits: int = Field(0, ge=0)
    description: Optional[str] = Field(None, max_length=1000)
    grades: List[str] = Field(default_factory=list)
    status: RecordStatus = RecordStatus.ACTIVE
    schedule: List[ScheduleEntryIn] = Field(default_factory=list)


class SubjectUpdate(BaseModel):
    code: Optional[str] = Field(None, max_length=50)
    name: Optional[str] = Field(None, max_length=255)
    category: Optional[str] = Field(None, max_length=100)
    level: Optional[str] = Field(None, max_length=100)
    credits: Optional[int] = Field(None, ge=0)
    description: Optional[str] = Field(None, max_length=1000)
    grades: Optional[List[str]] = None
    status: Optional[RecordStatus] = None
    schedule: Optional[List[ScheduleEntryIn]] = Field(
        None, description="When present, replaces the whole schedule"
    )


class ScheduleReplace(BaseModel):
    schedule: List[ScheduleEntryIn]


class SubjectResponse(BaseModel):
    id: str
    code: str
    name: str
    category: str
    level: str
    credits: int
    description: Optional[str] = None
    grades: List[str]
    status: str
    schedule: List[ScheduleEntryOut]
    created_at: datetime


class DayAvailability(BaseModel):
    day: str
    available: bool
    kind: Optional[str] = None  # room | teacher
    conflicting_subject: Optional[str] = None


class SubjectListData(BaseModel):
    subjects: List[SubjectResponse]


class SubjectListResponse(ApiResponse):
    count: int
    data: SubjectListData


class SubjectData(BaseModel):
    subject: SubjectResponse


class SubjectEnvelope(ApiResponse):
    data: SubjectData


class AvailabilityData(BaseModel):
    days: List[DayAvailability]


class AvailabilityResponse(ApiResponse):
    data: AvailabilityData
