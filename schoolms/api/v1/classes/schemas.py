from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from schoolms.core.enums import RecordStatus
from schoolms.core.schemas import ApiResponse


class ClassCreate(BaseModel):
    code: str = Field(..., max_length=50)
    name: str = Field(..., max_length=100, description="Free text, e.g. 'Grade 1 Section A'")
    section: Optional[str] = Field(None, max_length=20)
    capacity: int = Field(..., ge=1)
    status: RecordStatus = RecordStatus.ACTIVE
    description: Optional[str] = Field(None, max_length=500)


class ClassUpdate(BaseModel):
    code: Optional[str] = Field(None, max_length=50)
    name: Optional[str] = Field(None, max_length=100)
    section: Optional[str] = Field(None, max_length=20)
    capacity: Optional[int] = Field(None, ge=1)
    status: Optional[RecordStatus] = None
    description: Optional[str] = Field(None, max_length=500)


class ClassResponse(BaseModel):
    id: str
    code: str
    name: str
    grade: Optional[str] = None  # derived from name; None when the name has no grade
    section: str = ""
    capacity: int
    current_students: int = 0
    status: str
    description: Optional[str] = None
    created_at: datetime


class ClassListData(BaseModel):
    classes: List[ClassResponse]


class ClassListResponse(ApiResponse):
    count: int
    data: ClassListData


class ClassData(BaseModel):
    class_: ClassResponse = Field(..., alias="class", serialization_alias="class")

    class Config:
        populate_by_name = True


class ClassEnvelope(ApiResponse):
    data: ClassData


class GradeGroup(BaseModel):
    grade: str
    sections: List[ClassResponse]


class GradeListData(BaseModel):
    grades: List[GradeGroup]


class GradeListResponse(ApiResponse):
    count: int
    data: GradeListData
