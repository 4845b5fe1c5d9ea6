from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from schoolms.core.enums import Gender
from schoolms.core.schemas import ApiResponse


class AdmissionCreate(BaseModel):
    """Public application form."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255)
    phone: str = Field(..., max_length=50)
    class_name: str = Field(..., max_length=100, description="Grade applied for, e.g. 'Grade 3' or '3'")
    section: Optional[str] = Field(None, max_length=20)
    date_of_birth: date
    gender: Gender
    admission_date: date
    address: Optional[str] = Field(None, max_length=500)
    previous_school: Optional[str] = Field(None, max_length=255)
    parent_name: str = Field(..., max_length=255)
    parent_phone: str = Field(..., max_length=50)
    parent_email: Optional[str] = Field(None, max_length=255)
    applied_date: Optional[date] = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class AdmissionUpdate(BaseModel):
    """Edits to an application. Status moves only through approve and reject."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    class_name: Optional[str] = Field(None, max_length=100)
    section: Optional[str] = Field(None, max_length=20)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    admission_date: Optional[date] = None
    address: Optional[str] = Field(None, max_length=500)
    previous_school: Optional[str] = Field(None, max_length=255)
    parent_name: Optional[str] = Field(None, max_length=255)
    parent_phone: Optional[str] = Field(None, max_length=50)
    parent_email: Optional[str] = Field(None, max_length=255)
    remarks: Optional[str] = Field(None, max_length=500)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else v


class AdmissionApprove(BaseModel):
    section: Optional[str] = Field(None, max_length=20, description="Overrides the assigned section")
    student_code: Optional[str] = Field(None, max_length=50, description="Defaults to the admission code")
    remarks: Optional[str] = Field(None, max_length=500)


class AdmissionReject(BaseModel):
    remarks: Optional[str] = Field(None, max_length=500)


class AdmissionResponse(BaseModel):
    id: str
    admission_code: str
    name: str
    first_name: str
    last_name: str
    email: str
    phone: str
    class_name: str
    grade: Optional[str] = None
    section: Optional[str] = None
    date_of_birth: date
    gender: str
    admission_date: date
    address: Optional[str] = None
    previous_school: Optional[str] = None
    parent_name: str
    parent_phone: str
    parent_email: Optional[str] = None
    applied_date: date
    status: str
    remarks: Optional[str] = None
    student_id: Optional[str] = None
    created_at: datetime


class AdmissionListData(BaseModel):
    admissions: List[AdmissionResponse]


class AdmissionListResponse(ApiResponse):
    count: int
    data: AdmissionListData


class AdmissionData(BaseModel):
    admission: AdmissionResponse


class AdmissionEnvelope(ApiResponse):
    data: AdmissionData
