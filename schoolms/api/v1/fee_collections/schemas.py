from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from schoolms.core.enums import FeeType, PaymentMethod
from schoolms.core.schemas import ApiResponse


class FeeCollectionCreate(BaseModel):
    student_id: str = Field(..., description="Student code or object id")
    fee_type: FeeType
    amount: Optional[float] = Field(
        None, ge=0, description="Defaults to the grade's tuition or admission fee"
    )
    paid_amount: float = Field(0, ge=0)
    payment_date: Optional[date] = None
    payment_method: PaymentMethod
    receipt_number: Optional[str] = Field(None, max_length=30, description="Generated when omitted")
    remarks: Optional[str] = Field(None, max_length=500)
    collected_by: Optional[str] = Field(None, max_length=255)


class FeeCollectionUpdate(BaseModel):
    fee_type: Optional[FeeType] = None
    amount: Optional[float] = Field(None, ge=0)
    paid_amount: Optional[float] = Field(None, ge=0)
    payment_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    remarks: Optional[str] = Field(None, max_length=500)
    collected_by: Optional[str] = Field(None, max_length=255)


class PaymentCreate(BaseModel):
    """An installment against an outstanding collection."""

    amount: float = Field(..., gt=0)
    payment_method: Optional[PaymentMethod] = None
    payment_date: Optional[date] = None
    remarks: Optional[str] = Field(None, max_length=500)


class CollectionStudent(BaseModel):
    id: str
    student_code: str
    name: str
    class_name: Optional[str] = None
    section: Optional[str] = None
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = None


class FeeCollectionResponse(BaseModel):
    id: str
    receipt_number: str
    student_id: str
    student: Optional[CollectionStudent] = None
    fee_type: str
    amount: float
    paid_amount: float
    balance: float
    status: str
    payment_date: date
    payment_method: str
    remarks: Optional[str] = None
    collected_by: Optional[str] = None
    created_at: datetime


class FeeCollectionSummary(BaseModel):
    total_amount: float
    total_paid: float
    total_outstanding: float
    by_status: Dict[str, int]


class FeeCollectionListData(BaseModel):
    collections: List[FeeCollectionResponse]


class FeeCollectionListResponse(ApiResponse):
    count: int
    data: FeeCollectionListData


class FeeCollectionData(BaseModel):
    collection: FeeCollectionResponse


class FeeCollectionEnvelope(ApiResponse):
    data: FeeCollectionData


class FeeCollectionSummaryData(BaseModel):
    summary: FeeCollectionSummary


class FeeCollectionSummaryEnvelope(ApiResponse):
    data: FeeCollectionSummaryData
