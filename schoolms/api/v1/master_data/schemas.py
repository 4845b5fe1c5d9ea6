from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from schoolms.core.enums import MasterDataType, RecordStatus
from schoolms.core.schemas import ApiResponse


class MasterDataCreate(BaseModel):
    type: MasterDataType = MasterDataType.ROOM
    code: str = Field(..., max_length=50)
    name: str = Field(..., max_length=255)
    data: Dict[str, Any] = Field(default_factory=dict)
    status: RecordStatus = RecordStatus.ACTIVE


class MasterDataUpdate(BaseModel):
    code: Optional[str] = Field(None, max_length=50)
    name: Optional[str] = Field(None, max_length=255)
    data: Optional[Dict[str, Any]] = None
    status: Optional[RecordStatus] = None


class MasterDataResponse(BaseModel):
    id: str
    type: str
    code: str
    name: str
    data: Dict[str, Any]
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class TimeSlotInsert(BaseModel):
    index: Optional[int] = Field(None, ge=0, description="Insert position; append when omitted")
    name: Optional[str] = Field(None, max_length=50)
    start_time: Optional[str] = Field(None, description="HH:MM")
    end_time: Optional[str] = Field(None, description="HH:MM")
    copy_previous: bool = Field(False, description="Start at the previous slot's end and reuse its duration")


class MasterDataListData(BaseModel):
    master_data: List[MasterDataResponse]


class MasterDataListResponse(ApiResponse):
    count: int
    data: MasterDataListData


class MasterDataData(BaseModel):
    master_data: MasterDataResponse


class MasterDataEnvelope(ApiResponse):
    data: MasterDataData
