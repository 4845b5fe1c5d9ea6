from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.core.exceptions import ServiceError
from schoolms.core.schemas import MessageResponse
from schoolms.db.session import get_db

from .schemas import (
    MasterDataCreate,
    MasterDataData,
    MasterDataEnvelope,
    MasterDataListData,
    MasterDataListResponse,
    MasterDataResponse,
    MasterDataUpdate,
    TimeSlotInsert,
)
from . import service

router = APIRouter(prefix="/master-data", tags=["master-data"])


@router.post("", response_model=MasterDataEnvelope, status_code=status.HTTP_201_CREATED)
async def create_master_data(
    payload: MasterDataCreate,
    db: AsyncSession = Depends(get_db),
) -> MasterDataEnvelope:
    try:
        created = await service.create_master_data(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return MasterDataEnvelope(message="Master data created successfully", data=MasterDataData(master_data=created))


@router.get("", response_model=MasterDataListResponse)
async def list_master_data(
    type_filter: Optional[str] = Query(None, alias="type", description="e.g. room"),
    status_filter: Optional[str] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
) -> MasterDataListResponse:
    items = await service.list_master_data(db, type_filter=type_filter, status_filter=status_filter)
    return MasterDataListResponse(count=len(items), data=MasterDataListData(master_data=items))


@router.get("/code/{code}", response_model=MasterDataEnvelope)
async def get_master_data_by_code(
    code: str,
    type_filter: Optional[str] = Query(None, alias="type"),
    db: AsyncSession = Depends(get_db),
) -> MasterDataEnvelope:
    try:
        obj = await service.get_by_code(db, code, type_filter=type_filter)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Master data not found")
    return MasterDataEnvelope(data=MasterDataData(master_data=MasterDataResponse.model_validate(obj)))


@router.get("/{item_id}", response_model=MasterDataEnvelope)
async def get_master_data(
    item_id: str,
    db: AsyncSession = Depends(get_db),
) -> MasterDataEnvelope:
    try:
        obj = await service.get_master_data(db, item_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Master data not found")
    return MasterDataEnvelope(data=MasterDataData(master_data=obj))


@router.put("/{item_id}", response_model=MasterDataEnvelope)
async def update_master_data(
    item_id: str,
    payload: MasterDataUpdate,
    db: AsyncSession = Depends(get_db),
) -> MasterDataEnvelope:
    try:
        obj = await service.update_master_data(db, item_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return MasterDataEnvelope(message="Master data updated successfully", data=MasterDataData(master_data=obj))


@router.delete("/{item_id}", response_model=MessageResponse)
async def delete_master_data(
    item_id: str,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    try:
        deleted = await service.delete_master_data(db, item_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Master data not found")
    return MessageResponse(message="Master data deleted successfully")


@router.post("/{item_id}/time-slots", response_model=MasterDataEnvelope, status_code=status.HTTP_201_CREATED)
async def add_time_slot(
    item_id: str,
    payload: TimeSlotInsert,
    db: AsyncSession = Depends(get_db),
) -> MasterDataEnvelope:
    """Append or insert a named slot on a room; default slot names are renumbered."""
    try:
        obj = await service.add_time_slot(db, item_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return MasterDataEnvelope(message="Time slot added successfully", data=MasterDataData(master_data=obj))


@router.delete("/{item_id}/time-slots/{index}", response_model=MasterDataEnvelope)
async def remove_time_slot(
    item_id: str,
    index: int,
    db: AsyncSession = Depends(get_db),
) -> MasterDataEnvelope:
    try:
        obj = await service.remove_time_slot(db, item_id, index)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return MasterDataEnvelope(message="Time slot removed successfully", data=MasterDataData(master_data=obj))
