from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.core.exceptions import ServiceError
from schoolms.core.schemas import MessageResponse
from schoolms.db.session import get_db

from .schemas import (
    ClassCreate,
    ClassData,
    ClassEnvelope,
    ClassListData,
    ClassListResponse,
    ClassUpdate,
    GradeListData,
    GradeListResponse,
)
from . import service

router = APIRouter(prefix="/classes", tags=["classes"])


@router.post("", response_model=ClassEnvelope, status_code=status.HTTP_201_CREATED)
async def create_class(
    payload: ClassCreate,
    db: AsyncSession = Depends(get_db),
) -> ClassEnvelope:
    try:
        created = await service.create_class(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return ClassEnvelope(message="Class created successfully", data=ClassData(class_=created))


@router.get("", response_model=ClassListResponse)
async def list_classes(
    status_filter: Optional[str] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
) -> ClassListResponse:
    """List classes with derived grade and current student count."""
    classes = await service.list_classes(db, status_filter=status_filter)
    return ClassListResponse(count=len(classes), data=ClassListData(classes=classes))


@router.get("/grades", response_model=GradeListResponse)
async def list_grades(
    status_filter: Optional[str] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
) -> GradeListResponse:
    grades = await service.list_grades(db, status_filter=status_filter)
    return GradeListResponse(count=len(grades), data=GradeListData(grades=grades))


@router.get("/{class_id}", response_model=ClassEnvelope)
async def get_class(
    class_id: str,
    db: AsyncSession = Depends(get_db),
) -> ClassEnvelope:
    try:
        obj = await service.get_class(db, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    return ClassEnvelope(data=ClassData(class_=obj))


@router.put("/{class_id}", response_model=ClassEnvelope)
async def update_class(
    class_id: str,
    payload: ClassUpdate,
    db: AsyncSession = Depends(get_db),
) -> ClassEnvelope:
    try:
        obj = await service.update_class(db, class_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return ClassEnvelope(message="Class updated successfully", data=ClassData(class_=obj))


@router.delete("/{class_id}", response_model=MessageResponse)
async def delete_class(
    class_id: str,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    try:
        deleted = await service.delete_class(db, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    return MessageResponse(message="Class deleted successfully")
