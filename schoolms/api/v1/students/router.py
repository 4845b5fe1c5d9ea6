from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.core.exceptions import ServiceError
from schoolms.core.schemas import MessageResponse
from schoolms.db.session import get_db

from .schemas import (
    StudentCreate,
    StudentData,
    StudentEnvelope,
    StudentListData,
    StudentListResponse,
    StudentUpdate,
)
from . import service

router = APIRouter(prefix="/students", tags=["students"])


@router.post("", response_model=StudentEnvelope, status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db),
) -> StudentEnvelope:
    try:
        created = await service.create_student(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return StudentEnvelope(message="Student created successfully", data=StudentData(student=created))


@router.get("", response_model=StudentListResponse)
async def list_students(
    class_name: Optional[str] = Query(None, alias="class", description="Class label, e.g. 'Grade 1' or 'Grade 1 Section A'"),
    section: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
) -> StudentListResponse:
    """List students. The class filter uses grade-number and fuzzy section matching."""
    students = await service.list_students(db, class_name=class_name, section=section, status_filter=status_filter)
    return StudentListResponse(count=len(students), data=StudentListData(students=students))


@router.get("/{student_id}", response_model=StudentEnvelope)
async def get_student(
    student_id: str,
    db: AsyncSession = Depends(get_db),
) -> StudentEnvelope:
    try:
        obj = await service.get_student(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return StudentEnvelope(data=StudentData(student=obj))


@router.put("/{student_id}", response_model=StudentEnvelope)
async def update_student(
    student_id: str,
    payload: StudentUpdate,
    db: AsyncSession = Depends(get_db),
) -> StudentEnvelope:
    try:
        obj = await service.update_student(db, student_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return StudentEnvelope(message="Student updated successfully", data=StudentData(student=obj))


@router.delete("/{student_id}", response_model=MessageResponse)
async def delete_student(
    student_id: str,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    try:
        deleted = await service.delete_student(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return MessageResponse(message="Student deleted successfully")
