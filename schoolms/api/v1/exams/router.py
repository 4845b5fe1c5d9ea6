from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.core.exceptions import ServiceError
from schoolms.core.schemas import MessageResponse
from schoolms.db.session import get_db

from .schemas import (
    ExamCreate,
    ExamData,
    ExamEnvelope,
    ExamListData,
    ExamListResponse,
    ExamResultListData,
    ExamResultListResponse,
    ExamResultsSubmit,
    ExamUpdate,
)
from . import service

router = APIRouter(prefix="/exams", tags=["exams"])


@router.post("", response_model=ExamEnvelope, status_code=status.HTTP_201_CREATED)
async def create_exam(
    payload: ExamCreate,
    db: AsyncSession = Depends(get_db),
) -> ExamEnvelope:
    try:
        created = await service.create_exam(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return ExamEnvelope(message="Exam created successfully", data=ExamData(exam=created))


@router.get("", response_model=ExamListResponse)
async def list_exams(
    status_filter: Optional[str] = Query(None, alias="status"),
    grade: Optional[str] = Query(None),
    subject: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> ExamListResponse:
    exams = await service.list_exams(db, status_filter=status_filter, grade=grade, subject=subject)
    return ExamListResponse(count=len(exams), data=ExamListData(exams=exams))


@router.get("/{exam_id}", response_model=ExamEnvelope)
async def get_exam(
    exam_id: str,
    db: AsyncSession = Depends(get_db),
) -> ExamEnvelope:
    try:
        obj = await service.get_exam(db, exam_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exam not found")
    return ExamEnvelope(data=ExamData(exam=obj))


@router.put("/{exam_id}", response_model=ExamEnvelope)
async def update_exam(
    exam_id: str,
    payload: ExamUpdate,
    db: AsyncSession = Depends(get_db),
) -> ExamEnvelope:
    try:
        obj = await service.update_exam(db, exam_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return ExamEnvelope(message="Exam updated successfully", data=ExamData(exam=obj))


@router.delete("/{exam_id}", response_model=MessageResponse)
async def delete_exam(
    exam_id: str,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    try:
        deleted = await service.delete_exam(db, exam_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exam not found")
    return MessageResponse(message="Exam deleted successfully")


@router.get("/{exam_id}/results", response_model=ExamResultListResponse)
async def list_results(
    exam_id: str,
    db: AsyncSession = Depends(get_db),
) -> ExamResultListResponse:
    try:
        results = await service.list_results(db, exam_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return ExamResultListResponse(count=len(results), data=ExamResultListData(results=results))


@router.post("/{exam_id}/results", response_model=ExamResultListResponse)
async def submit_results(
    exam_id: str,
    payload: ExamResultsSubmit,
    db: AsyncSession = Depends(get_db),
) -> ExamResultListResponse:
    """Record marks. Grade and Pass/Fail are computed from the percentage unless both are given."""
    try:
        results = await service.submit_results(db, exam_id, payload.results)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return ExamResultListResponse(
        message="Results saved successfully",
        count=len(results),
        data=ExamResultListData(results=results),
    )
