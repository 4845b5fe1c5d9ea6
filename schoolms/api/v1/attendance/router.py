from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.core.exceptions import ServiceError
from schoolms.core.schemas import MessageResponse
from schoolms.db.session import get_db

from .schemas import (
    AttendanceCreate,
    AttendanceData,
    AttendanceEnvelope,
    AttendanceListData,
    AttendanceListResponse,
    AttendanceUpdate,
)
from . import service

router = APIRouter(prefix="/attendance", tags=["attendance"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.post("", response_model=AttendanceEnvelope, status_code=status.HTTP_201_CREATED)
async def mark_attendance(
    payload: AttendanceCreate,
    db: AsyncSession = Depends(get_db),
) -> AttendanceEnvelope:
    """Create the attendance document for (class, date). 409 when one already exists."""
    try:
        created = await service.create_attendance(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return AttendanceEnvelope(message="Attendance marked successfully", data=AttendanceData(attendance=created))


@router.get("", response_model=AttendanceListResponse)
async def list_attendance(
    class_name: Optional[str] = Query(None, alias="class"),
    on: Optional[date] = Query(None, alias="date"),
    student_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> AttendanceListResponse:
    try:
        docs = await service.list_attendance(db, class_name=class_name, on=on, student_id=student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return AttendanceListResponse(count=len(docs), data=AttendanceListData(attendance=docs))


@router.get("/export")
async def export_attendance(
    class_name: str = Query(..., alias="class"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Download a class attendance grid as .xlsx."""
    content = await service.export_attendance(db, class_name, date_from=date_from, date_to=date_to)
    filename = "attendance_" + "_".join(class_name.split()) + ".xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/{attendance_id}", response_model=AttendanceEnvelope)
async def get_attendance(
    attendance_id: str,
    db: AsyncSession = Depends(get_db),
) -> AttendanceEnvelope:
    try:
        doc = await service.get_attendance(db, attendance_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not doc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attendance record not found")
    return AttendanceEnvelope(data=AttendanceData(attendance=doc))


@router.put("/{attendance_id}", response_model=AttendanceEnvelope)
async def update_attendance(
    attendance_id: str,
    payload: AttendanceUpdate,
    db: AsyncSession = Depends(get_db),
) -> AttendanceEnvelope:
    """Replace the marks of an existing document."""
    try:
        doc = await service.update_attendance(db, attendance_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return AttendanceEnvelope(message="Attendance updated successfully", data=AttendanceData(attendance=doc))


@router.delete("/{attendance_id}", response_model=MessageResponse)
async def delete_attendance(
    attendance_id: str,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    try:
        deleted = await service.delete_attendance(db, attendance_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attendance record not found")
    return MessageResponse(message="Attendance record deleted successfully")
