import logging
from typing import List, Optional

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.core import time_slots
from schoolms.core.enums import MasterDataType
from schoolms.core.exceptions import NotFoundError, ServiceError, ValidationError
from schoolms.core.identifiers import EntityLookup
from schoolms.core.models import MasterData

from .schemas import MasterDataCreate, MasterDataResponse, MasterDataUpdate, TimeSlotInsert

logger = logging.getLogger(__name__)

master_data_lookup = EntityLookup(MasterData, "code", "master data")


def _to_response(m: MasterData) -> MasterDataResponse:
    return MasterDataResponse.model_validate(m)


def _clean_data(type_: str, data: Optional[dict]) -> dict:
    if type_ != MasterDataType.ROOM.value:
        return dict(data or {})
    cleaned = time_slots.normalize_room_data(data)
    for slot in cleaned.get("time_slots", []):
        if not (time_slots.is_valid_time(slot["start_time"]) and time_slots.is_valid_time(slot["end_time"])):
            raise ValidationError(f"Time slot '{slot['name']}' must use HH:MM times", field="time_slots")
    return cleaned


async def _ensure_code_free(db: AsyncSession, type_: str, code: str, exclude_id: Optional[str] = None) -> None:
    stmt = select(MasterData.id).where(MasterData.type == type_, MasterData.code == code)
    if exclude_id is not None:
        stmt = stmt.where(MasterData.id != exclude_id)
    if (await db.execute(stmt)).scalar_one_or_none() is not None:
        raise ServiceError(
            f'Master data with code "{code}" already exists for type "{type_}"',
            status.HTTP_409_CONFLICT,
        )


async def create_master_data(db: AsyncSession, payload: MasterDataCreate) -> MasterDataResponse:
    type_ = payload.type.value
    code = payload.code.strip()
    await _ensure_code_free(db, type_, code)
    obj = MasterData(
        type=type_,
        code=code,
        name=payload.name.strip(),
        data=_clean_data(type_, payload.data),
        status=payload.status.value,
    )
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Master data creation failed", status.HTTP_409_CONFLICT)
    await db.refresh(obj)
    logger.info("Created %s %s (%s)", obj.type, obj.code, obj.id)
    return _to_response(obj)


async def load_master_data(
    db: AsyncSession,
    type_filter: Optional[str] = None,
    status_filter: Optional[str] = None,
) -> List[MasterData]:
    stmt = select(MasterData).order_by(MasterData.code)
    if type_filter:
        stmt = stmt.where(MasterData.type == type_filter)
    if status_filter:
        stmt = stmt.where(MasterData.status == status_filter)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_master_data(
    db: AsyncSession,
    type_filter: Optional[str] = None,
    status_filter: Optional[str] = None,
) -> List[MasterDataResponse]:
    return [_to_response(m) for m in await load_master_data(db, type_filter, status_filter)]


async def get_master_data(db: AsyncSession, identifier: str) -> Optional[MasterDataResponse]:
    obj = await master_data_lookup.get(db, identifier)
    return _to_response(obj) if obj else None


async def get_by_code(db: AsyncSession, code: str, type_filter: Optional[str] = None) -> Optional[MasterData]:
    if not code or not code.strip():
        raise ValidationError("Code is required", field="code")
    stmt = select(MasterData).where(MasterData.code == code.strip())
    if type_filter:
        stmt = stmt.where(MasterData.type == type_filter)
    result = await db.execute(stmt)
    return result.scalars().first()


async def update_master_data(db: AsyncSession, identifier: str, payload: MasterDataUpdate) -> MasterDataResponse:
    obj = await master_data_lookup.get(db, identifier)
    if not obj:
        raise NotFoundError("Master data not found")
    data = payload.model_dump(exclude_unset=True)
    if data.get("code"):
        data["code"] = data["code"].strip()
        await _ensure_code_free(db, obj.type, data["code"], exclude_id=obj.id)
        obj.code = data["code"]
    if data.get("name"):
        obj.name = data["name"].strip()
    if data.get("status") is not None:
        obj.status = data["status"].value
    if data.get("data") is not None:
        obj.data = _clean_data(obj.type, data["data"])
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Master data with this code already exists", status.HTTP_409_CONFLICT)
    await db.refresh(obj)
    return _to_response(obj)


async def delete_master_data(db: AsyncSession, identifier: str) -> bool:
    obj = await master_data_lookup.get(db, identifier)
    if not obj:
        return False
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted %s %s (%s)", obj.type, obj.code, obj.id)
    return True


async def _get_room(db: AsyncSession, identifier: str) -> MasterData:
    obj = await master_data_lookup.get(db, identifier)
    if not obj:
        raise NotFoundError("Master data not found")
    if obj.type != MasterDataType.ROOM.value:
        raise ValidationError("Time slots are only defined on rooms", field="type")
    return obj


async def add_time_slot(db: AsyncSession, identifier: str, payload: TimeSlotInsert) -> MasterDataResponse:
    room = await _get_room(db, identifier)
    slots = time_slots.room_time_slots(room.data)
    updated = time_slots.insert_slot(
        slots,
        index=payload.index,
        start_time=payload.start_time,
        end_time=payload.end_time,
        name=payload.name,
        copy_previous=payload.copy_previous,
    )
    position = len(slots) if payload.index is None else min(payload.index, len(slots))
    inserted = updated[position]
    if not (time_slots.is_valid_time(inserted["start_time"]) and time_slots.is_valid_time(inserted["end_time"])):
        raise ValidationError("Time slot needs HH:MM start and end times", field="time_slots")
    # JSON columns are only flushed when reassigned
    room.data = _clean_data(room.type, {**room.data, "time_slots": updated})
    await db.commit()
    await db.refresh(room)
    logger.info("Added time slot %d to room %s", position, room.code)
    return _to_response(room)


async def remove_time_slot(db: AsyncSession, identifier: str, index: int) -> MasterDataResponse:
    """Remove slot `index`. Existing schedule entries keep their indexes and are not rewritten."""
    room = await _get_room(db, identifier)
    slots = time_slots.room_time_slots(room.data)
    try:
        updated = time_slots.remove_slot(slots, index)
    except IndexError:
        raise NotFoundError(f"Time slot {index} not found on room {room.code}")
    room.data = _clean_data(room.type, {**room.data, "time_slots": updated})
    await db.commit()
    await db.refresh(room)
    logger.info("Removed time slot %d from room %s", index, room.code)
    return _to_response(room)
