"""
Named time slots on room master data.

A room's `data['time_slots']` is an ordered list of {name, start_time, end_time}.
Schedule entries reference a slot by its index in that list, so inserts and
removals keep indexes contiguous from 0 and rename default "Slot N" labels to match.
Rooms created before slots existed only carry `start_time`/`end_time`.
"""

import re
from typing import Any, Dict, List, Mapping, Optional

DEFAULT_SLOT_NAME = re.compile(r"^Slot \d+$")
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def default_slot_name(index: int) -> str:
    return f"Slot {index + 1}"


def _minutes(value: str) -> Optional[int]:
    match = TIME_PATTERN.match(value or "")
    if not match:
        return None
    return int(match.group(1)) * 60 + int(match.group(2))


def _format_minutes(total: int) -> str:
    total %= 24 * 60
    return f"{total // 60:02d}:{total % 60:02d}"


def is_valid_time(value: Optional[str]) -> bool:
    return _minutes(value or "") is not None


def room_time_slots(data: Optional[Mapping[str, Any]]) -> List[Dict[str, str]]:
    """Slots of a room. String entries from old records get default names and no times."""
    raw = (data or {}).get("time_slots") or []
    slots: List[Dict[str, str]] = []
    for index, slot in enumerate(raw):
        if isinstance(slot, str):
            slots.append({"name": default_slot_name(index), "start_time": "", "end_time": ""})
            continue
        slots.append(
            {
                "name": slot.get("name") or default_slot_name(index),
                "start_time": slot.get("start_time") or "",
                "end_time": slot.get("end_time") or "",
            }
        )
    return slots


def normalize_room_data(data: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Drop incomplete slots and mirror the first slot into the legacy start/end fields."""
    result = dict(data or {})
    if "time_slots" not in result:
        return result
    slots = [s for s in room_time_slots(result) if s["start_time"] and s["end_time"]]
    result["time_slots"] = slots
    if slots:
        result["start_time"] = slots[0]["start_time"]
        result["end_time"] = slots[0]["end_time"]
    return result


def renumber(slots: List[Dict[str, str]]) -> List[Dict[str, str]]:
    """Rename default-named slots after their position; custom names are kept."""
    renumbered = []
    for index, slot in enumerate(slots):
        slot = dict(slot)
        if not slot.get("name") or DEFAULT_SLOT_NAME.match(slot["name"]):
            slot["name"] = default_slot_name(index)
        renumbered.append(slot)
    return renumbered


def insert_slot(
    slots: List[Dict[str, str]],
    index: Optional[int] = None,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
    name: Optional[str] = None,
    copy_previous: bool = False,
) -> List[Dict[str, str]]:
    """Insert a slot at `index` (append when None).

    With copy_previous the new slot starts when the preceding slot ends and lasts
    as long as it did; explicit times win over copied ones.
    """
    position = len(slots) if index is None else max(0, min(index, len(slots)))
    if copy_previous and position > 0:
        previous = slots[position - 1]
        prev_start, prev_end = _minutes(previous["start_time"]), _minutes(previous["end_time"])
        if prev_end is not None:
            start_time = start_time or previous["end_time"]
            if prev_start is not None and end_time is None:
                end_time = _format_minutes(prev_end + (prev_end - prev_start))
    new_slot = {"name": name or "", "start_time": start_time or "", "end_time": end_time or ""}
    updated = list(slots)
    updated.insert(position, new_slot)
    return renumber(updated)


def remove_slot(slots: List[Dict[str, str]], index: int) -> List[Dict[str, str]]:
    if index < 0 or index >= len(slots):
        raise IndexError(index)
    return renumber([s for i, s in enumerate(slots) if i != index])


def slot_times(data: Optional[Mapping[str, Any]], slot: Optional[str]) -> Optional[Dict[str, str]]:
    """Times of slot `slot` ("0", "1", ...) or None when the room has no such slot."""
    if slot is None or not str(slot).isdigit():
        return None
    slots = room_time_slots(data)
    index = int(slot)
    if index >= len(slots):
        return None
    return slots[index]
