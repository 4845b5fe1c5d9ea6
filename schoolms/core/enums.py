from enum import Enum
from typing import Dict, Optional


class RecordStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class StudentStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    GRADUATED = "Graduated"
    TRANSFERRED = "Transferred"


class TeacherStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ON_LEAVE = "On Leave"


class ExamStatus(str, Enum):
    SCHEDULED = "Scheduled"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class ResultStatus(str, Enum):
    PASS = "Pass"
    FAIL = "Fail"


class MasterDataType(str, Enum):
    ROOM = "room"


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


WEEK_ORDER = [d.value for d in Weekday]

_DAY_LOOKUP: Dict[str, str] = {}
for _day in WEEK_ORDER:
    _DAY_LOOKUP[_day.lower()] = _day
    _DAY_LOOKUP[_day[:3].lower()] = _day


def normalize_day(value: Optional[str]) -> Optional[str]:
    """'monday', 'MON', 'Mon' -> 'Monday'. Unknown values return None."""
    if value is None:
        return None
    return _DAY_LOOKUP.get(str(value).strip().lower())


def day_sort_key(day: str) -> int:
    try:
        return WEEK_ORDER.index(day)
    except ValueError:
        return len(WEEK_ORDER)


class AttendanceStatus(str, Enum):
    """Persisted per-student attendance mark."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    EXCUSED = "Excused"


class RosterStatus(str, Enum):
    """Status as edited on the mark-attendance roster."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    LEAVE = "leave"


PERSISTED_TO_ROSTER: Dict[AttendanceStatus, RosterStatus] = {
    AttendanceStatus.PRESENT: RosterStatus.PRESENT,
    AttendanceStatus.ABSENT: RosterStatus.ABSENT,
    AttendanceStatus.LATE: RosterStatus.LATE,
    AttendanceStatus.EXCUSED: RosterStatus.LEAVE,
}
ROSTER_TO_PERSISTED: Dict[RosterStatus, AttendanceStatus] = {v: k for k, v in PERSISTED_TO_ROSTER.items()}


class FeeType(str, Enum):
    TUITION = "Tuition"
    ADMISSION = "Admission"
    OTHER = "Other"


class PaymentMethod(str, Enum):
    CASH = "Cash"
    BANK_TRANSFER = "Bank Transfer"
    CHEQUE = "Cheque"
    ONLINE = "Online"


class PaymentStatus(str, Enum):
    UNPAID = "Unpaid"
    PARTIAL = "Partial"
    PAID = "Paid"


class AdmissionStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"
