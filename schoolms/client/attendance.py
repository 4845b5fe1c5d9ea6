"""
Attendance marking for one (class, date).

The reconciler merges a class roster with the saved document for that day, keeps
the document id so that a later save updates instead of creating, and recovers from
a create that lost the race against another editor by retrying once as an update.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

from schoolms.client.api_client import SchoolApiClient
from schoolms.core.enums import PERSISTED_TO_ROSTER, ROSTER_TO_PERSISTED, AttendanceStatus, RosterStatus
from schoolms.core.exceptions import DuplicateRemoteError, TransientRemoteError, ValidationError
from schoolms.core.identifiers import is_object_id

logger = logging.getLogger(__name__)


@dataclass
class RosterRow:
    student_id: str
    name: str = ""
    student_code: Optional[str] = None
    status: RosterStatus = RosterStatus.PRESENT
    remarks: Optional[str] = None


class AttendanceReconciler:
    def __init__(self, client: SchoolApiClient) -> None:
        self.client = client
        self.source_document_id: Optional[str] = None
        self.roster: List[RosterRow] = []

    def build_roster(self, students: Sequence[Mapping[str, Any]], existing_doc: Optional[Mapping[str, Any]]) -> List[RosterRow]:
        """One row per student, carrying the saved mark when there is one, else present."""
        prior: Dict[str, Mapping[str, Any]] = {}
        if existing_doc:
            for mark in existing_doc.get("students") or []:
                prior[str(mark.get("student_id"))] = mark
        rows = []
        for student in students:
            sid = str(student["id"])
            mark = prior.get(sid)
            status = RosterStatus.PRESENT
            remarks = None
            if mark is not None:
                status = PERSISTED_TO_ROSTER[AttendanceStatus(mark["status"])]
                remarks = mark.get("remarks")
            rows.append(
                RosterRow(
                    student_id=sid,
                    name=student.get("name") or "",
                    student_code=student.get("student_code"),
                    status=status,
                    remarks=remarks,
                )
            )
        self.source_document_id = existing_doc.get("id") if existing_doc else None
        self.roster = rows
        return rows

    def build_save_payload(self, roster: Sequence[RosterRow], class_name: str, on: date) -> Dict[str, Any]:
        """Persisted document for the roster. One malformed student id rejects the whole roster."""
        students = []
        for index, row in enumerate(roster):
            if not is_object_id(row.student_id):
                raise ValidationError(
                    f"Invalid student ID for {row.name or row.student_id}", field="student_id", index=index
                )
            students.append(
                {
                    "student_id": row.student_id,
                    "status": ROSTER_TO_PERSISTED[RosterStatus(row.status)].value,
                    "remarks": row.remarks,
                }
            )
        return {"class_name": class_name, "date": on.isoformat(), "students": students}

    async def load(self, class_name: str, on: date, section: Optional[str] = None) -> List[RosterRow]:
        """Fetch the class roster and any saved document, then merge them."""
        students = await self.client.list_students(class_name=class_name, section=section, status="Active")
        existing = await self.client.find_attendance(class_name, on)
        return self.build_roster(students, existing)

    def set_status(self, student_id: str, status: Any) -> None:
        for row in self.roster:
            if row.student_id == student_id:
                row.status = RosterStatus(status)
                return
        raise KeyError(student_id)

    async def save(self, class_name: str, on: date, roster: Optional[Sequence[RosterRow]] = None) -> Dict[str, Any]:
        """Update when a source document is held, else create.

        A create refused as duplicate re-fetches the (class, date) document and
        retries once as an update carrying the submitted marks.
        """
        payload = self.build_save_payload(self.roster if roster is None else roster, class_name, on)
        if self.source_document_id:
            saved = await self.client.update_attendance(self.source_document_id, payload["students"])
        else:
            try:
                saved = await self.client.create_attendance(class_name, on, payload["students"])
            except DuplicateRemoteError as e:
                logger.warning("Attendance for %s on %s already exists; retrying as update", class_name, on)
                existing = await self.client.find_attendance(class_name, on)
                if existing is None:
                    raise TransientRemoteError(e.message, e.status_code, e.payload) from e
                saved = await self.client.update_attendance(existing["id"], payload["students"])
        self.source_document_id = saved["id"]
        return saved
