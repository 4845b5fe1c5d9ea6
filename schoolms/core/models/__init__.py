from schoolms.core.models.student import Student
from schoolms.core.models.teacher import Teacher
from schoolms.core.models.class_model import ClassSection
from schoolms.core.models.subject import Subject, SubjectScheduleEntry
from schoolms.core.models.master_data import MasterData
from schoolms.core.models.attendance import AttendanceDocument, AttendanceMark
from schoolms.core.models.exam import Exam, ExamResult
from schoolms.core.models.fee import Fee
from schoolms.core.models.fee_collection import FeeCollection
from schoolms.core.models.admission import Admission

__all__ = [
    "Admission",
    "AttendanceDocument",
    "AttendanceMark",
    "ClassSection",
    "Exam",
    "ExamResult",
    "Fee",
    "FeeCollection",
    "MasterData",
    "Student",
    "Subject",
    "SubjectScheduleEntry",
    "Teacher",
]
