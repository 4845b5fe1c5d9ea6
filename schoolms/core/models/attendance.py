"""Class attendance. One document per (class_name, date); marks per student."""

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from schoolms.core.identifiers import new_object_id
from schoolms.db.session import Base


class AttendanceDocument(Base):
    __tablename__ = "attendance"
    __table_args__ = (UniqueConstraint("class_name", "date", name="uq_attendance_class_date"),)

    id = Column(String(24), primary_key=True, default=new_object_id)
    class_name = Column(String(100), nullable=False)  # "Grade N Section X"
    date = Column(Date, nullable=False)
    marked_by = Column(String(24), ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    marks = relationship(
        "AttendanceMark",
        back_populates="document",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class AttendanceMark(Base):
    __tablename__ = "attendance_marks"

    id = Column(String(24), primary_key=True, default=new_object_id)
    document_id = Column(String(24), ForeignKey("attendance.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(String(24), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False)  # Present, Absent, Late, Excused
    remarks = Column(String(500), nullable=True)

    document = relationship("AttendanceDocument", back_populates="marks")
    student = relationship("Student", lazy="selectin")
