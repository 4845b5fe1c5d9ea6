from datetime import datetime

from sqlalchemy import JSON, Column, Date, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from schoolms.core.identifiers import new_object_id
from schoolms.db.session import Base


class Exam(Base):
    __tablename__ = "exams"

    id = Column(String(24), primary_key=True, default=new_object_id)
    exam_code = Column(String(50), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    subject = Column(String(255), nullable=False)
    subject_id = Column(String(24), ForeignKey("subjects.id", ondelete="SET NULL"), nullable=True)
    grades = Column(JSON, nullable=False, default=list)
    date = Column(Date, nullable=False)
    time = Column(String(5), nullable=False)
    duration = Column(String(50), nullable=False)
    total_marks = Column(Integer, nullable=False)
    passing_marks = Column(Integer, nullable=True)
    description = Column(String(1000), nullable=True)
    status = Column(String(20), nullable=False, default="Scheduled")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    results = relationship("ExamResult", back_populates="exam", cascade="all, delete-orphan")


class ExamResult(Base):
    """One result per (exam, student)."""

    __tablename__ = "exam_results"
    __table_args__ = (UniqueConstraint("exam_id", "student_id", name="uq_exam_result_student"),)

    id = Column(String(24), primary_key=True, default=new_object_id)
    exam_id = Column(String(24), ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(String(24), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    marks_obtained = Column(Float, nullable=False)
    total_marks = Column(Float, nullable=False)
    percentage = Column(Float, nullable=False)
    grade = Column(String(2), nullable=True)  # A+ .. F
    status = Column(String(10), nullable=False)  # Pass, Fail
    remarks = Column(String(500), nullable=True)
    graded_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    exam = relationship("Exam", back_populates="results")
