"""Admission applications. Approval creates the Student and links it here."""

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, String

from schoolms.core.identifiers import new_object_id
from schoolms.db.session import Base


class Admission(Base):
    __tablename__ = "admissions"

    id = Column(String(24), primary_key=True, default=new_object_id)
    admission_code = Column(String(20), nullable=False, unique=True)  # ADM000001
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    # Class applied for, free text ("Grade 3", "Grade 3B")
    class_name = Column(String(100), nullable=False)
    section = Column(String(20), nullable=True)
    date_of_birth = Column(Date, nullable=False)
    gender = Column(String(20), nullable=False)
    admission_date = Column(Date, nullable=False)
    address = Column(String(500), nullable=True)
    previous_school = Column(String(255), nullable=True)
    parent_name = Column(String(255), nullable=False)
    parent_phone = Column(String(50), nullable=False)
    parent_email = Column(String(255), nullable=True)
    applied_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="Pending")
    remarks = Column(String(500), nullable=True)
    student_id = Column(String(24), ForeignKey("students.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
