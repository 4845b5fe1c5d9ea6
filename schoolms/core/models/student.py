"""Student master. `student_code` is the readable ID (e.g. S001); `class_name` is free text."""

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, String

from schoolms.core.identifiers import new_object_id
from schoolms.db.session import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(String(24), primary_key=True, default=new_object_id)
    student_code = Column(String(50), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    # Historical formats: "Grade 1 Section A", "Grade 1A", "Grade 1" + section
    class_name = Column(String(100), nullable=True)
    section = Column(String(20), nullable=True)
    gender = Column(String(20), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    parent_name = Column(String(255), nullable=True)
    parent_phone = Column(String(50), nullable=True)
    status = Column(String(20), nullable=False, default="Active")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
