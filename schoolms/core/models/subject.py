"""Subjects and their per-day schedule entries. The schedule is replaced wholesale on every write."""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from schoolms.core.identifiers import new_object_id
from schoolms.db.session import Base


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(String(24), primary_key=True, default=new_object_id)
    code = Column(String(50), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False)
    level = Column(String(100), nullable=False)
    credits = Column(Integer, nullable=False, default=0)
    description = Column(String(1000), nullable=True)
    grades = Column(JSON, nullable=False, default=list)
    status = Column(String(20), nullable=False, default="Active")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    schedule_entries = relationship(
        "SubjectScheduleEntry",
        back_populates="subject",
        cascade="all, delete-orphan",
        order_by="SubjectScheduleEntry.position",
        lazy="selectin",
    )


class SubjectScheduleEntry(Base):
    """One teaching slot on one day. Multi-day entries are expanded to one row per day."""

    __tablename__ = "subject_schedule_entries"

    id = Column(String(24), primary_key=True, default=new_object_id)
    subject_id = Column(String(24), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    day = Column(String(10), nullable=False)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)
    room = Column(String(50), nullable=True)  # master_data room code
    slot = Column(String(10), nullable=True)  # index into the room's time_slots
    grade = Column(String(50), nullable=True)
    section = Column(String(20), nullable=True)
    teacher_id = Column(String(24), ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True)

    subject = relationship("Subject", back_populates="schedule_entries")
