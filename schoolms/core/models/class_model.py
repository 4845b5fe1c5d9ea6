"""Class sections. Model named ClassSection to avoid Python 'class' keyword.

`name` is free text ("Grade 1 Section A"); the grade is derived from it, never stored.
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from schoolms.core.identifiers import new_object_id
from schoolms.db.session import Base


class ClassSection(Base):
    __tablename__ = "classes"

    id = Column(String(24), primary_key=True, default=new_object_id)
    code = Column(String(50), nullable=False, unique=True)
    name = Column(String(100), nullable=False)
    section = Column(String(20), nullable=False, default="")
    capacity = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="Active")
    description = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
