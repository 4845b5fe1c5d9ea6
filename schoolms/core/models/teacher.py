from datetime import datetime

from sqlalchemy import Column, Date, DateTime, String

from schoolms.core.identifiers import new_object_id
from schoolms.db.session import Base


class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(String(24), primary_key=True, default=new_object_id)
    teacher_code = Column(String(50), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    subject = Column(String(100), nullable=True)
    qualification = Column(String(255), nullable=True)
    join_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="Active")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
