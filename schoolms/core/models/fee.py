"""Fee structure per grade. The canonical grade label is the readable key."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Numeric, String

from schoolms.core.identifiers import new_object_id
from schoolms.db.session import Base


class Fee(Base):
    __tablename__ = "fees"

    id = Column(String(24), primary_key=True, default=new_object_id)
    grade = Column(String(50), nullable=False, unique=True)
    tuition_fee = Column(Numeric(12, 2), nullable=False)
    admission_fee = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
