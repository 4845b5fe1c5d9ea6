"""Master data records. Only rooms exist today; room time slots live in `data['time_slots']`."""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, String, UniqueConstraint

from schoolms.core.identifiers import new_object_id
from schoolms.db.session import Base


class MasterData(Base):
    __tablename__ = "master_data"
    __table_args__ = (UniqueConstraint("type", "code", name="uq_master_data_type_code"),)

    id = Column(String(24), primary_key=True, default=new_object_id)
    type = Column(String(20), nullable=False, default="room")
    code = Column(String(50), nullable=False)
    name = Column(String(255), nullable=False)
    # building, floor, capacity, start_time/end_time (legacy single window), time_slots[]
    data = Column(JSON, nullable=False, default=dict)
    status = Column(String(20), nullable=False, default="Active")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
