"""Fee payments recorded against a student. `receipt_number` is the readable key."""

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from schoolms.core.identifiers import new_object_id
from schoolms.db.session import Base


class FeeCollection(Base):
    """One charge for a student. Supports partial payments through `paid_amount`."""

    __tablename__ = "fee_collections"

    id = Column(String(24), primary_key=True, default=new_object_id)
    student_id = Column(String(24), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    fee_type = Column(String(20), nullable=False)  # Tuition, Admission, Other
    amount = Column(Numeric(12, 2), nullable=False)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default="Unpaid")  # Unpaid, Partial, Paid
    payment_date = Column(Date, nullable=False)
    payment_method = Column(String(30), nullable=False)
    receipt_number = Column(String(30), nullable=False, unique=True)
    remarks = Column(String(500), nullable=True)
    collected_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    student = relationship("Student", lazy="selectin")
