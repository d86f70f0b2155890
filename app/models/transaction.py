from sqlalchemy import Column, String, Numeric, Date, DateTime, ForeignKey, Text
from sqlalchemy.sql import func
from app.database.connection import Base


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(String, primary_key=True)
    # At most one transaction per offer
    offer_id = Column(String, ForeignKey("offers.id", ondelete="RESTRICT"), unique=True, nullable=False, index=True)
    closing_date = Column(Date, nullable=False)
    commission_amount = Column(Numeric(12, 2), nullable=False)
    closing_costs = Column(Numeric(12, 2), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
