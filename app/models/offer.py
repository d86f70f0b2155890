from sqlalchemy import Column, String, Numeric, Date, DateTime, ForeignKey, Text, Index
from sqlalchemy.sql import func
from app.database.connection import Base
from app.models.status import OfferStatus


class Offer(Base):
    __tablename__ = "offers"

    id = Column(String, primary_key=True)
    listing_id = Column(String, ForeignKey("listings.id", ondelete="RESTRICT"), nullable=False, index=True)
    client_id = Column(String, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True)
    offer_price = Column(Numeric(12, 2), nullable=False)
    offer_date = Column(Date, nullable=False)
    expiration_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default=OfferStatus.PENDING.value, index=True)  # 'Pending' | 'Accepted' | 'Rejected' | 'Countered' | 'Withdrawn'
    contingencies = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_offers_listing_status', 'listing_id', 'status'),
    )
