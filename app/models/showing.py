from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Index
from sqlalchemy.sql import func
from app.database.connection import Base
from app.models.status import ShowingStatus


class Showing(Base):
    __tablename__ = "showings"

    id = Column(String, primary_key=True)
    listing_id = Column(String, ForeignKey("listings.id", ondelete="RESTRICT"), nullable=False, index=True)
    client_id = Column(String, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True)
    start_time = Column(DateTime(timezone=True), nullable=False)  # Half-open [start_time, end_time)
    end_time = Column(DateTime(timezone=True), nullable=False)
    status = Column(String, nullable=False, default=ShowingStatus.SCHEDULED.value, index=True)  # 'Scheduled' | 'Completed' | 'Cancelled'
    notes = Column(Text, nullable=True)
    feedback = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_showings_listing_start', 'listing_id', 'start_time'),
    )
