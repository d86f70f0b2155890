from sqlalchemy import Column, String, Numeric, Date, DateTime, ForeignKey, Index, text
from sqlalchemy.sql import func
from app.database.connection import Base
from app.models.status import ListingStatus


class Listing(Base):
    __tablename__ = "listings"

    id = Column(String, primary_key=True)
    property_id = Column(String, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)  # Inactive history goes with the property
    agent_id = Column(String, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    list_price = Column(Numeric(12, 2), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default=ListingStatus.ACTIVE.value, index=True)  # 'Active' | 'Pending' | 'Sold' | 'Expired' | 'Cancelled'
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        # At most one Active listing per property
        Index(
            'uq_listings_one_active_per_property',
            'property_id',
            unique=True,
            postgresql_where=text("status = 'Active'"),
            sqlite_where=text("status = 'Active'"),
        ),
        Index('idx_listings_agent_status', 'agent_id', 'status'),
    )
