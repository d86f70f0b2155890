from sqlalchemy import Column, String, Integer, Numeric, DateTime, Text, Index
from sqlalchemy.sql import func
from app.database.connection import Base
from app.models.status import PropertyStatus


class Property(Base):
    __tablename__ = "properties"

    id = Column(String, primary_key=True)
    address = Column(String, nullable=False)
    city = Column(String, nullable=True, index=True)  # Indexed for filtering
    state = Column(String, nullable=True)
    zip = Column(String, nullable=True)
    country = Column(String, nullable=True)
    type = Column(String, nullable=True, index=True)  # house, condo, townhouse, land...
    bedrooms = Column(Integer, nullable=True)
    bathrooms = Column(Numeric(4, 1), nullable=True)
    square_feet = Column(Integer, nullable=True)
    lot_size = Column(Numeric(12, 2), nullable=True)
    year_built = Column(Integer, nullable=True)
    listing_price = Column(Numeric(12, 2), nullable=True)
    sale_price = Column(Numeric(12, 2), nullable=True)  # Set by transaction cascade
    status = Column(String, nullable=False, default=PropertyStatus.AVAILABLE.value, index=True)  # 'Available' | 'Inactive' | 'Sold'
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_properties_status_type', 'status', 'type'),
    )
