from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal
from app.models.status import PropertyStatus


class PropertyCreateRequest(BaseModel):
    address: str = Field(..., min_length=1)
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    type: Optional[str] = Field(None, description="house, condo, townhouse, land...")
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[Decimal] = Field(None, ge=0)
    square_feet: Optional[int] = Field(None, ge=0)
    lot_size: Optional[Decimal] = Field(None, ge=0)
    year_built: Optional[int] = Field(None, ge=1600, le=2100)
    listing_price: Optional[Decimal] = Field(None, ge=0)
    status: PropertyStatus = PropertyStatus.AVAILABLE
    description: Optional[str] = None


class PropertyUpdateRequest(BaseModel):
    address: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    type: Optional[str] = None
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[Decimal] = Field(None, ge=0)
    square_feet: Optional[int] = Field(None, ge=0)
    lot_size: Optional[Decimal] = Field(None, ge=0)
    year_built: Optional[int] = Field(None, ge=1600, le=2100)
    listing_price: Optional[Decimal] = Field(None, ge=0)
    sale_price: Optional[Decimal] = Field(None, ge=0)
    status: Optional[PropertyStatus] = None  # Overwritten by listing/transaction cascades
    description: Optional[str] = None


class ActiveListingSummary(BaseModel):
    id: str
    agent_id: str
    list_price: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    status: str


class PropertyResponse(BaseModel):
    id: str
    address: str
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    type: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[str] = None
    square_feet: Optional[int] = None
    lot_size: Optional[str] = None
    year_built: Optional[int] = None
    listing_price: Optional[str] = None
    sale_price: Optional[str] = None
    status: str
    description: Optional[str] = None
    created_at: str
    updated_at: str

    class Config:
        from_attributes = True


class PropertyDetailResponse(PropertyResponse):
    active_listing: Optional[ActiveListingSummary] = None
