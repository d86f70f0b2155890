from pydantic import BaseModel, Field
from typing import Optional
from datetime import date
from decimal import Decimal
from app.models.status import OfferStatus


class OfferCreateRequest(BaseModel):
    listing_id: str = Field(..., min_length=1)
    client_id: str = Field(..., min_length=1)
    offer_price: Decimal = Field(..., gt=0)
    offer_date: date
    expiration_date: Optional[date] = None
    status: OfferStatus = OfferStatus.PENDING
    contingencies: Optional[str] = None
    notes: Optional[str] = None


class OfferUpdateRequest(BaseModel):
    listing_id: Optional[str] = Field(None, min_length=1)
    client_id: Optional[str] = Field(None, min_length=1)
    offer_price: Optional[Decimal] = Field(None, gt=0)  # Counter price when countering
    offer_date: Optional[date] = None
    expiration_date: Optional[date] = None
    status: Optional[OfferStatus] = None
    contingencies: Optional[str] = None
    notes: Optional[str] = None


class OfferTransactionSummary(BaseModel):
    id: str
    closing_date: str
    commission_amount: str


class OfferResponse(BaseModel):
    id: str
    listing_id: str
    client_id: str
    offer_price: str
    offer_date: str
    expiration_date: Optional[str] = None
    status: str
    contingencies: Optional[str] = None
    notes: Optional[str] = None
    created_at: str
    updated_at: str

    class Config:
        from_attributes = True


class OfferDetailResponse(OfferResponse):
    transaction: Optional[OfferTransactionSummary] = None
