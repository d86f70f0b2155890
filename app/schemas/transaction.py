from pydantic import BaseModel, Field
from typing import Optional
from datetime import date
from decimal import Decimal


class TransactionCreateRequest(BaseModel):
    offer_id: str = Field(..., min_length=1)
    closing_date: date
    commission_amount: Decimal = Field(..., ge=0)
    closing_costs: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None


class TransactionUpdateRequest(BaseModel):
    offer_id: Optional[str] = Field(None, min_length=1)
    closing_date: Optional[date] = None
    commission_amount: Optional[Decimal] = Field(None, ge=0)
    closing_costs: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None


class TransactionResponse(BaseModel):
    id: str
    offer_id: str
    closing_date: str
    commission_amount: str
    closing_costs: Optional[str] = None
    notes: Optional[str] = None
    created_at: str
    updated_at: str

    class Config:
        from_attributes = True


class TransactionDetailResponse(TransactionResponse):
    listing_id: str
    property_id: str
    client_id: str
    sale_price: str
