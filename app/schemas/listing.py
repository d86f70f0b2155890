from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import date
from decimal import Decimal
from app.models.status import ListingStatus


class ListingCreateRequest(BaseModel):
    property_id: str = Field(..., min_length=1)
    agent_id: str = Field(..., min_length=1)
    list_price: Decimal = Field(..., gt=0)
    start_date: date
    end_date: Optional[date] = None
    status: ListingStatus = ListingStatus.ACTIVE

    @validator('end_date')
    def validate_end_date(cls, v, values):
        if v and values.get('start_date') and v < values['start_date']:
            raise ValueError('End date cannot be before start date')
        return v


class ListingUpdateRequest(BaseModel):
    property_id: Optional[str] = Field(None, min_length=1)
    agent_id: Optional[str] = Field(None, min_length=1)
    list_price: Optional[Decimal] = Field(None, gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[ListingStatus] = None


class ListingResponse(BaseModel):
    id: str
    property_id: str
    agent_id: str
    list_price: str
    start_date: str
    end_date: Optional[str] = None
    status: str
    created_at: str
    updated_at: str

    class Config:
        from_attributes = True


class ListingShowingSummary(BaseModel):
    id: str
    client_id: str
    start_time: str
    end_time: str
    status: str


class ListingOfferSummary(BaseModel):
    id: str
    client_id: str
    offer_price: str
    offer_date: Optional[str] = None
    status: str


class ListingDetailResponse(ListingResponse):
    showings: List[ListingShowingSummary] = []
    offers: List[ListingOfferSummary] = []
