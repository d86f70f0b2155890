from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime
from app.models.status import ShowingStatus
from app.services.conflict_checker import as_utc


class ShowingCreateRequest(BaseModel):
    listing_id: str = Field(..., min_length=1)
    client_id: str = Field(..., min_length=1)
    start_time: datetime
    end_time: datetime
    status: ShowingStatus = ShowingStatus.SCHEDULED
    notes: Optional[str] = None
    feedback: Optional[str] = None

    @validator('end_time')
    def validate_window(cls, v, values):
        if values.get('start_time') and as_utc(v) <= as_utc(values['start_time']):
            raise ValueError('End time must be after start time')
        return v


class ShowingUpdateRequest(BaseModel):
    listing_id: Optional[str] = Field(None, min_length=1)
    client_id: Optional[str] = Field(None, min_length=1)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: Optional[ShowingStatus] = None
    notes: Optional[str] = None
    feedback: Optional[str] = None


class ShowingResponse(BaseModel):
    id: str
    listing_id: str
    client_id: str
    start_time: str
    end_time: str
    status: str
    notes: Optional[str] = None
    feedback: Optional[str] = None
    created_at: str
    updated_at: str

    class Config:
        from_attributes = True
