"""
Property Controller - property records
"""
from fastapi import APIRouter, Query, status
from typing import List, Optional
from decimal import Decimal
from app.schemas.property import (
    PropertyCreateRequest,
    PropertyUpdateRequest,
    PropertyResponse,
    PropertyDetailResponse,
)
from app.services.real_estate.property_service import (
    create_property,
    get_property,
    list_properties,
    update_property,
    delete_property,
)

router = APIRouter(prefix="/real-estate/properties", tags=["Properties"])


@router.get("", response_model=List[PropertyResponse])
async def get_properties(
    status_filter: Optional[str] = Query(None, alias="status"),
    property_type: Optional[str] = Query(None, alias="type"),
    city: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    limit: int = 50,
    offset: int = 0,
):
    """List properties with optional filters"""
    props = await list_properties(
        status=status_filter,
        property_type=property_type,
        city=city,
        min_price=min_price,
        max_price=max_price,
        limit=limit,
        offset=offset,
    )
    return [PropertyResponse(**prop) for prop in props]


@router.get("/{property_id}", response_model=PropertyDetailResponse)
async def get_property_detail(property_id: str):
    """Get a property with its current active listing"""
    prop = await get_property(property_id)
    return PropertyDetailResponse(**prop)


@router.post("", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
async def create_new_property(request: PropertyCreateRequest):
    prop = await create_property(request.dict())
    return PropertyResponse(**prop)


@router.put("/{property_id}", response_model=PropertyResponse)
async def update_property_info(property_id: str, request: PropertyUpdateRequest):
    prop = await update_property(property_id, request.dict(exclude_unset=True))
    return PropertyResponse(**prop)


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_property_endpoint(property_id: str):
    """Delete a property (blocked while it has an active listing)"""
    await delete_property(property_id)
