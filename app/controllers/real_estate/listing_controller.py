"""
Listing Controller - listing lifecycle endpoints
Status changes cascade to the property inside the service.
"""
from fastapi import APIRouter, Query, status
from typing import List, Optional
from app.schemas.listing import (
    ListingCreateRequest,
    ListingUpdateRequest,
    ListingResponse,
    ListingDetailResponse,
)
from app.services.real_estate.listing_service import (
    create_listing,
    update_listing_status,
    get_listing,
    list_listings,
    delete_listing,
)

router = APIRouter(prefix="/real-estate/listings", tags=["Listings"])


@router.get("", response_model=List[ListingResponse])
async def get_listings(
    status_filter: Optional[str] = Query(None, alias="status"),
    agent_id: Optional[str] = None,
    property_id: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
):
    listings = await list_listings(
        status=status_filter,
        agent_id=agent_id,
        property_id=property_id,
        limit=limit,
        offset=offset,
    )
    return [ListingResponse(**listing) for listing in listings]


@router.get("/{listing_id}", response_model=ListingDetailResponse)
async def get_listing_detail(listing_id: str):
    """Get a listing with its showings and offers"""
    listing = await get_listing(listing_id)
    return ListingDetailResponse(**listing)


@router.post("", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
async def create_new_listing(request: ListingCreateRequest):
    listing = await create_listing(
        property_id=request.property_id,
        agent_id=request.agent_id,
        list_price=request.list_price,
        start_date=request.start_date,
        end_date=request.end_date,
        status=request.status.value,
    )
    return ListingResponse(**listing)


@router.put("/{listing_id}", response_model=ListingResponse)
async def update_listing(listing_id: str, request: ListingUpdateRequest):
    """Update listing fields and/or status"""
    update_data = request.dict(exclude_unset=True)
    new_status = update_data.pop("status", None)
    listing = await update_listing_status(
        listing_id,
        new_status=new_status.value if new_status else None,
        update_data=update_data,
    )
    return ListingResponse(**listing)


@router.delete("/{listing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_listing_endpoint(listing_id: str):
    """Delete a listing (blocked while showings or offers reference it)"""
    await delete_listing(listing_id)
