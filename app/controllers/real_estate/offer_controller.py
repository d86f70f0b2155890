"""
Offer Controller - offer submission and status changes
"""
from fastapi import APIRouter, Query, status
from typing import List, Optional
from app.schemas.offer import (
    OfferCreateRequest,
    OfferUpdateRequest,
    OfferResponse,
    OfferDetailResponse,
)
from app.services.real_estate.offer_service import (
    create_offer,
    update_offer_status,
    delete_offer,
    get_offer,
    list_offers,
)

router = APIRouter(prefix="/real-estate/offers", tags=["Offers"])


@router.get("", response_model=List[OfferResponse])
async def get_offers(
    listing_id: Optional[str] = None,
    client_id: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = 50,
    offset: int = 0,
):
    offers = await list_offers(
        listing_id=listing_id,
        client_id=client_id,
        status=status_filter,
        limit=limit,
        offset=offset,
    )
    return [OfferResponse(**offer) for offer in offers]


@router.get("/{offer_id}", response_model=OfferDetailResponse)
async def get_offer_detail(offer_id: str):
    """Get an offer with its transaction, if any"""
    offer = await get_offer(offer_id)
    return OfferDetailResponse(**offer)


@router.post("", response_model=OfferResponse, status_code=status.HTTP_201_CREATED)
async def create_new_offer(request: OfferCreateRequest):
    """Submit an offer; 400 when the listing is not Active"""
    offer = await create_offer(
        listing_id=request.listing_id,
        client_id=request.client_id,
        offer_price=request.offer_price,
        offer_date=request.offer_date,
        expiration_date=request.expiration_date,
        status=request.status.value,
        contingencies=request.contingencies,
        notes=request.notes,
    )
    return OfferResponse(**offer)


@router.put("/{offer_id}", response_model=OfferResponse)
async def update_offer(offer_id: str, request: OfferUpdateRequest):
    """Update an offer; accepting it moves the listing to Pending"""
    update_data = request.dict(exclude_unset=True)
    new_status = update_data.pop("status", None)
    offer = await update_offer_status(
        offer_id,
        new_status=new_status.value if new_status else None,
        update_data=update_data,
    )
    return OfferResponse(**offer)


@router.delete("/{offer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_offer_endpoint(offer_id: str):
    await delete_offer(offer_id)
