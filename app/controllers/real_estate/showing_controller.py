"""
Showing Controller - showing scheduling endpoints
"""
from fastapi import APIRouter, HTTPException, Query, status
from typing import List, Optional
from app.schemas.showing import ShowingCreateRequest, ShowingUpdateRequest, ShowingResponse
from app.services.real_estate.showing_service import (
    create_showing,
    update_showing,
    delete_showing,
    get_showing,
    list_showings,
)

router = APIRouter(prefix="/real-estate/showings", tags=["Showings"])


@router.get("", response_model=List[ShowingResponse])
async def get_showings(
    listing_id: Optional[str] = None,
    client_id: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = 50,
    offset: int = 0,
):
    showings = await list_showings(
        listing_id=listing_id,
        client_id=client_id,
        status=status_filter,
        limit=limit,
        offset=offset,
    )
    return [ShowingResponse(**showing) for showing in showings]


@router.get("/{showing_id}", response_model=ShowingResponse)
async def get_showing_detail(showing_id: str):
    showing = await get_showing(showing_id)
    return ShowingResponse(**showing)


@router.post("", response_model=ShowingResponse, status_code=status.HTTP_201_CREATED)
async def create_new_showing(request: ShowingCreateRequest):
    """Schedule a showing; 409 when it overlaps another showing of the listing"""
    try:
        showing = await create_showing(
            listing_id=request.listing_id,
            client_id=request.client_id,
            start_time=request.start_time,
            end_time=request.end_time,
            status=request.status.value,
            notes=request.notes,
            feedback=request.feedback,
        )
        return ShowingResponse(**showing)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.put("/{showing_id}", response_model=ShowingResponse)
async def update_showing_info(showing_id: str, request: ShowingUpdateRequest):
    update_data = request.dict(exclude_unset=True)
    if update_data.get("status"):
        update_data["status"] = update_data["status"].value
    try:
        showing = await update_showing(showing_id, update_data)
        return ShowingResponse(**showing)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.delete("/{showing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_showing_endpoint(showing_id: str):
    await delete_showing(showing_id)
