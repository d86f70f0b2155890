"""
Client Controller - buyers and sellers
"""
from fastapi import APIRouter, status
from typing import List, Optional
from app.schemas.client import ClientCreateRequest, ClientUpdateRequest, ClientResponse
from app.services.real_estate.client_service import (
    create_client,
    update_client,
    get_client,
    list_clients,
    delete_client,
)

router = APIRouter(prefix="/real-estate/clients", tags=["Clients"])


@router.get("", response_model=List[ClientResponse])
async def get_clients(
    search: Optional[str] = None,
    agent_id: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
):
    """List clients with optional search on name, email or phone"""
    clients = await list_clients(search=search, agent_id=agent_id, limit=limit, offset=offset)
    return [ClientResponse(**client) for client in clients]


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client_detail(client_id: str):
    client = await get_client(client_id)
    return ClientResponse(**client)


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_new_client(request: ClientCreateRequest):
    client = await create_client(request.dict())
    return ClientResponse(**client)


@router.put("/{client_id}", response_model=ClientResponse)
async def update_client_info(client_id: str, request: ClientUpdateRequest):
    client = await update_client(client_id, request.dict(exclude_unset=True))
    return ClientResponse(**client)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client_endpoint(client_id: str):
    """Delete a client (blocked while showings or offers reference it)"""
    await delete_client(client_id)
