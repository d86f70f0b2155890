"""
Client Service - buyers and sellers
"""
from typing import Optional, List, Dict
from sqlalchemy import select, or_, desc
from sqlalchemy.ext.asyncio import AsyncSession
from app.database.unit_of_work import run_in_transaction
from app.models.client import Client
from app.services.real_estate import guards
from app.utils.errors import ConflictError
import logging
import uuid

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "first_name", "last_name", "email", "phone",
    "address", "city", "state", "zip", "country",
    "agent_id", "notes",
)


async def _ensure_email_available(session: AsyncSession, email: Optional[str], exclude_id: Optional[str] = None) -> None:
    if not email:
        return
    stmt = select(Client.id).where(Client.email == email)
    if exclude_id:
        stmt = stmt.where(Client.id != exclude_id)
    result = await session.execute(stmt)
    if result.first():
        raise ConflictError("A client with this email already exists")


async def create_client(client_data: Dict, timeout: Optional[float] = None) -> Dict:
    async def _work(session: AsyncSession) -> Dict:
        if client_data.get("agent_id"):
            await guards.get_agent(session, client_data["agent_id"])
        await _ensure_email_available(session, client_data.get("email"))

        client = Client(id=str(uuid.uuid4()))
        for field_name in UPDATABLE_FIELDS:
            setattr(client, field_name, client_data.get(field_name))
        session.add(client)
        await session.flush()
        await session.refresh(client)
        return client_to_dict(client)

    result = await run_in_transaction(_work, timeout=timeout)
    logger.info(f"👤 Client created: {result['id']}")
    return result


async def update_client(client_id: str, update_data: Dict, timeout: Optional[float] = None) -> Dict:
    async def _work(session: AsyncSession) -> Dict:
        client = await guards.get_client(session, client_id)
        if update_data.get("agent_id"):
            await guards.get_agent(session, update_data["agent_id"])
        if "email" in update_data:
            await _ensure_email_available(session, update_data["email"], exclude_id=client_id)

        for field_name in UPDATABLE_FIELDS:
            if field_name in update_data:
                setattr(client, field_name, update_data[field_name])
        await session.flush()
        await session.refresh(client)
        return client_to_dict(client)

    return await run_in_transaction(_work, timeout=timeout)


async def get_client(client_id: str, timeout: Optional[float] = None) -> Dict:
    async def _work(session: AsyncSession) -> Dict:
        return client_to_dict(await guards.get_client(session, client_id))

    return await run_in_transaction(_work, timeout=timeout)


async def list_clients(
    search: Optional[str] = None,
    agent_id: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    timeout: Optional[float] = None,
) -> List[Dict]:
    """List clients, searching name, email and phone"""
    async def _work(session: AsyncSession) -> List[Dict]:
        stmt = select(Client)
        if agent_id:
            stmt = stmt.where(Client.agent_id == agent_id)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Client.first_name.ilike(pattern),
                    Client.last_name.ilike(pattern),
                    Client.email.ilike(pattern),
                    Client.phone.ilike(pattern),
                )
            )
        stmt = stmt.order_by(Client.last_name, Client.first_name, desc(Client.created_at)).offset(offset).limit(limit)
        result = await session.execute(stmt)
        return [client_to_dict(c) for c in result.scalars().all()]

    return await run_in_transaction(_work, timeout=timeout)


async def delete_client(client_id: str, timeout: Optional[float] = None) -> bool:
    """Delete a client without showings or offers"""
    async def _work(session: AsyncSession) -> bool:
        client = await guards.get_client(session, client_id)
        await guards.ensure_no_dependents(session, "client", "client_id", client_id)
        await session.delete(client)
        return True

    deleted = await run_in_transaction(_work, timeout=timeout)
    logger.info(f"🗑️ Client deleted: {client_id}")
    return deleted


def client_to_dict(client: Client) -> Dict:
    return {
        "id": client.id,
        "first_name": client.first_name,
        "last_name": client.last_name,
        "email": client.email,
        "phone": client.phone,
        "address": client.address,
        "city": client.city,
        "state": client.state,
        "zip": client.zip,
        "country": client.country,
        "agent_id": client.agent_id,
        "notes": client.notes,
        "created_at": client.created_at.isoformat() if client.created_at else "",
        "updated_at": client.updated_at.isoformat() if client.updated_at else "",
    }
