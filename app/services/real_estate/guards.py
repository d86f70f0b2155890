"""
Shared lookups and invariant guards for lifecycle operations.
All helpers take the caller's transactional session.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Type
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.database.connection import Base
from app.models.client import Client
from app.models.listing import Listing
from app.models.offer import Offer
from app.models.property import Property
from app.models.showing import Showing
from app.models.status import ListingStatus
from app.models.transaction import Transaction
from app.models.user import User
from app.utils.errors import ConflictError, NotFoundError


@dataclass
class ListingContext:
    """A listing with the property and agent used in side-effect messages"""
    listing: Listing
    property: Property
    agent: User


async def get_or_404(
    session: AsyncSession,
    model: Type[Base],
    entity_id: Optional[str],
    label: str,
    lock: bool = False,
):
    """Load a row by id or raise NotFoundError; lock=True reads FOR UPDATE"""
    if not entity_id:
        raise NotFoundError(f"{label} not found")
    stmt = select(model).where(model.id == entity_id)
    if lock:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    entity = result.scalar_one_or_none()
    if entity is None:
        raise NotFoundError(f"{label} not found")
    return entity


async def get_property(session: AsyncSession, property_id: str, lock: bool = False) -> Property:
    return await get_or_404(session, Property, property_id, "Property", lock=lock)


async def get_listing(session: AsyncSession, listing_id: str, lock: bool = False) -> Listing:
    return await get_or_404(session, Listing, listing_id, "Listing", lock=lock)


async def get_agent(session: AsyncSession, agent_id: str) -> User:
    return await get_or_404(session, User, agent_id, "Agent")


async def get_client(session: AsyncSession, client_id: str) -> Client:
    return await get_or_404(session, Client, client_id, "Client")


async def get_offer(session: AsyncSession, offer_id: str, lock: bool = False) -> Offer:
    return await get_or_404(session, Offer, offer_id, "Offer", lock=lock)


async def get_showing(session: AsyncSession, showing_id: str) -> Showing:
    return await get_or_404(session, Showing, showing_id, "Showing")


async def get_transaction(session: AsyncSession, transaction_id: str) -> Transaction:
    return await get_or_404(session, Transaction, transaction_id, "Transaction")


async def load_listing_context(session: AsyncSession, listing_id: str, lock: bool = False) -> ListingContext:
    listing = await get_listing(session, listing_id, lock=lock)
    prop = await get_property(session, listing.property_id)
    agent = await get_agent(session, listing.agent_id)
    return ListingContext(listing=listing, property=prop, agent=agent)


async def count_rows(session: AsyncSession, model: Type[Base], *conditions) -> int:
    stmt = select(func.count()).select_from(model).where(*conditions)
    result = await session.execute(stmt)
    return result.scalar_one() or 0


async def count_other_active_listings(
    session: AsyncSession,
    property_id: str,
    exclude_listing_id: Optional[str] = None,
) -> int:
    conditions = [
        Listing.property_id == property_id,
        Listing.status == ListingStatus.ACTIVE.value,
    ]
    if exclude_listing_id:
        conditions.append(Listing.id != exclude_listing_id)
    return await count_rows(session, Listing, *conditions)


async def ensure_no_other_active_listing(
    session: AsyncSession,
    property_id: str,
    exclude_listing_id: Optional[str] = None,
) -> None:
    """
    Enforce the single-active-listing rule.
    The Property row is locked first so concurrent activations serialize on it.
    """
    await get_property(session, property_id, lock=True)
    if await count_other_active_listings(session, property_id, exclude_listing_id):
        raise ConflictError("Property already has an active listing")


async def ensure_no_dependents(session: AsyncSession, entity_label: str, column_name: str, entity_id: str) -> None:
    """Listings and clients cannot be deleted while showings or offers reference them"""
    showings = await count_rows(session, Showing, getattr(Showing, column_name) == entity_id)
    offers = await count_rows(session, Offer, getattr(Offer, column_name) == entity_id)
    if showings or offers:
        raise ConflictError(f"Cannot delete {entity_label} with associated showings/offers")


async def ensure_listing_history_unreferenced(session: AsyncSession, property_id: str) -> None:
    """Listings removed along with a property must carry no showings or offers"""
    listing_ids = select(Listing.id).where(Listing.property_id == property_id)
    showings = await count_rows(session, Showing, Showing.listing_id.in_(listing_ids))
    offers = await count_rows(session, Offer, Offer.listing_id.in_(listing_ids))
    if showings or offers:
        raise ConflictError("Cannot delete property with listings that have showings/offers")


def full_address(prop: Property) -> str:
    """123 Main St, Springfield, IL 62701"""
    locality = " ".join(part for part in (prop.state, prop.zip) if part)
    return ", ".join(part for part in (prop.address, prop.city, locality) if part)


def action_url(entity: str, entity_id: str) -> str:
    return f"/real-estate/{entity}/{entity_id}"


def to_decimal(value) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return Decimal(str(value))


def money(value) -> Optional[str]:
    return str(value) if value is not None else None
