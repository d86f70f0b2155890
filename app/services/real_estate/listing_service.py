"""
Listing Service - listing lifecycle and property status cascades

Cascade rules on every listing write:
    Active              -> property Available
    Sold                -> property Sold
    Expired / Cancelled -> property Inactive, unless another listing is still Active
    Pending             -> property untouched
"""
from typing import Optional, List, Dict
from datetime import date
from decimal import Decimal
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.database.unit_of_work import run_in_transaction
from app.models.listing import Listing
from app.models.offer import Offer
from app.models.property import Property
from app.models.showing import Showing
from app.models.status import ListingStatus, PropertyStatus
from app.services.notification_service import NotificationEvent, SideEffectBatch, get_dispatcher
from app.services.real_estate import guards
from app.utils.formatting import format_currency
import logging
import uuid

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("property_id", "agent_id", "list_price", "start_date", "end_date")


async def create_listing(
    property_id: str,
    agent_id: str,
    list_price: Decimal,
    start_date: date,
    end_date: Optional[date] = None,
    status: str = ListingStatus.ACTIVE.value,
    timeout: Optional[float] = None,
) -> Dict:
    """
    Create a listing for an existing property and agent.
    An Active listing requires that the property has no other Active listing
    and makes the property Available. Managers are notified after commit.
    """
    status = ListingStatus(status).value
    batch = SideEffectBatch()

    async def _work(session: AsyncSession) -> Dict:
        prop = await guards.get_property(session, property_id)
        await guards.get_agent(session, agent_id)

        if status == ListingStatus.ACTIVE.value:
            await guards.ensure_no_other_active_listing(session, property_id)

        listing = Listing(
            id=str(uuid.uuid4()),
            property_id=property_id,
            agent_id=agent_id,
            list_price=guards.to_decimal(list_price),
            start_date=start_date,
            end_date=end_date,
            status=status,
        )
        session.add(listing)

        if status == ListingStatus.ACTIVE.value:
            prop.status = PropertyStatus.AVAILABLE.value

        await session.flush()
        await session.refresh(listing)

        batch.notify_role(settings.MANAGER_ROLE, NotificationEvent(
            title="New Property Listing",
            message=f"A new property at {guards.full_address(prop)} has been listed for {format_currency(listing.list_price)}",
            entity_type="listing",
            entity_id=listing.id,
            action_url=guards.action_url("listings", listing.id),
        ))
        return listing_to_dict(listing)

    result = await run_in_transaction(_work, timeout=timeout)
    get_dispatcher().dispatch(batch)
    logger.info(f"✅ Listing created: {result['id']} for property {property_id} ({result['status']})")
    return result


async def update_listing_status(
    listing_id: str,
    new_status: Optional[str] = None,
    update_data: Optional[Dict] = None,
    timeout: Optional[float] = None,
) -> Dict:
    """
    Update a listing's status and any other fields, then cascade to the property.
    new_status=None keeps the current status; the cascade still runs.
    """
    update_data = update_data or {}
    batch = SideEffectBatch()

    async def _work(session: AsyncSession) -> Dict:
        listing = await guards.get_listing(session, listing_id, lock=True)
        previous_status = listing.status
        previous_property_id = listing.property_id
        target_status = ListingStatus(new_status).value if new_status else previous_status
        target_property_id = update_data.get("property_id") or previous_property_id

        prop = await guards.get_property(session, target_property_id)
        agent = await guards.get_agent(session, update_data.get("agent_id") or listing.agent_id)

        becomes_active = target_status == ListingStatus.ACTIVE.value and (
            previous_status != ListingStatus.ACTIVE.value or target_property_id != previous_property_id
        )
        if becomes_active:
            await guards.ensure_no_other_active_listing(session, target_property_id, exclude_listing_id=listing_id)

        for field_name in UPDATABLE_FIELDS:
            if field_name in update_data and field_name != "property_id":
                value = update_data[field_name]
                setattr(listing, field_name, guards.to_decimal(value) if field_name == "list_price" else value)
        listing.property_id = target_property_id
        listing.status = target_status
        await session.flush()

        await _cascade_to_property(session, prop, target_status, listing_id)
        if target_property_id != previous_property_id and previous_status == ListingStatus.ACTIVE.value:
            # The property the listing left may have no Active listing now
            previous_prop = await guards.get_property(session, previous_property_id, lock=True)
            await _cascade_to_property(session, previous_prop, ListingStatus.CANCELLED.value, listing_id)

        await session.refresh(listing)

        if previous_status != target_status:
            batch.notify(agent.id, NotificationEvent(
                title="Listing Status Updated",
                message=f"The listing for {guards.full_address(prop)} has been updated to {target_status}",
                entity_type="listing",
                entity_id=listing.id,
                action_url=guards.action_url("listings", listing.id),
            ))
        return listing_to_dict(listing)

    result = await run_in_transaction(_work, timeout=timeout)
    get_dispatcher().dispatch(batch)
    logger.info(f"🔄 Listing updated: {listing_id} -> {result['status']}")
    return result


async def _cascade_to_property(session: AsyncSession, prop: Property, listing_status: str, listing_id: str) -> None:
    if listing_status == ListingStatus.ACTIVE.value:
        prop.status = PropertyStatus.AVAILABLE.value
    elif listing_status == ListingStatus.SOLD.value:
        prop.status = PropertyStatus.SOLD.value
    elif listing_status in (ListingStatus.EXPIRED.value, ListingStatus.CANCELLED.value):
        remaining = await guards.count_other_active_listings(session, prop.id, exclude_listing_id=listing_id)
        if not remaining:
            prop.status = PropertyStatus.INACTIVE.value
    await session.flush()


async def get_listing(listing_id: str, timeout: Optional[float] = None) -> Dict:
    """Listing with its showings and offers"""
    async def _work(session: AsyncSession) -> Dict:
        listing = await guards.get_listing(session, listing_id)
        showings = await session.execute(
            select(Showing).where(Showing.listing_id == listing_id).order_by(Showing.start_time)
        )
        offers = await session.execute(
            select(Offer).where(Offer.listing_id == listing_id).order_by(desc(Offer.offer_date))
        )
        data = listing_to_dict(listing)
        data["showings"] = [
            {
                "id": s.id,
                "client_id": s.client_id,
                "start_time": s.start_time.isoformat(),
                "end_time": s.end_time.isoformat(),
                "status": s.status,
            }
            for s in showings.scalars().all()
        ]
        data["offers"] = [
            {
                "id": o.id,
                "client_id": o.client_id,
                "offer_price": guards.money(o.offer_price),
                "offer_date": o.offer_date.isoformat() if o.offer_date else None,
                "status": o.status,
            }
            for o in offers.scalars().all()
        ]
        return data

    return await run_in_transaction(_work, timeout=timeout)


async def list_listings(
    status: Optional[str] = None,
    agent_id: Optional[str] = None,
    property_id: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    timeout: Optional[float] = None,
) -> List[Dict]:
    async def _work(session: AsyncSession) -> List[Dict]:
        stmt = select(Listing)
        if status:
            stmt = stmt.where(Listing.status == status)
        if agent_id:
            stmt = stmt.where(Listing.agent_id == agent_id)
        if property_id:
            stmt = stmt.where(Listing.property_id == property_id)
        stmt = stmt.order_by(desc(Listing.created_at)).offset(offset).limit(limit)
        result = await session.execute(stmt)
        return [listing_to_dict(l) for l in result.scalars().all()]

    return await run_in_transaction(_work, timeout=timeout)


async def delete_listing(listing_id: str, timeout: Optional[float] = None) -> bool:
    """
    Delete a listing without showings or offers.
    Removing the last Active listing leaves the property Inactive.
    """
    async def _work(session: AsyncSession) -> bool:
        listing = await guards.get_listing(session, listing_id, lock=True)
        await guards.ensure_no_dependents(session, "listing", "listing_id", listing_id)

        was_active = listing.status == ListingStatus.ACTIVE.value
        property_id = listing.property_id
        await session.delete(listing)
        await session.flush()

        if was_active and not await guards.count_other_active_listings(session, property_id):
            prop = await guards.get_property(session, property_id)
            prop.status = PropertyStatus.INACTIVE.value
        return True

    deleted = await run_in_transaction(_work, timeout=timeout)
    logger.info(f"🗑️ Listing deleted: {listing_id}")
    return deleted


def listing_to_dict(listing: Listing) -> Dict:
    return {
        "id": listing.id,
        "property_id": listing.property_id,
        "agent_id": listing.agent_id,
        "list_price": guards.money(listing.list_price),
        "start_date": listing.start_date.isoformat() if listing.start_date else None,
        "end_date": listing.end_date.isoformat() if listing.end_date else None,
        "status": listing.status,
        "created_at": listing.created_at.isoformat() if listing.created_at else "",
        "updated_at": listing.updated_at.isoformat() if listing.updated_at else "",
    }
