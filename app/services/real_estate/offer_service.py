"""
Offer Service - offers against active listings
Accepting an offer moves its listing to Pending; other outcomes leave the
listing Active so several offers can coexist.
"""
from typing import Optional, List, Dict
from datetime import date
from decimal import Decimal
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.database.unit_of_work import run_in_transaction
from app.models.offer import Offer
from app.models.status import ListingStatus, OfferStatus
from app.models.transaction import Transaction
from app.services.notification_service import NotificationEvent, SideEffectBatch, get_dispatcher
from app.services.real_estate import guards
from app.utils.errors import ConflictError, InvalidStateError
from app.utils.formatting import format_currency, format_date
import logging
import uuid

logger = logging.getLogger(__name__)

# new status -> client email template
STATUS_EMAIL_TEMPLATES = {
    OfferStatus.ACCEPTED.value: "offer-accepted",
    OfferStatus.REJECTED.value: "offer-rejected",
    OfferStatus.COUNTERED.value: "offer-countered",
    OfferStatus.WITHDRAWN.value: "offer-withdrawn",
}


def _email_data(ctx: guards.ListingContext, client, offer: Offer) -> Dict:
    return {
        "client_name": client.full_name,
        "property_address": guards.full_address(ctx.property),
        "offer_amount": format_currency(offer.offer_price),
        "offer_date": format_date(offer.offer_date),
        "expiration_date": format_date(offer.expiration_date),
        "agent_name": ctx.agent.full_name,
        "agent_email": ctx.agent.email,
        "notes": offer.notes or "",
    }


async def create_offer(
    listing_id: str,
    client_id: str,
    offer_price: Decimal,
    offer_date: date,
    expiration_date: Optional[date] = None,
    status: str = OfferStatus.PENDING.value,
    contingencies: Optional[str] = None,
    notes: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Dict:
    """Submit an offer; the listing must be Active"""
    status = OfferStatus(status).value
    batch = SideEffectBatch()

    async def _work(session: AsyncSession) -> Dict:
        ctx = await guards.load_listing_context(session, listing_id, lock=True)
        if ctx.listing.status != ListingStatus.ACTIVE.value:
            raise InvalidStateError("Cannot create an offer for a non-active listing")
        client = await guards.get_client(session, client_id)

        offer = Offer(
            id=str(uuid.uuid4()),
            listing_id=listing_id,
            client_id=client_id,
            offer_price=guards.to_decimal(offer_price),
            offer_date=offer_date,
            expiration_date=expiration_date,
            status=status,
            contingencies=contingencies,
            notes=notes,
        )
        session.add(offer)
        await session.flush()
        await session.refresh(offer)

        address = guards.full_address(ctx.property)
        message = f"A new offer of {format_currency(offer.offer_price)} has been received for {address}"
        batch.notify(ctx.agent.id, NotificationEvent(
            title="New Offer Received",
            message=message,
            entity_type="offer",
            entity_id=offer.id,
            action_url=guards.action_url("offers", offer.id),
        ))
        batch.notify_role(settings.MANAGER_ROLE, NotificationEvent(
            title="New Offer Received",
            message=message,
            entity_type="offer",
            entity_id=offer.id,
            action_url=guards.action_url("offers", offer.id),
        ))
        batch.email(client.email, "offer-confirmation", _email_data(ctx, client, offer), entity_type="offer", entity_id=offer.id)
        return offer_to_dict(offer)

    result = await run_in_transaction(_work, timeout=timeout)
    get_dispatcher().dispatch(batch)
    logger.info(f"💰 Offer created: {result['id']} on listing {listing_id} ({result['offer_price']})")
    return result


async def update_offer_status(
    offer_id: str,
    new_status: Optional[str] = None,
    update_data: Optional[Dict] = None,
    timeout: Optional[float] = None,
) -> Dict:
    """
    Update an offer's status and fields.
    Transition into Accepted sets the listing to Pending.
    """
    update_data = update_data or {}
    batch = SideEffectBatch()

    async def _work(session: AsyncSession) -> Dict:
        offer = await guards.get_offer(session, offer_id, lock=True)
        previous_status = offer.status
        target_status = OfferStatus(new_status).value if new_status else previous_status
        listing_id = update_data.get("listing_id") or offer.listing_id

        ctx = await guards.load_listing_context(session, listing_id, lock=True)
        client = await guards.get_client(session, update_data.get("client_id") or offer.client_id)

        offer.listing_id = listing_id
        offer.client_id = client.id
        for field_name in ("offer_price", "offer_date", "expiration_date", "contingencies", "notes"):
            if field_name in update_data:
                value = update_data[field_name]
                setattr(offer, field_name, guards.to_decimal(value) if field_name == "offer_price" else value)
        offer.status = target_status

        if target_status == OfferStatus.ACCEPTED.value and previous_status != OfferStatus.ACCEPTED.value:
            ctx.listing.status = ListingStatus.PENDING.value

        await session.flush()
        await session.refresh(offer)

        if target_status != previous_status:
            batch.notify(ctx.agent.id, NotificationEvent(
                title="Offer Status Updated",
                message=f"The offer for {guards.full_address(ctx.property)} has been updated to {target_status}",
                entity_type="offer",
                entity_id=offer.id,
                action_url=guards.action_url("offers", offer.id),
            ))
            template = STATUS_EMAIL_TEMPLATES.get(target_status)
            if template:
                batch.email(client.email, template, _email_data(ctx, client, offer), entity_type="offer", entity_id=offer.id)
        return offer_to_dict(offer)

    result = await run_in_transaction(_work, timeout=timeout)
    get_dispatcher().dispatch(batch)
    logger.info(f"🔄 Offer updated: {offer_id} -> {result['status']}")
    return result


async def delete_offer(offer_id: str, timeout: Optional[float] = None) -> bool:
    """Delete an offer that has no transaction; no listing cascade"""
    batch = SideEffectBatch()

    async def _work(session: AsyncSession) -> bool:
        offer = await guards.get_offer(session, offer_id, lock=True)
        if await guards.count_rows(session, Transaction, Transaction.offer_id == offer_id):
            raise ConflictError("Cannot delete an offer with an associated transaction")

        ctx = await guards.load_listing_context(session, offer.listing_id)
        client = await guards.get_client(session, offer.client_id)
        data = _email_data(ctx, client, offer)

        await session.delete(offer)

        batch.notify(ctx.agent.id, NotificationEvent(
            title="Offer Deleted",
            message=f"The offer of {data['offer_amount']} for {data['property_address']} has been deleted",
            entity_type="offer",
            entity_id=offer_id,
        ))
        batch.email(client.email, "offer-deleted", data, entity_type="offer", entity_id=offer_id)
        return True

    deleted = await run_in_transaction(_work, timeout=timeout)
    get_dispatcher().dispatch(batch)
    logger.info(f"🗑️ Offer deleted: {offer_id}")
    return deleted


async def get_offer(offer_id: str, timeout: Optional[float] = None) -> Dict:
    """Offer with its transaction (None when not yet closed)"""
    async def _work(session: AsyncSession) -> Dict:
        offer = await guards.get_offer(session, offer_id)
        result = await session.execute(select(Transaction).where(Transaction.offer_id == offer_id))
        transaction = result.scalar_one_or_none()
        data = offer_to_dict(offer)
        data["transaction"] = {
            "id": transaction.id,
            "closing_date": transaction.closing_date.isoformat(),
            "commission_amount": guards.money(transaction.commission_amount),
        } if transaction else None
        return data

    return await run_in_transaction(_work, timeout=timeout)


async def list_offers(
    listing_id: Optional[str] = None,
    client_id: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    timeout: Optional[float] = None,
) -> List[Dict]:
    async def _work(session: AsyncSession) -> List[Dict]:
        stmt = select(Offer)
        if listing_id:
            stmt = stmt.where(Offer.listing_id == listing_id)
        if client_id:
            stmt = stmt.where(Offer.client_id == client_id)
        if status:
            stmt = stmt.where(Offer.status == status)
        stmt = stmt.order_by(desc(Offer.offer_date), desc(Offer.created_at)).offset(offset).limit(limit)
        result = await session.execute(stmt)
        return [offer_to_dict(o) for o in result.scalars().all()]

    return await run_in_transaction(_work, timeout=timeout)


def offer_to_dict(offer: Offer) -> Dict:
    return {
        "id": offer.id,
        "listing_id": offer.listing_id,
        "client_id": offer.client_id,
        "offer_price": guards.money(offer.offer_price),
        "offer_date": offer.offer_date.isoformat() if offer.offer_date else None,
        "expiration_date": offer.expiration_date.isoformat() if offer.expiration_date else None,
        "status": offer.status,
        "contingencies": offer.contingencies,
        "notes": offer.notes,
        "created_at": offer.created_at.isoformat() if offer.created_at else "",
        "updated_at": offer.updated_at.isoformat() if offer.updated_at else "",
    }
