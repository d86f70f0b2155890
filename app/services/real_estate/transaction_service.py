"""
Transaction Service - closing records for accepted offers

Creating a transaction marks the listing and property Sold (sale price from
the offer); deleting it puts the listing back to Active and the property back
to Available with the sale price cleared. Each runs as one database transaction.
"""
from typing import Optional, List, Dict
from datetime import date
from decimal import Decimal
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.database.unit_of_work import run_in_transaction
from app.models.offer import Offer
from app.models.status import ListingStatus, NotificationType, OfferStatus, PropertyStatus
from app.models.transaction import Transaction
from app.services.notification_service import NotificationEvent, SideEffectBatch, get_dispatcher
from app.services.real_estate import guards
from app.utils.errors import ConflictError, InvalidStateError
from app.utils.formatting import format_currency, format_date
import logging
import uuid

logger = logging.getLogger(__name__)


async def _get_accepted_offer(session: AsyncSession, offer_id: str, message: str) -> Offer:
    offer = await guards.get_offer(session, offer_id, lock=True)
    if offer.status != OfferStatus.ACCEPTED.value:
        raise InvalidStateError(message)
    return offer


async def _ensure_offer_free(session: AsyncSession, offer_id: str, exclude_id: Optional[str] = None) -> None:
    conditions = [Transaction.offer_id == offer_id]
    if exclude_id:
        conditions.append(Transaction.id != exclude_id)
    if await guards.count_rows(session, Transaction, *conditions):
        raise ConflictError("A transaction already exists for this offer")


def _email_data(ctx: guards.ListingContext, client, offer: Offer, transaction: Transaction) -> Dict:
    return {
        "client_name": client.full_name,
        "property_address": guards.full_address(ctx.property),
        "sale_price": format_currency(offer.offer_price),
        "closing_date": format_date(transaction.closing_date),
        "agent_name": ctx.agent.full_name,
        "agent_email": ctx.agent.email,
    }


async def create_transaction(
    offer_id: str,
    closing_date: date,
    commission_amount: Decimal,
    closing_costs: Optional[Decimal] = None,
    notes: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Dict:
    """Close an accepted offer; listing and property become Sold"""
    batch = SideEffectBatch()

    async def _work(session: AsyncSession) -> Dict:
        offer = await _get_accepted_offer(session, offer_id, "Cannot create a transaction for a non-accepted offer")
        await _ensure_offer_free(session, offer_id)

        ctx = await guards.load_listing_context(session, offer.listing_id, lock=True)
        client = await guards.get_client(session, offer.client_id)

        transaction = Transaction(
            id=str(uuid.uuid4()),
            offer_id=offer_id,
            closing_date=closing_date,
            commission_amount=guards.to_decimal(commission_amount),
            closing_costs=guards.to_decimal(closing_costs),
            notes=notes,
        )
        session.add(transaction)

        ctx.listing.status = ListingStatus.SOLD.value
        ctx.property.status = PropertyStatus.SOLD.value
        ctx.property.sale_price = offer.offer_price

        await session.flush()
        await session.refresh(transaction)

        address = guards.full_address(ctx.property)
        batch.notify(ctx.agent.id, NotificationEvent(
            title="New Transaction Created",
            message=f"A new transaction has been created for the sale of {address}",
            entity_type="transaction",
            entity_id=transaction.id,
            action_url=guards.action_url("transactions", transaction.id),
        ))
        batch.notify_role(settings.MANAGER_ROLE, NotificationEvent(
            title="New Transaction Created",
            message=f"A new transaction has been created for the sale of {address} for {format_currency(offer.offer_price)}",
            entity_type="transaction",
            entity_id=transaction.id,
            action_url=guards.action_url("transactions", transaction.id),
        ))
        batch.email(
            client.email, "transaction-created",
            _email_data(ctx, client, offer, transaction),
            entity_type="transaction", entity_id=transaction.id,
        )
        return transaction_to_dict(transaction)

    result = await run_in_transaction(_work, timeout=timeout)
    get_dispatcher().dispatch(batch)
    logger.info(f"🏁 Transaction created: {result['id']} for offer {offer_id}")
    return result


async def update_transaction(transaction_id: str, update_data: Dict, timeout: Optional[float] = None) -> Dict:
    """
    Update transaction fields. Moving it to another offer re-checks that offer;
    a changed closing date only triggers notifications.
    """
    batch = SideEffectBatch()

    async def _work(session: AsyncSession) -> Dict:
        transaction = await guards.get_transaction(session, transaction_id)
        offer_id = update_data.get("offer_id") or transaction.offer_id
        offer = await _get_accepted_offer(session, offer_id, "Cannot update a transaction with a non-accepted offer")
        if offer_id != transaction.offer_id:
            await _ensure_offer_free(session, offer_id, exclude_id=transaction_id)

        previous_closing_date = transaction.closing_date
        transaction.offer_id = offer_id
        if update_data.get("closing_date"):
            transaction.closing_date = update_data["closing_date"]
        for field_name in ("commission_amount", "closing_costs"):
            if field_name in update_data:
                setattr(transaction, field_name, guards.to_decimal(update_data[field_name]))
        if "notes" in update_data:
            transaction.notes = update_data["notes"]
        await session.flush()
        await session.refresh(transaction)

        if transaction.closing_date != previous_closing_date:
            ctx = await guards.load_listing_context(session, offer.listing_id)
            client = await guards.get_client(session, offer.client_id)
            batch.notify(ctx.agent.id, NotificationEvent(
                title="Transaction Closing Date Updated",
                message=(
                    f"The closing date for {guards.full_address(ctx.property)} "
                    f"has been updated to {format_date(transaction.closing_date)}"
                ),
                entity_type="transaction",
                entity_id=transaction.id,
                action_url=guards.action_url("transactions", transaction.id),
            ))
            data = _email_data(ctx, client, offer, transaction)
            data.update({
                "previous_closing_date": format_date(previous_closing_date),
                "new_closing_date": format_date(transaction.closing_date),
            })
            batch.email(client.email, "closing-date-updated", data, entity_type="transaction", entity_id=transaction.id)
        return transaction_to_dict(transaction)

    result = await run_in_transaction(_work, timeout=timeout)
    get_dispatcher().dispatch(batch)
    logger.info(f"🔄 Transaction updated: {transaction_id}")
    return result


async def delete_transaction(transaction_id: str, timeout: Optional[float] = None) -> bool:
    """Remove a transaction; listing back to Active, property back to Available"""
    batch = SideEffectBatch()

    async def _work(session: AsyncSession) -> bool:
        transaction = await guards.get_transaction(session, transaction_id)
        offer = await guards.get_offer(session, transaction.offer_id)
        ctx = await guards.load_listing_context(session, offer.listing_id, lock=True)
        client = await guards.get_client(session, offer.client_id)
        data = _email_data(ctx, client, offer, transaction)

        # Reactivation must not produce a second Active listing
        await guards.ensure_no_other_active_listing(session, ctx.property.id, exclude_listing_id=ctx.listing.id)

        await session.delete(transaction)
        ctx.listing.status = ListingStatus.ACTIVE.value
        ctx.property.status = PropertyStatus.AVAILABLE.value
        ctx.property.sale_price = None
        await session.flush()

        event = dict(
            title="Transaction Deleted",
            message=f"The transaction for {data['property_address']} has been deleted",
            entity_type="transaction",
            entity_id=transaction_id,
            kind=NotificationType.WARNING.value,
        )
        batch.notify(ctx.agent.id, NotificationEvent(**event))
        batch.notify_role(settings.MANAGER_ROLE, NotificationEvent(**event))
        batch.email(client.email, "transaction-cancelled", data, entity_type="transaction", entity_id=transaction_id)
        return True

    deleted = await run_in_transaction(_work, timeout=timeout)
    get_dispatcher().dispatch(batch)
    logger.info(f"🗑️ Transaction deleted: {transaction_id}")
    return deleted


async def get_transaction(transaction_id: str, timeout: Optional[float] = None) -> Dict:
    """Transaction with its offer, listing and property ids"""
    async def _work(session: AsyncSession) -> Dict:
        transaction = await guards.get_transaction(session, transaction_id)
        offer = await guards.get_offer(session, transaction.offer_id)
        listing = await guards.get_listing(session, offer.listing_id)
        data = transaction_to_dict(transaction)
        data.update({
            "listing_id": listing.id,
            "property_id": listing.property_id,
            "client_id": offer.client_id,
            "sale_price": guards.money(offer.offer_price),
        })
        return data

    return await run_in_transaction(_work, timeout=timeout)


async def list_transactions(limit: int = 50, offset: int = 0, timeout: Optional[float] = None) -> List[Dict]:
    async def _work(session: AsyncSession) -> List[Dict]:
        stmt = select(Transaction).order_by(desc(Transaction.closing_date)).offset(offset).limit(limit)
        result = await session.execute(stmt)
        return [transaction_to_dict(t) for t in result.scalars().all()]

    return await run_in_transaction(_work, timeout=timeout)


def transaction_to_dict(transaction: Transaction) -> Dict:
    return {
        "id": transaction.id,
        "offer_id": transaction.offer_id,
        "closing_date": transaction.closing_date.isoformat() if transaction.closing_date else None,
        "commission_amount": guards.money(transaction.commission_amount),
        "closing_costs": guards.money(transaction.closing_costs),
        "notes": transaction.notes,
        "created_at": transaction.created_at.isoformat() if transaction.created_at else "",
        "updated_at": transaction.updated_at.isoformat() if transaction.updated_at else "",
    }
