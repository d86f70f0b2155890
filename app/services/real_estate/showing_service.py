"""
Showing Service - scheduling with overlap protection
Showings of one listing never overlap; the listing row is locked while
the existing intervals are read so concurrent bookings serialize.
"""
from typing import Optional, List, Dict
from datetime import datetime
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.database.unit_of_work import run_in_transaction
from app.models.showing import Showing
from app.models.status import ShowingStatus
from app.services.conflict_checker import as_utc, find_conflict
from app.services.notification_service import NotificationEvent, SideEffectBatch, get_dispatcher
from app.services.real_estate import guards
from app.utils.errors import ConflictError
from app.utils.formatting import format_date, format_time_range
import logging
import uuid

logger = logging.getLogger(__name__)

SCHEDULING_CONFLICT = "There is a scheduling conflict with another showing"


def _validate_window(start_time: datetime, end_time: datetime) -> None:
    if as_utc(end_time) <= as_utc(start_time):
        raise ValueError("Showing end time must be after start time")


async def _ensure_no_overlap(
    session: AsyncSession,
    listing_id: str,
    start_time: datetime,
    end_time: datetime,
    exclude_id: Optional[str] = None,
) -> None:
    result = await session.execute(
        select(Showing.id, Showing.start_time, Showing.end_time).where(Showing.listing_id == listing_id)
    )
    conflict_id = find_conflict((start_time, end_time), result.all(), exclude_id=exclude_id)
    if conflict_id:
        logger.warning(f"⚠️ Showing overlaps {conflict_id} on listing {listing_id}")
        raise ConflictError(SCHEDULING_CONFLICT)


def _email_data(ctx: guards.ListingContext, client, start_time: datetime, end_time: datetime) -> Dict:
    return {
        "client_name": client.full_name,
        "property_address": guards.full_address(ctx.property),
        "showing_date": format_date(start_time),
        "showing_time": format_time_range(start_time, end_time),
        "agent_name": ctx.agent.full_name,
        "agent_email": ctx.agent.email,
    }


async def create_showing(
    listing_id: str,
    client_id: str,
    start_time: datetime,
    end_time: datetime,
    status: str = ShowingStatus.SCHEDULED.value,
    notes: Optional[str] = None,
    feedback: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Dict:
    """Schedule a showing; raises ConflictError when it overlaps another showing of the listing"""
    _validate_window(start_time, end_time)
    start_time, end_time = as_utc(start_time), as_utc(end_time)
    status = ShowingStatus(status).value
    batch = SideEffectBatch()

    async def _work(session: AsyncSession) -> Dict:
        ctx = await guards.load_listing_context(session, listing_id, lock=True)
        client = await guards.get_client(session, client_id)
        await _ensure_no_overlap(session, listing_id, start_time, end_time)

        showing = Showing(
            id=str(uuid.uuid4()),
            listing_id=listing_id,
            client_id=client_id,
            start_time=start_time,
            end_time=end_time,
            status=status,
            notes=notes,
            feedback=feedback,
        )
        session.add(showing)
        await session.flush()
        await session.refresh(showing)

        batch.notify(ctx.agent.id, NotificationEvent(
            title="New Showing Scheduled",
            message=(
                f"A showing has been scheduled for {guards.full_address(ctx.property)} "
                f"on {format_date(start_time)} at {format_time_range(start_time, end_time)} with {client.full_name}"
            ),
            entity_type="showing",
            entity_id=showing.id,
            action_url=guards.action_url("showings", showing.id),
        ))
        batch.email(
            client.email, "showing-confirmation",
            _email_data(ctx, client, start_time, end_time),
            entity_type="showing", entity_id=showing.id,
        )
        return showing_to_dict(showing)

    result = await run_in_transaction(_work, timeout=timeout)
    get_dispatcher().dispatch(batch)
    logger.info(f"📅 Showing scheduled: {result['id']} on listing {listing_id}")
    return result


async def update_showing(showing_id: str, update_data: Dict, timeout: Optional[float] = None) -> Dict:
    """
    Update a showing. A changed window is re-checked against the other showings
    of the (possibly new) listing; the showing may overlap its own old window.
    """
    batch = SideEffectBatch()

    async def _work(session: AsyncSession) -> Dict:
        showing = await guards.get_showing(session, showing_id)
        listing_id = update_data.get("listing_id") or showing.listing_id
        client_id = update_data.get("client_id") or showing.client_id

        previous_status = showing.status
        previous_start, previous_end = as_utc(showing.start_time), as_utc(showing.end_time)
        start_time = as_utc(update_data.get("start_time") or previous_start)
        end_time = as_utc(update_data.get("end_time") or previous_end)
        _validate_window(start_time, end_time)

        ctx = await guards.load_listing_context(session, listing_id, lock=True)
        client = await guards.get_client(session, client_id)

        window_changed = start_time != previous_start or end_time != previous_end
        if window_changed or listing_id != showing.listing_id:
            await _ensure_no_overlap(session, listing_id, start_time, end_time, exclude_id=showing_id)

        showing.listing_id = listing_id
        showing.client_id = client_id
        showing.start_time = start_time
        showing.end_time = end_time
        if update_data.get("status"):
            showing.status = ShowingStatus(update_data["status"]).value
        for field_name in ("notes", "feedback"):
            if field_name in update_data:
                setattr(showing, field_name, update_data[field_name])
        await session.flush()
        await session.refresh(showing)

        data = _email_data(ctx, client, start_time, end_time)
        if showing.status != previous_status:
            batch.notify(ctx.agent.id, NotificationEvent(
                title="Showing Status Updated",
                message=f"The showing for {guards.full_address(ctx.property)} has been updated to {showing.status}",
                entity_type="showing",
                entity_id=showing.id,
                action_url=guards.action_url("showings", showing.id),
            ))
            if showing.status == ShowingStatus.CANCELLED.value:
                batch.email(client.email, "showing-cancelled", data, entity_type="showing", entity_id=showing.id)

        if window_changed:
            rescheduled = {
                **data,
                "previous_date": format_date(previous_start),
                "previous_time": format_time_range(previous_start, previous_end),
            }
            batch.email(client.email, "showing-rescheduled", rescheduled, entity_type="showing", entity_id=showing.id)
        return showing_to_dict(showing)

    result = await run_in_transaction(_work, timeout=timeout)
    get_dispatcher().dispatch(batch)
    logger.info(f"🔄 Showing updated: {showing_id} ({result['status']})")
    return result


async def delete_showing(showing_id: str, timeout: Optional[float] = None) -> bool:
    """Delete a showing; the agent is notified and the client told it is cancelled"""
    batch = SideEffectBatch()

    async def _work(session: AsyncSession) -> bool:
        showing = await guards.get_showing(session, showing_id)
        ctx = await guards.load_listing_context(session, showing.listing_id)
        client = await guards.get_client(session, showing.client_id)
        start_time, end_time = showing.start_time, showing.end_time

        await session.delete(showing)

        batch.notify(ctx.agent.id, NotificationEvent(
            title="Showing Deleted",
            message=(
                f"The showing for {guards.full_address(ctx.property)} "
                f"on {format_date(start_time)} with {client.full_name} has been deleted"
            ),
            entity_type="showing",
            entity_id=showing_id,
        ))
        batch.email(
            client.email, "showing-cancelled",
            _email_data(ctx, client, start_time, end_time),
            entity_type="showing", entity_id=showing_id,
        )
        return True

    deleted = await run_in_transaction(_work, timeout=timeout)
    get_dispatcher().dispatch(batch)
    logger.info(f"🗑️ Showing deleted: {showing_id}")
    return deleted


async def get_showing(showing_id: str, timeout: Optional[float] = None) -> Dict:
    async def _work(session: AsyncSession) -> Dict:
        return showing_to_dict(await guards.get_showing(session, showing_id))

    return await run_in_transaction(_work, timeout=timeout)


async def list_showings(
    listing_id: Optional[str] = None,
    client_id: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    timeout: Optional[float] = None,
) -> List[Dict]:
    async def _work(session: AsyncSession) -> List[Dict]:
        stmt = select(Showing)
        if listing_id:
            stmt = stmt.where(Showing.listing_id == listing_id)
        if client_id:
            stmt = stmt.where(Showing.client_id == client_id)
        if status:
            stmt = stmt.where(Showing.status == status)
        stmt = stmt.order_by(Showing.start_time).offset(offset).limit(limit)
        result = await session.execute(stmt)
        return [showing_to_dict(s) for s in result.scalars().all()]

    return await run_in_transaction(_work, timeout=timeout)


def showing_to_dict(showing: Showing) -> Dict:
    return {
        "id": showing.id,
        "listing_id": showing.listing_id,
        "client_id": showing.client_id,
        "start_time": showing.start_time.isoformat() if showing.start_time else None,
        "end_time": showing.end_time.isoformat() if showing.end_time else None,
        "status": showing.status,
        "notes": showing.notes,
        "feedback": showing.feedback,
        "created_at": showing.created_at.isoformat() if showing.created_at else "",
        "updated_at": showing.updated_at.isoformat() if showing.updated_at else "",
    }
