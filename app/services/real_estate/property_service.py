"""
Property Service - property records and the guarded delete
Status is normally driven by listing and transaction cascades.
"""
from typing import Optional, List, Dict
from decimal import Decimal
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession
from app.database.unit_of_work import run_in_transaction
from app.models.listing import Listing
from app.models.property import Property
from app.models.status import ListingStatus, PropertyStatus
from app.services.real_estate import guards
from app.utils.errors import ConflictError
import logging
import uuid

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "address", "city", "state", "zip", "country", "type",
    "bedrooms", "bathrooms", "square_feet", "lot_size", "year_built",
    "listing_price", "sale_price", "status", "description",
)
DECIMAL_FIELDS = ("bathrooms", "lot_size", "listing_price", "sale_price")


async def create_property(property_data: Dict, timeout: Optional[float] = None) -> Dict:
    """Create a property; status defaults to Available"""
    async def _work(session: AsyncSession) -> Dict:
        new_property = Property(id=str(uuid.uuid4()))
        _apply_fields(new_property, property_data)
        if not new_property.status:
            new_property.status = PropertyStatus.AVAILABLE.value
        session.add(new_property)
        await session.flush()
        await session.refresh(new_property)
        return property_to_dict(new_property)

    result = await run_in_transaction(_work, timeout=timeout)
    logger.info(f"🏠 Property created: {result['id']} ({result['address']})")
    return result


async def get_property(property_id: str, timeout: Optional[float] = None) -> Dict:
    """Property with its current Active listing (None when there is none)"""
    async def _work(session: AsyncSession) -> Dict:
        prop = await guards.get_property(session, property_id)
        result = await session.execute(
            select(Listing).where(
                Listing.property_id == property_id,
                Listing.status == ListingStatus.ACTIVE.value,
            )
        )
        active = result.scalar_one_or_none()
        data = property_to_dict(prop)
        data["active_listing"] = _active_listing_summary(active) if active else None
        return data

    return await run_in_transaction(_work, timeout=timeout)


async def list_properties(
    status: Optional[str] = None,
    property_type: Optional[str] = None,
    city: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    limit: int = 50,
    offset: int = 0,
    timeout: Optional[float] = None,
) -> List[Dict]:
    async def _work(session: AsyncSession) -> List[Dict]:
        stmt = select(Property)
        if status:
            stmt = stmt.where(Property.status == status)
        if property_type:
            stmt = stmt.where(Property.type == property_type)
        if city:
            stmt = stmt.where(Property.city.ilike(f"%{city}%"))
        if min_price is not None:
            stmt = stmt.where(Property.listing_price >= min_price)
        if max_price is not None:
            stmt = stmt.where(Property.listing_price <= max_price)
        stmt = stmt.order_by(desc(Property.created_at)).offset(offset).limit(limit)
        result = await session.execute(stmt)
        return [property_to_dict(p) for p in result.scalars().all()]

    return await run_in_transaction(_work, timeout=timeout)


async def update_property(property_id: str, update_data: Dict, timeout: Optional[float] = None) -> Dict:
    async def _work(session: AsyncSession) -> Dict:
        prop = await guards.get_property(session, property_id, lock=True)
        _apply_fields(prop, update_data)
        await session.flush()
        await session.refresh(prop)
        return property_to_dict(prop)

    return await run_in_transaction(_work, timeout=timeout)


async def delete_property(property_id: str, timeout: Optional[float] = None) -> bool:
    """Delete a property that has no Active listing"""
    async def _work(session: AsyncSession) -> bool:
        prop = await guards.get_property(session, property_id, lock=True)
        if await guards.count_other_active_listings(session, property_id):
            raise ConflictError("Cannot delete property with active listings")
        await guards.ensure_listing_history_unreferenced(session, property_id)
        await session.delete(prop)
        return True

    deleted = await run_in_transaction(_work, timeout=timeout)
    logger.info(f"🗑️ Property deleted: {property_id}")
    return deleted


def _apply_fields(prop: Property, data: Dict) -> None:
    for field_name in UPDATABLE_FIELDS:
        if field_name not in data:
            continue
        value = data[field_name]
        if field_name in DECIMAL_FIELDS:
            value = guards.to_decimal(value)
        elif field_name == "status" and value is not None:
            value = PropertyStatus(value).value
        setattr(prop, field_name, value)


def _active_listing_summary(listing: Listing) -> Dict:
    return {
        "id": listing.id,
        "agent_id": listing.agent_id,
        "list_price": guards.money(listing.list_price),
        "start_date": listing.start_date.isoformat() if listing.start_date else None,
        "end_date": listing.end_date.isoformat() if listing.end_date else None,
        "status": listing.status,
    }


def property_to_dict(prop: Property) -> Dict:
    return {
        "id": prop.id,
        "address": prop.address,
        "city": prop.city,
        "state": prop.state,
        "zip": prop.zip,
        "country": prop.country,
        "type": prop.type,
        "bedrooms": prop.bedrooms,
        "bathrooms": guards.money(prop.bathrooms),
        "square_feet": prop.square_feet,
        "lot_size": guards.money(prop.lot_size),
        "year_built": prop.year_built,
        "listing_price": guards.money(prop.listing_price),
        "sale_price": guards.money(prop.sale_price),
        "status": prop.status,
        "description": prop.description,
        "created_at": prop.created_at.isoformat() if prop.created_at else "",
        "updated_at": prop.updated_at.isoformat() if prop.updated_at else "",
    }
