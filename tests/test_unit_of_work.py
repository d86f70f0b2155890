"""
Test Case Suite: Unit of Work
Test ID Range: TC-090 to TC-095

Validates commit/rollback boundaries and storage error translation.
"""

import asyncio
import pytest
import uuid
from datetime import date
from decimal import Decimal
from sqlalchemy import select
from app.database.unit_of_work import query, run_in_transaction
from app.models.listing import Listing
from app.models.property import Property
from app.utils.errors import ConflictError, StorageTimeoutError


def new_listing(property_id, agent_id, status="Active"):
    return Listing(
        id=str(uuid.uuid4()),
        property_id=property_id,
        agent_id=agent_id,
        list_price=Decimal("360000"),
        start_date=date(2026, 1, 5),
        status=status,
    )


class TestRunInTransaction:
    """
    Test Case TC-090: Commit on Success
    Expected Result: Work result returned and row persisted
    """
    @pytest.mark.asyncio
    async def test_tc090_commit(self, session_factory):
        """TC-090: Commit"""
        property_id = str(uuid.uuid4())

        async def _work(session):
            session.add(Property(id=property_id, address="7 Birch Lane", status="Available"))
            return property_id

        assert await run_in_transaction(_work) == property_id
        async with session_factory() as session:
            assert await session.get(Property, property_id) is not None

    """
    Test Case TC-091: Rollback on Error
    Expected Result: Exception propagates and nothing is written
    """
    @pytest.mark.asyncio
    async def test_tc091_rollback(self, session_factory):
        """TC-091: Rollback"""
        property_id = str(uuid.uuid4())

        async def _work(session):
            session.add(Property(id=property_id, address="7 Birch Lane", status="Available"))
            await session.flush()
            raise ConflictError("abort")

        with pytest.raises(ConflictError):
            await run_in_transaction(_work)
        async with session_factory() as session:
            assert await session.get(Property, property_id) is None

    """
    Test Case TC-092: Deadline Exceeded
    Expected Result: StorageTimeoutError
    """
    @pytest.mark.asyncio
    async def test_tc092_timeout(self, session_factory):
        """TC-092: Timeout"""
        async def _work(session):
            await asyncio.sleep(1)

        with pytest.raises(StorageTimeoutError):
            await run_in_transaction(_work, timeout=0.05)

    """
    Test Case TC-093: Unique Index Backstop
    Description: Two Active listings for one property bypassing the service pre-check
    Expected Result: ConflictError naming the active-listing rule; second row absent
    """
    @pytest.mark.asyncio
    async def test_tc093_active_listing_index(self, session_factory, active_listing, agent):
        """TC-093: Integrity error translated"""
        prop, listing = active_listing

        async def _work(session):
            session.add(new_listing(prop.id, agent.id))
            await session.flush()

        with pytest.raises(ConflictError) as exc_info:
            await run_in_transaction(_work)

        assert exc_info.value.message == "Property already has an active listing"
        async with session_factory() as session:
            rows = (await session.execute(select(Listing).where(Listing.property_id == prop.id))).scalars().all()
            assert [row.id for row in rows] == [listing.id]

    """
    Test Case TC-094: Raw Read Query
    Expected Result: Rows returned as dicts
    """
    @pytest.mark.asyncio
    async def test_tc094_query(self, active_listing):
        """TC-094: Parameterized query"""
        prop, listing = active_listing

        rows = await query(
            "SELECT id, status FROM listings WHERE property_id = :property_id",
            {"property_id": prop.id},
        )

        assert rows == [{"id": listing.id, "status": "Active"}]

    """
    Test Case TC-095: Foreign Keys Enforced on SQLite
    Description: Raw property delete while its listing still carries an offer
    Expected Result: ConflictError; property and listing kept
    """
    @pytest.mark.asyncio
    async def test_tc095_foreign_keys_enforced(self, session_factory, seed, active_listing, buyer):
        """TC-095: RESTRICT honoured"""
        prop, listing = active_listing
        await seed.offer(listing.id, buyer.id)

        async def _work(session):
            await session.delete(await session.get(Property, prop.id))
            await session.flush()

        with pytest.raises(ConflictError):
            await run_in_transaction(_work)

        async with session_factory() as session:
            assert await session.get(Property, prop.id) is not None
            assert await session.get(Listing, listing.id) is not None
