"""
Test Configuration and Fixtures
Provides shared test setup for all test cases
"""
import pytest
import pytest_asyncio
import uuid
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import patch, AsyncMock
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from app.main import app
from app.database.connection import Base, enable_sqlite_foreign_keys
from app.models.client import Client
from app.models.listing import Listing
from app.models.offer import Offer
from app.models.property import Property
from app.models.showing import Showing
from app.models.user import User, Role, user_roles
from app.services.notification_service import get_dispatcher


# Modules that imported AsyncSessionLocal at import time
MODULES_TO_PATCH = [
    'app.database.connection',
    'app.database.unit_of_work',
    'app.services.notification_service',
]


class Seeder:
    """Direct inserts for arranging test state"""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def _add(self, entity):
        async with self.session_factory() as session:
            session.add(entity)
            await session.commit()
            await session.refresh(entity)
        return entity

    async def user(self, first_name="Sam", last_name="Agent", role=None, is_active=True) -> User:
        user = await self._add(User(
            id=str(uuid.uuid4()),
            email=f"{first_name.lower()}_{uuid.uuid4().hex[:8]}@example.com",
            first_name=first_name,
            last_name=last_name,
            is_active=is_active,
        ))
        if role:
            await self.grant_role(user.id, role)
        return user

    async def grant_role(self, user_id: str, role_name: str) -> None:
        async with self.session_factory() as session:
            role = (await session.execute(select(Role).where(Role.name == role_name))).scalar_one_or_none()
            if role is None:
                role = Role(id=str(uuid.uuid4()), name=role_name)
                session.add(role)
                await session.flush()
            await session.execute(user_roles.insert().values(user_id=user_id, role_id=role.id))
            await session.commit()

    async def property(self, address="12 Oak Street", status="Available", **fields) -> Property:
        return await self._add(Property(
            id=str(uuid.uuid4()),
            address=address,
            city=fields.pop("city", "Springfield"),
            state=fields.pop("state", "IL"),
            zip=fields.pop("zip", "62701"),
            status=status,
            **fields,
        ))

    async def listing(self, property_id: str, agent_id: str, status="Active", list_price=Decimal("360000")) -> Listing:
        return await self._add(Listing(
            id=str(uuid.uuid4()),
            property_id=property_id,
            agent_id=agent_id,
            list_price=list_price,
            start_date=date(2026, 1, 5),
            status=status,
        ))

    async def client(self, first_name="Casey", last_name="Buyer", email="casey.buyer@example.com", **fields) -> Client:
        return await self._add(Client(
            id=str(uuid.uuid4()),
            first_name=first_name,
            last_name=last_name,
            email=email,
            **fields,
        ))

    async def showing(self, listing_id: str, client_id: str, start: datetime, end: datetime, status="Scheduled") -> Showing:
        return await self._add(Showing(
            id=str(uuid.uuid4()),
            listing_id=listing_id,
            client_id=client_id,
            start_time=start,
            end_time=end,
            status=status,
        ))

    async def offer(self, listing_id: str, client_id: str, status="Pending", offer_price=Decimal("350000")) -> Offer:
        return await self._add(Offer(
            id=str(uuid.uuid4()),
            listing_id=listing_id,
            client_id=client_id,
            offer_price=offer_price,
            offer_date=date(2026, 2, 1),
            status=status,
        ))


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path):
    """Fresh file-backed SQLite database per test, patched into the app"""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    event.listen(test_engine.sync_engine, "connect", enable_sqlite_foreign_keys)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    import sys
    patches = []
    for module_name in MODULES_TO_PATCH:
        module = sys.modules.get(module_name)
        if module is not None and hasattr(module, 'AsyncSessionLocal'):
            patches.append(patch.object(module, 'AsyncSessionLocal', TestSessionLocal))

    for p in patches:
        p.start()

    try:
        yield TestSessionLocal
    finally:
        await get_dispatcher().drain()
        for p in patches:
            p.stop()
        await test_engine.dispose()


@pytest.fixture(scope="function")
def seed(session_factory):
    return Seeder(session_factory)


@pytest.fixture(scope="function")
def email_outbox():
    """Replace SMTP delivery; every sent email is recorded on the mock"""
    with patch('app.services.email_service.send_email', new=AsyncMock(return_value=True)) as mock_send:
        yield mock_send


@pytest.fixture(scope="function")
def dispatcher():
    return get_dispatcher()


@pytest_asyncio.fixture(scope="function")
async def agent(seed):
    return await seed.user(first_name="Alex", last_name="Agent")


@pytest_asyncio.fixture(scope="function")
async def manager(seed):
    return await seed.user(first_name="Morgan", last_name="Manager", role="real_estate_manager")


@pytest_asyncio.fixture(scope="function")
async def active_listing(seed, agent):
    """An Available property with one Active listing"""
    prop = await seed.property()
    listing = await seed.listing(prop.id, agent.id)
    return prop, listing


@pytest_asyncio.fixture(scope="function")
async def buyer(seed):
    return await seed.client()


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, email_outbox):
    """Create test HTTP client"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac



@pytest.fixture(scope="function")
def sent_emails(email_outbox):
    """sent_emails(address) -> [(subject, text), ...] delivered to that address"""
    def _sent(address):
        return [
            (call.args[1], call.args[2])
            for call in email_outbox.call_args_list
            if call.args[0] == address
        ]
    return _sent
