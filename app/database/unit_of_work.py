"""
Unit of Work - transactional execution for lifecycle operations
Every write path runs inside run_in_transaction so the primary entity and its
cascades commit (or roll back) together.
"""
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.database.connection import AsyncSessionLocal
from app.utils.errors import (
    ConflictError,
    InternalError,
    StorageTimeoutError,
)
import asyncio
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_in_transaction(
    work: Callable[[AsyncSession], Awaitable[T]],
    timeout: Optional[float] = None,
) -> T:
    """
    Run work(session) inside a single database transaction.
    Commits when work returns, rolls back on any exception.
    Storage faults are translated into the lifecycle error taxonomy.
    """
    deadline = timeout if timeout is not None else settings.DB_OPERATION_TIMEOUT_SECONDS

    async def _run() -> T:
        async with AsyncSessionLocal() as session:
            async with session.begin():
                return await work(session)

    try:
        return await asyncio.wait_for(_run(), timeout=deadline)
    except asyncio.TimeoutError:
        logger.error(f"⏱️ Transaction exceeded deadline of {deadline}s")
        raise StorageTimeoutError(f"Storage operation timed out after {deadline} seconds")
    except IntegrityError as e:
        # Unique constraints back up the pre-checks under concurrency
        logger.warning(f"⚠️ Integrity violation rolled back: {e.orig}")
        raise ConflictError(_describe_integrity_error(e))
    except SQLAlchemyError as e:
        logger.error(f"❌ Storage error in transaction: {str(e)}", exc_info=True)
        raise InternalError("Unexpected storage error")


async def query(
    sql: str,
    params: Optional[Dict[str, Any]] = None,
    timeout: Optional[float] = None,
) -> List[Dict[str, Any]]:
    """Execute a parameterized read query and return rows as dicts"""
    deadline = timeout if timeout is not None else settings.DB_OPERATION_TIMEOUT_SECONDS

    async def _run() -> List[Dict[str, Any]]:
        async with AsyncSessionLocal() as session:
            result = await session.execute(text(sql), params or {})
            return [dict(row) for row in result.mappings().all()]

    try:
        return await asyncio.wait_for(_run(), timeout=deadline)
    except asyncio.TimeoutError:
        raise StorageTimeoutError(f"Storage query timed out after {deadline} seconds")
    except SQLAlchemyError as e:
        logger.error(f"❌ Storage error in query: {str(e)}", exc_info=True)
        raise InternalError("Unexpected storage error")


def _describe_integrity_error(error: IntegrityError) -> str:
    message = str(error.orig).lower()
    if "offer_id" in message:
        return "A transaction already exists for this offer"
    if "clients.email" in message or "clients_email" in message:
        return "A client with this email already exists"
    if "uq_listings_one_active_per_property" in message or "listings.property_id" in message:
        return "Property already has an active listing"
    return "Write conflicts with an existing record"
