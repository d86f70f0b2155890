"""
Notification Service - post-commit side-effect dispatch
Lifecycle operations record events in a SideEffectBatch while their transaction
runs; the batch is handed to the dispatcher only after commit and delivered in
the background. Delivery failures are logged per recipient and never reach the
caller of the lifecycle operation.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set
from sqlalchemy import select, func, update
from app.database.connection import AsyncSessionLocal
from app.models.notification import Notification
from app.models.status import NotificationType
from app.models.user import User, Role, user_roles
from app.services import email_service
import asyncio
import logging
import uuid

logger = logging.getLogger(__name__)

MODULE_NAME = "real_estate"


@dataclass
class NotificationEvent:
    title: str
    message: str
    entity_type: str
    entity_id: Optional[str] = None
    action_url: Optional[str] = None
    kind: str = NotificationType.INFO.value
    module: str = MODULE_NAME
    send_email: bool = True
    target_user_id: Optional[str] = None
    role: Optional[str] = None


@dataclass
class EmailEvent:
    to: str
    template: str
    data: Dict = field(default_factory=dict)
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None


class SideEffectBatch:
    """Ordered side effects collected during one lifecycle operation"""

    def __init__(self):
        self.events: List[object] = []

    def notify(self, user_id: str, event: NotificationEvent) -> None:
        event.target_user_id = user_id
        self.events.append(event)

    def notify_role(self, role_name: str, event: NotificationEvent) -> None:
        event.role = role_name
        self.events.append(event)

    def email(self, to: Optional[str], template: str, data: Dict, entity_type: Optional[str] = None, entity_id: Optional[str] = None) -> None:
        # Clients without an email address are skipped
        if not to:
            return
        self.events.append(EmailEvent(to=to, template=template, data=data, entity_type=entity_type, entity_id=entity_id))

    def __len__(self) -> int:
        return len(self.events)


class NotificationDispatcher:
    """Fire-and-forget delivery of side-effect batches"""

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    def dispatch(self, batch: SideEffectBatch) -> None:
        """Schedule delivery; returns immediately"""
        if not batch.events:
            return
        task = asyncio.create_task(self._deliver(batch.events))
        # Keep a reference so the task is not garbage-collected mid-flight
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for every in-flight dispatch (shutdown, tests)"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def _deliver(self, events: List[object]) -> None:
        for event in events:
            if isinstance(event, EmailEvent):
                await self.send_email(event)
            elif event.role:
                await self.notify_role(event.role, event)
            else:
                await self.notify(event)

    async def notify(self, event: NotificationEvent) -> None:
        """Deliver to one user via the in-app channel (and email if requested)"""
        try:
            await create_notification(event.target_user_id, event)
        except Exception as e:
            logger.error(
                f"❌ Notification delivery failed: recipient={event.target_user_id}, "
                f"kind={event.kind}, title={event.title!r}, "
                f"entity={event.entity_type}:{event.entity_id}, error={str(e)}"
            )

    async def notify_role(self, role_name: str, event: NotificationEvent) -> None:
        """Deliver to every active user holding the role at dispatch time"""
        try:
            user_ids = await get_active_user_ids_for_role(role_name)
        except Exception as e:
            logger.error(
                f"❌ Could not resolve role '{role_name}' for notification "
                f"{event.title!r} ({event.entity_type}:{event.entity_id}): {str(e)}"
            )
            return

        for user_id in user_ids:
            recipient_event = NotificationEvent(**{**event.__dict__, "target_user_id": user_id, "role": None})
            await self.notify(recipient_event)

    async def send_email(self, event: EmailEvent) -> None:
        try:
            await email_service.send_template_email(event.to, event.template, event.data)
        except Exception as e:
            logger.error(
                f"❌ Email delivery failed: recipient={event.to}, template={event.template}, "
                f"entity={event.entity_type}:{event.entity_id}, error={str(e)}"
            )


_dispatcher: Optional[NotificationDispatcher] = None


def get_dispatcher() -> NotificationDispatcher:
    """Get or create the dispatcher singleton"""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher()
    return _dispatcher


async def get_active_user_ids_for_role(role_name: str) -> List[str]:
    async with AsyncSessionLocal() as session:
        stmt = (
            select(User.id)
            .join(user_roles, user_roles.c.user_id == User.id)
            .join(Role, Role.id == user_roles.c.role_id)
            .where(Role.name == role_name, User.is_active.is_(True))
        )
        result = await session.execute(stmt)
        return [row[0] for row in result.all()]


async def create_notification(user_id: str, event: NotificationEvent) -> Dict:
    """Persist an in-app notification and optionally email the user"""
    async with AsyncSessionLocal() as session:
        notification = Notification(
            id=str(uuid.uuid4()),
            user_id=user_id,
            type=event.kind,
            title=event.title,
            message=event.message,
            module=event.module,
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            action_url=event.action_url,
            is_read=False,
        )
        session.add(notification)
        await session.commit()
        await session.refresh(notification)

        user = None
        if event.send_email:
            result = await session.execute(select(User).where(User.id == user_id))
            user = result.scalar_one_or_none()

    if user is not None:
        try:
            await email_service.send_notification_email(
                user.email, user.first_name, event.title, event.message, event.action_url
            )
        except Exception as e:
            # The in-app notification stands even if the email copy fails
            logger.error(f"❌ Failed to send notification email: user={user_id}, notification={notification.id}, error={str(e)}")

    return _notification_to_dict(notification)


async def get_user_notifications(
    user_id: str,
    unread_only: bool = False,
    limit: int = 20,
    offset: int = 0,
) -> List[Dict]:
    async with AsyncSessionLocal() as session:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc()).offset(offset).limit(limit)
        result = await session.execute(stmt)
        return [_notification_to_dict(n) for n in result.scalars().all()]


async def get_unread_count(user_id: str) -> int:
    async with AsyncSessionLocal() as session:
        stmt = select(func.count()).select_from(Notification).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
        result = await session.execute(stmt)
        return result.scalar_one() or 0


async def mark_as_read(notification_id: str, user_id: str) -> Optional[Dict]:
    """Mark one notification read; None if not found or not owned by user"""
    async with AsyncSessionLocal() as session:
        stmt = select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
        result = await session.execute(stmt)
        notification = result.scalar_one_or_none()

        if not notification:
            return None

        notification.is_read = True
        notification.read_at = datetime.now(timezone.utc)
        await session.commit()
        await session.refresh(notification)
        return _notification_to_dict(notification)


async def mark_all_as_read(user_id: str) -> int:
    async with AsyncSessionLocal() as session:
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True, read_at=datetime.now(timezone.utc))
        )
        result = await session.execute(stmt)
        await session.commit()
        return result.rowcount or 0


def _notification_to_dict(notification: Notification) -> Dict:
    return {
        "id": notification.id,
        "user_id": notification.user_id,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "module": notification.module,
        "entity_type": notification.entity_type,
        "entity_id": notification.entity_id,
        "action_url": notification.action_url,
        "is_read": notification.is_read,
        "read_at": notification.read_at.isoformat() if notification.read_at else None,
        "created_at": notification.created_at.isoformat() if notification.created_at else "",
    }
