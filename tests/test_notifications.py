"""
Test Case Suite: Side-Effect Dispatch and Notifications
Test ID Range: TC-080 to TC-089

Validates post-commit dispatch, role resolution at delivery time,
per-recipient failure isolation and the in-app notification inbox.
"""

import asyncio
import pytest
from datetime import date, datetime
from unittest.mock import patch
from app.services import email_service, notification_service
from app.services.notification_service import (
    NotificationEvent,
    SideEffectBatch,
    get_user_notifications,
    get_unread_count,
    mark_as_read,
    mark_all_as_read,
)
from app.utils.formatting import format_currency, format_date, format_time


def listing_event(**overrides):
    fields = dict(
        title="New Property Listing",
        message="A new property at 12 Oak Street has been listed for $360,000",
        entity_type="listing",
        entity_id="listing-1",
        action_url="/real-estate/listings/listing-1",
    )
    fields.update(overrides)
    return NotificationEvent(**fields)


class TestRoleDispatch:
    """
    Test Case TC-080: Role Resolved at Dispatch Time
    Description: A manager added after the operation but before delivery still receives it
    Expected Result: Late manager has the notification
    """
    @pytest.mark.asyncio
    async def test_tc080_role_resolved_at_dispatch_time(self, seed, dispatcher, email_outbox):
        """TC-080: Late role membership"""
        gate = asyncio.Event()
        resolve = notification_service.get_active_user_ids_for_role

        async def gated_resolve(role_name):
            await gate.wait()
            return await resolve(role_name)

        batch = SideEffectBatch()
        batch.notify_role("real_estate_manager", listing_event())

        with patch.object(notification_service, "get_active_user_ids_for_role", gated_resolve):
            dispatcher.dispatch(batch)
            late_manager = await seed.user(first_name="Late", role="real_estate_manager")
            gate.set()
            await dispatcher.drain()

        notifications = await get_user_notifications(late_manager.id)
        assert [n["title"] for n in notifications] == ["New Property Listing"]

    """
    Test Case TC-081: Inactive Users Skipped
    Expected Result: Only active role members are notified
    """
    @pytest.mark.asyncio
    async def test_tc081_inactive_members_skipped(self, seed, manager, dispatcher, email_outbox):
        """TC-081: Inactive manager"""
        retired = await seed.user(first_name="Retired", role="real_estate_manager", is_active=False)

        batch = SideEffectBatch()
        batch.notify_role("real_estate_manager", listing_event())
        dispatcher.dispatch(batch)
        await dispatcher.drain()

        assert len(await get_user_notifications(manager.id)) == 1
        assert await get_user_notifications(retired.id) == []

    """
    Test Case TC-082: Per-Recipient Isolation
    Description: Delivery to one manager fails
    Expected Result: The other manager is still notified
    """
    @pytest.mark.asyncio
    async def test_tc082_one_recipient_failure(self, seed, dispatcher, email_outbox):
        """TC-082: Isolated recipient failure"""
        first = await seed.user(first_name="First", role="real_estate_manager")
        second = await seed.user(first_name="Second", role="real_estate_manager")
        deliver = notification_service.create_notification

        async def flaky_delivery(user_id, event):
            if user_id == first.id:
                raise RuntimeError("inbox unavailable")
            return await deliver(user_id, event)

        batch = SideEffectBatch()
        batch.notify_role("real_estate_manager", listing_event())
        with patch.object(notification_service, "create_notification", flaky_delivery):
            dispatcher.dispatch(batch)
            await dispatcher.drain()

        assert await get_user_notifications(first.id) == []
        assert len(await get_user_notifications(second.id)) == 1

    """
    Test Case TC-083: Dispatch Does Not Block
    Description: dispatch() returns before delivery completes
    Expected Result: Task pending until drained
    """
    @pytest.mark.asyncio
    async def test_tc083_dispatch_is_fire_and_forget(self, agent, dispatcher, email_outbox):
        """TC-083: Fire and forget"""
        batch = SideEffectBatch()
        batch.notify(agent.id, listing_event())

        dispatcher.dispatch(batch)
        assert dispatcher.pending == 1

        await dispatcher.drain()
        assert dispatcher.pending == 0
        assert len(await get_user_notifications(agent.id)) == 1

    """
    Test Case TC-084: Clients Without Email
    Expected Result: Email events are skipped when the address is empty
    """
    def test_tc084_email_without_address_skipped(self):
        """TC-084: No address"""
        batch = SideEffectBatch()
        batch.email(None, "showing-confirmation", {})
        batch.email("", "showing-confirmation", {})
        assert len(batch) == 0


class TestNotificationInbox:
    """
    Test Case TC-085: Unread Count and Mark as Read
    Expected Result: Counts follow read state; foreign users cannot mark
    """
    @pytest.mark.asyncio
    async def test_tc085_mark_as_read(self, agent, seed, email_outbox):
        """TC-085: Mark one / all as read"""
        for index in range(3):
            await notification_service.create_notification(agent.id, listing_event(entity_id=f"listing-{index}", send_email=False))
        other = await seed.user(first_name="Other")

        assert await get_unread_count(agent.id) == 3
        first_id = (await get_user_notifications(agent.id))[0]["id"]

        assert await mark_as_read(first_id, other.id) is None
        marked = await mark_as_read(first_id, agent.id)
        assert marked["is_read"] is True
        assert marked["read_at"] is not None
        assert await get_unread_count(agent.id) == 2
        assert len(await get_user_notifications(agent.id, unread_only=True)) == 2

        assert await mark_all_as_read(agent.id) == 2
        assert await get_unread_count(agent.id) == 0
        assert email_outbox.await_count == 0


class TestEmailRendering:
    """
    Test Case TC-086: Template Rendering
    Expected Result: Subject from the template table; missing keys render empty
    """
    def test_tc086_render_template(self):
        """TC-086: Render"""
        subject, text = email_service.render_template("offer-countered", {
            "client_name": "Casey Buyer",
            "property_address": "12 Oak Street",
            "offer_amount": "$340,000",
        })
        assert subject == "Counter Offer Received"
        assert "Hello Casey Buyer" in text
        assert "countered with $340,000" in text

    def test_tc087_unknown_template(self):
        """TC-087: Unknown template"""
        with pytest.raises(ValueError):
            email_service.render_template("no-such-template", {})

    """
    Test Case TC-088: Currency and Date Formatting
    """
    def test_tc088_formatting(self):
        """TC-088: Formatting helpers"""
        assert format_currency(350000) == "$350,000"
        assert format_currency("1234567.50") == "$1,234,568"
        assert format_currency(None) == ""
        assert format_date(date(2026, 1, 5)) == "Monday, January 5, 2026"
        assert format_time(datetime(2026, 1, 5, 14, 30)) == "02:30 PM"

    """
    Test Case TC-089: SMTP Not Configured
    Expected Result: send_email_sync logs and returns False
    """
    def test_tc089_smtp_disabled(self):
        """TC-089: Disabled transport"""
        with patch.object(email_service.settings, "SMTP_HOST", None):
            assert email_service.send_email_sync("casey@example.com", "Subject", "Body") is False
