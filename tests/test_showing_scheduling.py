"""
Test Case Suite: Showing Scheduling
Test ID Range: TC-030 to TC-041

Validates overlap protection per listing and the showing side effects.
"""

import pytest
import smtplib
from datetime import datetime, timezone
from unittest.mock import patch, AsyncMock
from app.services import notification_service
from app.services.notification_service import get_user_notifications
from app.services.real_estate import showing_service
from app.utils.errors import ConflictError, NotFoundError


def at(hour, minute=0):
    return datetime(2026, 3, 2, hour, minute, tzinfo=timezone.utc)


class TestCreateShowing:
    """
    Test Case TC-030: Schedule Showing
    Description: Scheduling a showing on an empty calendar
    Expected Result: Showing persisted as Scheduled
    """
    @pytest.mark.asyncio
    async def test_tc030_create_showing(self, active_listing, buyer, email_outbox):
        """TC-030: Create showing"""
        _, listing = active_listing

        showing = await showing_service.create_showing(listing.id, buyer.id, at(10), at(11))

        assert showing["status"] == "Scheduled"
        assert showing["listing_id"] == listing.id
        stored = await showing_service.get_showing(showing["id"])
        assert stored["client_id"] == buyer.id

    """
    Test Case TC-031: Overlapping Showing Rejected
    Description: 10:00-11:00 requested while 10:30-11:30 is booked on the same listing
    Expected Result: ConflictError, no row written
    """
    @pytest.mark.asyncio
    async def test_tc031_overlap_conflict(self, seed, active_listing, buyer, email_outbox):
        """TC-031: Overlap conflict"""
        _, listing = active_listing
        existing = await seed.showing(listing.id, buyer.id, at(10, 30), at(11, 30))

        with pytest.raises(ConflictError) as exc_info:
            await showing_service.create_showing(listing.id, buyer.id, at(10), at(11))

        assert exc_info.value.message == "There is a scheduling conflict with another showing"
        showings = await showing_service.list_showings(listing_id=listing.id)
        assert [s["id"] for s in showings] == [existing.id]

    """
    Test Case TC-032: Back-to-Back Showings
    Description: A showing may start exactly when the previous one ends
    Expected Result: Both showings exist
    """
    @pytest.mark.asyncio
    async def test_tc032_back_to_back(self, seed, active_listing, buyer, email_outbox):
        """TC-032: Adjacent showings"""
        _, listing = active_listing
        await seed.showing(listing.id, buyer.id, at(10), at(11))

        await showing_service.create_showing(listing.id, buyer.id, at(11), at(12))

        assert len(await showing_service.list_showings(listing_id=listing.id)) == 2

    """
    Test Case TC-033: Same Window on Another Listing
    Description: Overlap is checked per listing only
    Expected Result: Showing created
    """
    @pytest.mark.asyncio
    async def test_tc033_other_listing_not_blocked(self, seed, active_listing, agent, buyer, email_outbox):
        """TC-033: Different listing"""
        _, listing = active_listing
        other_property = await seed.property(address="99 Elm Road")
        other_listing = await seed.listing(other_property.id, agent.id)
        await seed.showing(listing.id, buyer.id, at(10), at(11))

        showing = await showing_service.create_showing(other_listing.id, buyer.id, at(10), at(11))

        assert showing["listing_id"] == other_listing.id

    """
    Test Case TC-034: Invalid Window and Missing References
    Expected Result: ValueError for end <= start; NotFoundError for unknown listing/client
    """
    @pytest.mark.asyncio
    async def test_tc034_invalid_input(self, active_listing, buyer, email_outbox):
        """TC-034: Invalid window / missing references"""
        _, listing = active_listing

        with pytest.raises(ValueError):
            await showing_service.create_showing(listing.id, buyer.id, at(11), at(10))
        with pytest.raises(NotFoundError):
            await showing_service.create_showing("missing", buyer.id, at(10), at(11))
        with pytest.raises(NotFoundError):
            await showing_service.create_showing(listing.id, "missing", at(10), at(11))

    """
    Test Case TC-035: Confirmation Side Effects
    Description: The agent is notified and the client receives a confirmation email
    Expected Result: One agent notification, one client email with the showing date
    """
    @pytest.mark.asyncio
    async def test_tc035_confirmation_side_effects(self, active_listing, agent, buyer, dispatcher, sent_emails):
        """TC-035: Showing confirmation"""
        _, listing = active_listing

        showing = await showing_service.create_showing(listing.id, buyer.id, at(10), at(11))
        await dispatcher.drain()

        notifications = await get_user_notifications(agent.id)
        assert [n["title"] for n in notifications] == ["New Showing Scheduled"]
        assert notifications[0]["entity_id"] == showing["id"]

        emails = sent_emails(buyer.email)
        assert len(emails) == 1
        subject, text = emails[0]
        assert subject == "Property Showing Confirmation"
        assert "Monday, March 2, 2026" in text
        assert "10:00 AM - 11:00 AM" in text
        assert "12 Oak Street, Springfield, IL 62701" in text

    """
    Test Case TC-036: Side-Effect Failures Do Not Fail Scheduling
    Description: Email and notification channels fail for every call
    Expected Result: Showing still created and persisted
    """
    @pytest.mark.asyncio
    async def test_tc036_side_effect_isolation(self, active_listing, buyer, dispatcher):
        """TC-036: Failing channels"""
        _, listing = active_listing

        failing_email = AsyncMock(side_effect=smtplib.SMTPException("smtp down"))
        failing_notify = AsyncMock(side_effect=RuntimeError("notification store down"))
        with patch("app.services.email_service.send_email", new=failing_email), \
                patch.object(notification_service, "create_notification", new=failing_notify):
            showing = await showing_service.create_showing(listing.id, buyer.id, at(10), at(11))
            await dispatcher.drain()

        assert failing_email.await_count == 1
        assert failing_notify.await_count == 1
        showings = await showing_service.list_showings(listing_id=listing.id)
        assert [s["id"] for s in showings] == [showing["id"]]


class TestUpdateShowing:
    """
    Test Case TC-037: Showing May Overlap Its Own Previous Window
    Description: Shifting 10:00-11:00 to 10:30-11:30
    Expected Result: Update succeeds
    """
    @pytest.mark.asyncio
    async def test_tc037_self_overlap_allowed(self, seed, active_listing, buyer, email_outbox):
        """TC-037: Self overlap"""
        _, listing = active_listing
        showing = await seed.showing(listing.id, buyer.id, at(10), at(11))

        updated = await showing_service.update_showing(
            showing.id, {"start_time": at(10, 30), "end_time": at(11, 30)}
        )

        assert updated["start_time"].startswith("2026-03-02T10:30")

    """
    Test Case TC-038: Update Into Another Showing's Window
    Expected Result: ConflictError and the showing keeps its old window
    """
    @pytest.mark.asyncio
    async def test_tc038_update_conflict(self, seed, active_listing, buyer, email_outbox):
        """TC-038: Update overlap conflict"""
        _, listing = active_listing
        await seed.showing(listing.id, buyer.id, at(13), at(14))
        showing = await seed.showing(listing.id, buyer.id, at(10), at(11))

        with pytest.raises(ConflictError):
            await showing_service.update_showing(showing.id, {"start_time": at(13, 30), "end_time": at(14, 30)})

        stored = await showing_service.get_showing(showing.id)
        assert stored["start_time"].startswith("2026-03-02T10:00")

    """
    Test Case TC-039: Rescheduling Email
    Description: A changed window emails the client both the old and new times
    Expected Result: "Property Showing Rescheduled" email naming both windows
    """
    @pytest.mark.asyncio
    async def test_tc039_rescheduled_email(self, seed, active_listing, buyer, dispatcher, sent_emails):
        """TC-039: Reschedule"""
        _, listing = active_listing
        showing = await seed.showing(listing.id, buyer.id, at(10), at(11))

        await showing_service.update_showing(showing.id, {"start_time": at(15), "end_time": at(16)})
        await dispatcher.drain()

        emails = sent_emails(buyer.email)
        assert [subject for subject, _ in emails] == ["Property Showing Rescheduled"]
        text = emails[0][1]
        assert "10:00 AM - 11:00 AM" in text
        assert "03:00 PM - 04:00 PM" in text

    """
    Test Case TC-040: Cancellation
    Description: Status change to Cancelled notifies the agent and emails the client
    Expected Result: "Showing Status Updated" notification and "Property Showing Cancelled" email
    """
    @pytest.mark.asyncio
    async def test_tc040_cancelled(self, seed, active_listing, agent, buyer, dispatcher, sent_emails):
        """TC-040: Cancel showing"""
        _, listing = active_listing
        showing = await seed.showing(listing.id, buyer.id, at(10), at(11))

        updated = await showing_service.update_showing(showing.id, {"status": "Cancelled"})
        await dispatcher.drain()

        assert updated["status"] == "Cancelled"
        assert [n["title"] for n in await get_user_notifications(agent.id)] == ["Showing Status Updated"]
        assert [subject for subject, _ in sent_emails(buyer.email)] == ["Property Showing Cancelled"]


class TestDeleteShowing:
    """
    Test Case TC-041: Delete Showing
    Expected Result: Row removed; agent notified; client told the showing is cancelled
    """
    @pytest.mark.asyncio
    async def test_tc041_delete_showing(self, seed, active_listing, agent, buyer, dispatcher, sent_emails):
        """TC-041: Delete showing"""
        _, listing = active_listing
        showing = await seed.showing(listing.id, buyer.id, at(10), at(11))

        assert await showing_service.delete_showing(showing.id) is True
        await dispatcher.drain()

        with pytest.raises(NotFoundError):
            await showing_service.get_showing(showing.id)
        assert [n["title"] for n in await get_user_notifications(agent.id)] == ["Showing Deleted"]
        assert [subject for subject, _ in sent_emails(buyer.email)] == ["Property Showing Cancelled"]
