"""
Test Case Suite: Deletion Guards
Test ID Range: TC-070 to TC-078

Entities referenced by live dependents cannot be deleted.
"""

import pytest
from datetime import datetime, timezone
from app.services.real_estate import (
    client_service,
    listing_service,
    offer_service,
    property_service,
)
from app.utils.errors import ConflictError, NotFoundError


class TestPropertyDeletion:
    """
    Test Case TC-070: Property With Active Listing
    Description: Delete is blocked until the listing is Cancelled
    Expected Result: ConflictError first, success after cancelling
    """
    @pytest.mark.asyncio
    async def test_tc070_property_with_active_listing(self, active_listing, email_outbox):
        """TC-070: Guarded property delete"""
        prop, listing = active_listing

        with pytest.raises(ConflictError) as exc_info:
            await property_service.delete_property(prop.id)
        assert exc_info.value.message == "Cannot delete property with active listings"
        assert (await property_service.get_property(prop.id))["id"] == prop.id

        await listing_service.update_listing_status(listing.id, "Cancelled")

        assert await property_service.delete_property(prop.id) is True
        with pytest.raises(NotFoundError):
            await property_service.get_property(prop.id)

    """
    Test Case TC-071: Property Without Listings
    Expected Result: Deleted
    """
    @pytest.mark.asyncio
    async def test_tc071_property_without_listings(self, seed):
        """TC-071: Plain delete"""
        prop = await seed.property()

        assert await property_service.delete_property(prop.id) is True

    """
    Test Case TC-072: Unknown Property
    Expected Result: NotFoundError
    """
    @pytest.mark.asyncio
    async def test_tc072_unknown_property(self, session_factory):
        """TC-072: Missing property"""
        with pytest.raises(NotFoundError):
            await property_service.delete_property("missing")


class TestListingDeletion:
    """
    Test Case TC-073: Listing With Showings or Offers
    Expected Result: ConflictError; listing remains
    """
    @pytest.mark.asyncio
    async def test_tc073_listing_with_showing(self, seed, active_listing, buyer):
        """TC-073: Listing referenced by a showing"""
        _, listing = active_listing
        await seed.showing(
            listing.id, buyer.id,
            datetime(2026, 3, 2, 10, tzinfo=timezone.utc),
            datetime(2026, 3, 2, 11, tzinfo=timezone.utc),
        )

        with pytest.raises(ConflictError) as exc_info:
            await listing_service.delete_listing(listing.id)

        assert exc_info.value.message == "Cannot delete listing with associated showings/offers"
        assert (await listing_service.get_listing(listing.id))["status"] == "Active"

    @pytest.mark.asyncio
    async def test_tc074_listing_with_offer(self, seed, active_listing, buyer):
        """TC-074: Listing referenced by an offer"""
        _, listing = active_listing
        await seed.offer(listing.id, buyer.id)

        with pytest.raises(ConflictError):
            await listing_service.delete_listing(listing.id)


class TestClientDeletion:
    """
    Test Case TC-075: Client With Offers
    Expected Result: ConflictError
    """
    @pytest.mark.asyncio
    async def test_tc075_client_with_offer(self, seed, active_listing, buyer):
        """TC-075: Client referenced by an offer"""
        _, listing = active_listing
        await seed.offer(listing.id, buyer.id)

        with pytest.raises(ConflictError) as exc_info:
            await client_service.delete_client(buyer.id)

        assert exc_info.value.message == "Cannot delete client with associated showings/offers"

    """
    Test Case TC-076: Client Without History
    Expected Result: Deleted
    """
    @pytest.mark.asyncio
    async def test_tc076_client_without_history(self, buyer):
        """TC-076: Plain client delete"""
        assert await client_service.delete_client(buyer.id) is True
        with pytest.raises(NotFoundError):
            await client_service.get_client(buyer.id)


class TestPropertyListingHistory:
    """
    Test Case TC-077: Inactive Listing Still Referenced by an Offer
    Description: The property's only listing is Cancelled but carries an offer
    Expected Result: ConflictError; listing and offer stay reachable
    """
    @pytest.mark.asyncio
    async def test_tc077_cancelled_listing_with_offer(self, seed, active_listing, buyer, email_outbox):
        """TC-077: Listing history with dependents"""
        prop, listing = active_listing
        offer = await seed.offer(listing.id, buyer.id)
        await listing_service.update_listing_status(listing.id, "Cancelled")

        with pytest.raises(ConflictError) as exc_info:
            await property_service.delete_property(prop.id)

        assert exc_info.value.message == "Cannot delete property with listings that have showings/offers"
        assert (await listing_service.get_listing(listing.id))["property_id"] == prop.id
        assert await offer_service.delete_offer(offer.id) is True

    """
    Test Case TC-078: Inactive Listing History Removed With the Property
    Expected Result: Property and its Cancelled listing are both gone
    """
    @pytest.mark.asyncio
    async def test_tc078_listing_history_cascades(self, active_listing, email_outbox):
        """TC-078: Cascade delete"""
        prop, listing = active_listing
        await listing_service.update_listing_status(listing.id, "Cancelled")

        assert await property_service.delete_property(prop.id) is True

        with pytest.raises(NotFoundError):
            await listing_service.get_listing(listing.id)
