# Real Estate Lifecycle Services
from app.services.real_estate.property_service import (
    create_property,
    get_property,
    list_properties,
    update_property,
    delete_property,
)
from app.services.real_estate.listing_service import (
    create_listing,
    update_listing_status,
    get_listing,
    list_listings,
    delete_listing,
)
from app.services.real_estate.client_service import (
    create_client,
    update_client,
    get_client,
    list_clients,
    delete_client,
)
from app.services.real_estate.showing_service import (
    create_showing,
    update_showing,
    delete_showing,
    get_showing,
    list_showings,
)
from app.services.real_estate.offer_service import (
    create_offer,
    update_offer_status,
    delete_offer,
    get_offer,
    list_offers,
)
from app.services.real_estate.transaction_service import (
    create_transaction,
    update_transaction,
    delete_transaction,
    get_transaction,
    list_transactions,
)

__all__ = [
    "create_property",
    "get_property",
    "list_properties",
    "update_property",
    "delete_property",
    "create_listing",
    "update_listing_status",
    "get_listing",
    "list_listings",
    "delete_listing",
    "create_client",
    "update_client",
    "get_client",
    "list_clients",
    "delete_client",
    "create_showing",
    "update_showing",
    "delete_showing",
    "get_showing",
    "list_showings",
    "create_offer",
    "update_offer_status",
    "delete_offer",
    "get_offer",
    "list_offers",
    "create_transaction",
    "update_transaction",
    "delete_transaction",
    "get_transaction",
    "list_transactions",
]
