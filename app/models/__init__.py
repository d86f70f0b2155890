# Database models
from app.models.user import User, Role, user_roles
from app.models.property import Property
from app.models.listing import Listing
from app.models.client import Client
from app.models.showing import Showing
from app.models.offer import Offer
from app.models.transaction import Transaction
from app.models.notification import Notification

__all__ = [
    "User",
    "Role",
    "user_roles",
    "Property",
    "Listing",
    "Client",
    "Showing",
    "Offer",
    "Transaction",
    "Notification",
]
