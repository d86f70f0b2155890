import enum


class PropertyStatus(str, enum.Enum):
    AVAILABLE = "Available"
    INACTIVE = "Inactive"
    SOLD = "Sold"


class ListingStatus(str, enum.Enum):
    ACTIVE = "Active"
    PENDING = "Pending"
    SOLD = "Sold"
    EXPIRED = "Expired"
    CANCELLED = "Cancelled"


class ShowingStatus(str, enum.Enum):
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class OfferStatus(str, enum.Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    COUNTERED = "Countered"
    WITHDRAWN = "Withdrawn"


class NotificationType(str, enum.Enum):
    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"
    ERROR = "error"
