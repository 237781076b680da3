# sponsoring/constants/sponsoring.py
"""
Constants for sponsorship and deliverable status values.

Both enums subclass `str` so members compare equal to the raw values stored
in the database and accepted by the API.
"""
from enum import Enum


class SponsorshipStatus(str, Enum):
    """Lifecycle status of one sponsor's relationship to one edition."""
    PROSPECT = "prospect"
    CONTACTED = "contacted"
    NEGOTIATING = "negotiating"
    CONFIRMED = "confirmed"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

    @classmethod
    def all_values(cls) -> list[str]:
        """Return all valid status values."""
        return [member.value for member in cls]


class DeliverableStatus(str, Enum):
    """Progress of a single contracted benefit."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DELIVERED = "delivered"

    @classmethod
    def all_values(cls) -> list[str]:
        """Return all valid status values."""
        return [member.value for member in cls]


DEFAULT_CURRENCY = "EUR"


def status_value(status) -> str:
    """Raw string value of a status given as an enum member or a plain string."""
    return status.value if isinstance(status, Enum) else status
