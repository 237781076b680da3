# sponsoring/utils/sponsorship_status.py
"""
Sponsorship status machine.

Pure functions only: nothing here touches the database. The write gate that
enforces these rules lives in `crud.sponsorship.transition_status`.
"""
from typing import Any, Dict, List, Sequence

from sponsoring.constants.sponsoring import SponsorshipStatus, status_value

SPONSORSHIP_STATUS_ORDER: List[str] = SponsorshipStatus.all_values()

# Statuses that represent an open or won deal; used for funnel reporting
PIPELINE_STATUSES = {"prospect", "contacted", "negotiating", "confirmed"}
ACTIVE_STATUSES = PIPELINE_STATUSES
TERMINAL_STATUSES = {"declined", "cancelled", "refunded"}

# Valid state transitions
VALID_TRANSITIONS: Dict[str, set] = {
    "prospect": {"contacted", "declined", "cancelled"},
    "contacted": {"negotiating", "declined", "cancelled"},
    "negotiating": {"confirmed", "declined", "cancelled"},
    "confirmed": {"cancelled", "refunded"},
    "declined": {"prospect", "contacted"},
    "cancelled": {"prospect"},
    "refunded": set(),  # Terminal state
}

STATUS_LABELS = {
    "prospect": "Prospect",
    "contacted": "Contacted",
    "negotiating": "Negotiating",
    "confirmed": "Confirmed",
    "declined": "Declined",
    "cancelled": "Cancelled",
    "refunded": "Refunded",
}

# Sponsorships without a package sort after every real tier
NO_PACKAGE_TIER = 999


def can_transition(from_status: Any, to_status: Any) -> bool:
    """Return True if moving from `from_status` to `to_status` is allowed."""
    from_status, to_status = status_value(from_status), status_value(to_status)
    if from_status == to_status:
        return False
    return to_status in VALID_TRANSITIONS.get(from_status, set())


def valid_transitions(from_status: Any) -> List[str]:
    """Allowed target statuses, in lifecycle order."""
    allowed = VALID_TRANSITIONS.get(status_value(from_status), set())
    return [s for s in SPONSORSHIP_STATUS_ORDER if s in allowed]


def is_active_status(status: Any) -> bool:
    return status_value(status) in ACTIVE_STATUSES


def is_terminal_status(status: Any) -> bool:
    return status_value(status) in TERMINAL_STATUSES


def is_pipeline_status(status: Any) -> bool:
    return status_value(status) in PIPELINE_STATUSES


def get_status_label(status: Any) -> str:
    return STATUS_LABELS.get(status_value(status), str(status_value(status)))


def empty_status_counts() -> Dict[str, int]:
    return {status: 0 for status in SPONSORSHIP_STATUS_ORDER}


def group_by_status(sponsorships: Sequence[Any]) -> Dict[str, list]:
    """Bucket sponsorships by status; every known status has a (possibly empty) list."""
    groups: Dict[str, list] = {status: [] for status in SPONSORSHIP_STATUS_ORDER}
    for item in sponsorships:
        groups.setdefault(status_value(item.status), []).append(item)
    return groups


def sort_by_package_tier(sponsorships: Sequence[Any]) -> list:
    """Most senior package first; sponsorships without a package last."""
    def tier_of(item):
        package = getattr(item, "package", None)
        return package.tier if package is not None and package.tier else NO_PACKAGE_TIER

    return sorted(sponsorships, key=tier_of)


def calculate_sponsorship_stats(sponsorships: Sequence[Any]) -> Dict[str, Any]:
    """
    Tally an in-memory list of sponsorships.

    Amounts only count for confirmed sponsorships; the paid amount is the
    confirmed amount of those carrying a payment timestamp.
    """
    by_status = empty_status_counts()
    total_amount = 0
    paid_amount = 0

    for item in sponsorships:
        status = status_value(item.status) or "prospect"
        by_status[status] = by_status.get(status, 0) + 1
        if status == "confirmed":
            amount = item.amount or 0
            total_amount += amount
            if item.paid_at:
                paid_amount += amount

    return {
        "total": len(sponsorships),
        "by_status": by_status,
        "confirmed": by_status["confirmed"],
        "total_amount": total_amount,
        "paid_amount": paid_amount,
    }
