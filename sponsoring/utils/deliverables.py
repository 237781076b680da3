# sponsoring/utils/deliverables.py
"""
Deliverable status machine and deliverable generation from package benefits.

Everything in this module is pure: callers supply the current time where it
matters and persist the results themselves.
"""
import json
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sponsoring.constants.sponsoring import DeliverableStatus, status_value
from sponsoring.schemas.sponsoring import Benefit, SponsorDeliverableCreate
from sponsoring.utils.dates import as_utc, utcnow
from sponsoring.utils.rounding import round_half_up

logger = logging.getLogger(__name__)

DELIVERABLE_STATUS_ORDER: List[str] = DeliverableStatus.all_values()

# Every status can move to any other one, so a mistaken "delivered" can be undone.
VALID_DELIVERABLE_TRANSITIONS: Dict[str, set] = {
    "pending": {"in_progress", "delivered"},
    "in_progress": {"pending", "delivered"},
    "delivered": {"pending", "in_progress"},
}

DELIVERABLE_STATUS_LABELS = {
    "pending": "Pending",
    "in_progress": "In Progress",
    "delivered": "Delivered",
}

DEFAULT_DUE_SOON_DAYS = 7


# ==================== Status machine ====================

def can_transition_deliverable(from_status: Any, to_status: Any) -> bool:
    from_status, to_status = status_value(from_status), status_value(to_status)
    if from_status == to_status:
        return False
    return to_status in VALID_DELIVERABLE_TRANSITIONS.get(from_status, set())


def valid_deliverable_transitions(from_status: Any) -> List[str]:
    allowed = VALID_DELIVERABLE_TRANSITIONS.get(status_value(from_status), set())
    return [s for s in DELIVERABLE_STATUS_ORDER if s in allowed]


def get_deliverable_status_label(status: Any) -> str:
    return DELIVERABLE_STATUS_LABELS.get(status_value(status), str(status_value(status)))


def is_overdue(deliverable: Any, now: Optional[datetime] = None) -> bool:
    """Overdue: has a due date, not delivered, and the due date has passed."""
    due_date = as_utc(deliverable.due_date)
    if due_date is None or status_value(deliverable.status) == "delivered":
        return False
    return (now or utcnow()) > due_date


def is_due_soon(
    deliverable: Any,
    days_threshold: int = DEFAULT_DUE_SOON_DAYS,
    now: Optional[datetime] = None,
) -> bool:
    """Not delivered, due in the future, and due within `days_threshold` days."""
    due_date = as_utc(deliverable.due_date)
    if due_date is None or status_value(deliverable.status) == "delivered":
        return False
    now = now or utcnow()
    return now < due_date <= now + timedelta(days=days_threshold)


# ==================== Collections ====================

def group_deliverables_by_status(deliverables: Sequence[Any]) -> Dict[str, list]:
    groups: Dict[str, list] = {status: [] for status in DELIVERABLE_STATUS_ORDER}
    for d in deliverables:
        groups.setdefault(status_value(d.status), []).append(d)
    return groups


def sort_deliverables_by_due_date(deliverables: Sequence[Any]) -> list:
    """Earliest due date first; deliverables without a due date last."""
    return sorted(
        deliverables,
        key=lambda d: (d.due_date is None, as_utc(d.due_date) or datetime.min),
    )


def count_by_status(deliverables: Iterable[Any]) -> Dict[str, int]:
    counts = {status: 0 for status in DELIVERABLE_STATUS_ORDER}
    for d in deliverables:
        status = status_value(d.status) or "pending"
        counts[status] = counts.get(status, 0) + 1
    return counts


def count_overdue(deliverables: Iterable[Any], now: Optional[datetime] = None) -> int:
    now = now or utcnow()
    return sum(1 for d in deliverables if is_overdue(d, now))


def calculate_deliverable_stats(
    deliverables: Sequence[Any], now: Optional[datetime] = None
) -> Dict[str, Any]:
    counts = count_by_status(deliverables)
    total = len(deliverables)
    completion_rate = round_half_up(counts["delivered"] / total * 100, 2) if total > 0 else 0

    return {
        "total": total,
        "by_status": counts,
        "pending": counts["pending"],
        "in_progress": counts["in_progress"],
        "delivered": counts["delivered"],
        "overdue": count_overdue(deliverables, now),
        "completion_rate": completion_rate,
    }


# ==================== Generation ====================

def parse_benefits(raw: Any) -> List[Benefit]:
    """
    Read a package's benefit list as stored in the record store.

    Accepts a list of dicts/Benefit objects or a JSON-encoded string; anything
    unreadable yields an empty list.
    """
    if not raw:
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Unreadable benefits payload on package, ignoring it")
            return []
    if not isinstance(raw, list):
        return []
    return [b if isinstance(b, Benefit) else Benefit.model_validate(b) for b in raw]


def included_benefits(benefits: Sequence[Benefit]) -> List[Benefit]:
    return [b for b in benefits if b.included]


def create_deliverables_from_benefits(
    sponsorship_id: str,
    benefits: Sequence[Any],
    default_due_date: Optional[datetime] = None,
) -> List[SponsorDeliverableCreate]:
    """One pending deliverable per included benefit."""
    return [
        SponsorDeliverableCreate(
            sponsorship_id=sponsorship_id,
            benefit_name=benefit.name,
            status=DeliverableStatus.PENDING,
            due_date=default_due_date,
        )
        for benefit in included_benefits(parse_benefits(benefits))
    ]


def plan_deliverables(
    sponsorship_id: str,
    benefits: Sequence[Any],
    existing: Sequence[Any],
    default_due_date: Optional[datetime] = None,
) -> Tuple[List[SponsorDeliverableCreate], int]:
    """
    Work out which deliverables are missing for a sponsorship.

    Returns the creation records for included benefits that have no deliverable
    yet (matched by exact benefit name) and the number of included benefits that
    were skipped because one already exists. Existing deliverables are never
    removed, so running this twice in a row plans nothing the second time.
    """
    existing_names = {d.benefit_name for d in existing}
    candidates = create_deliverables_from_benefits(
        sponsorship_id, benefits, default_due_date
    )
    to_create = [d for d in candidates if d.benefit_name not in existing_names]
    return to_create, len(candidates) - len(to_create)


def find_stale_deliverables(benefits: Sequence[Any], existing: Sequence[Any]) -> list:
    """
    Open deliverables whose benefit is no longer included in the package.

    These are kept (a tracked obligation is never dropped silently) and only
    reported so an operator can decide what to do with them.
    """
    included_names = {b.name for b in included_benefits(parse_benefits(benefits))}
    return [
        d for d in existing
        if d.benefit_name not in included_names and status_value(d.status) != "delivered"
    ]
