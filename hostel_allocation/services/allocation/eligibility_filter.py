"""
Eligibility filter.

Selects the applications an allocation run may consider: approved, paid,
and belonging to a user without an ALLOCATED/CONFIRMED allocation. The
run cap is applied here as a SQL LIMIT, so it bounds which applications
are examined at all, not only how many get a room.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from hostel_allocation.core.logging import get_logger
from hostel_allocation.models.application import Application
from hostel_allocation.repositories.application import ApplicationRepository
from hostel_allocation.schemas.allocation import AllocationRunSettings, PriorityOrder

logger = get_logger(__name__)


@dataclass(frozen=True)
class Candidate:
    """Detached snapshot of one eligible application and its user."""

    application_id: str
    user_id: str
    gender: Optional[str]
    level: Optional[str]
    submitted_at: Optional[datetime]


def resolve_priority_order(
    prioritize_by_level: bool,
    prioritize_by_submission_date: bool,
    explicit: Optional[PriorityOrder] = None,
) -> PriorityOrder:
    """
    Pick the composite ordering for a run.

    An explicit order wins. Otherwise both flags give level (highest
    first) with submission time (earliest first) as tie-break; a single
    flag orders by that key alone; no flag falls back to application id.
    """
    if explicit is not None:
        return explicit
    if prioritize_by_level and prioritize_by_submission_date:
        return PriorityOrder.LEVEL_THEN_SUBMISSION
    if prioritize_by_level:
        return PriorityOrder.LEVEL_ONLY
    if prioritize_by_submission_date:
        return PriorityOrder.SUBMISSION_ONLY
    return PriorityOrder.APPLICATION_ID


def order_clauses(order: PriorityOrder) -> List:
    """ORDER BY clauses for ``order``; the application id always comes last."""
    # Levels are stored as YEAR_1..YEAR_5, so text order is level order.
    level_desc = Application.level.desc()
    submitted_asc = Application.submitted_at.asc()
    clauses = {
        PriorityOrder.LEVEL_THEN_SUBMISSION: [level_desc, submitted_asc],
        PriorityOrder.SUBMISSION_THEN_LEVEL: [submitted_asc, level_desc],
        PriorityOrder.SUBMISSION_ONLY: [submitted_asc],
        PriorityOrder.LEVEL_ONLY: [level_desc],
        PriorityOrder.APPLICATION_ID: [],
    }[order]
    return clauses + [Application.id.asc()]


class EligibilityFilter:
    """Read-only selection of allocation candidates."""

    def __init__(self, applications: ApplicationRepository):
        self.applications = applications

    def select(
        self,
        settings: AllocationRunSettings,
        application_ids: Optional[Sequence[str]] = None,
    ) -> List[Candidate]:
        order = resolve_priority_order(
            settings.prioritize_by_level,
            settings.prioritize_by_submission_date,
            settings.priority_order,
        )
        rows = self.applications.find_eligible(
            order_by=order_clauses(order),
            limit=settings.max_allocations_per_run,
            application_ids=application_ids,
        )
        logger.info(
            "Eligible applications selected",
            extra={
                "candidate_count": len(rows),
                "priority_order": order.value,
                "cap": settings.max_allocations_per_run,
            },
        )
        return [
            Candidate(
                application_id=application.id,
                user_id=user.id,
                gender=user.gender.value if user.gender is not None else None,
                level=application.level.value if application.level is not None else None,
                submitted_at=application.submitted_at,
            )
            for application, user in rows
        ]
