"""
Status evaluator.

Derives the traffic-light status of a job from its milestone timestamps and
the supplied current time. The job is first classified into a Condition,
which is then projected to a (status, reason) pair. Conditions that carry no
projection leave the stored status/reason untouched.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from .clock import elapsed_minutes
from .job import JobRecord, Status

NOT_ON_SITE_REASON = "Engineer not on site within 1 hour of acceptance"
TRAVELING_REASON = "Engineer traveling - over 20 minutes since acceptance"
OVER_TARGET_REASON = "Work not completed within target time"


@dataclass(frozen=True)
class Thresholds:
    travel_warning_minutes: int = 20
    onsite_deadline_minutes: int = 60


DEFAULT_THRESHOLDS = Thresholds()


class Condition(str, Enum):
    COMPLETED = "completed"
    AWAITING_ACCEPTANCE = "awaiting_acceptance"
    EN_ROUTE = "en_route"
    TRAVELING = "traveling"
    OVERDUE_ACCEPTANCE = "overdue_acceptance"
    ON_SITE_OK = "on_site_ok"
    OVERDUE_ON_SITE = "overdue_on_site"


# None means "keep whatever the job currently holds"
_PROJECTION = {
    Condition.COMPLETED: (Status.GREEN, None),
    Condition.AWAITING_ACCEPTANCE: None,
    Condition.EN_ROUTE: None,
    Condition.TRAVELING: (Status.AMBER, TRAVELING_REASON),
    Condition.OVERDUE_ACCEPTANCE: (Status.RED, NOT_ON_SITE_REASON),
    Condition.ON_SITE_OK: (Status.GREEN, None),
    Condition.OVERDUE_ON_SITE: (Status.RED, OVER_TARGET_REASON),
}


def classify(job: JobRecord, now: datetime, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> Condition:
    if job.completed is not None:
        return Condition.COMPLETED

    if job.accepted is not None and job.on_site is None:
        elapsed = elapsed_minutes(job.accepted, now)
        if elapsed > thresholds.onsite_deadline_minutes:
            return Condition.OVERDUE_ACCEPTANCE
        if elapsed > thresholds.travel_warning_minutes:
            return Condition.TRAVELING
        return Condition.EN_ROUTE

    if job.on_site is not None:
        if elapsed_minutes(job.on_site, now) > job.target_completion_minutes:
            return Condition.OVERDUE_ON_SITE
        return Condition.ON_SITE_OK

    return Condition.AWAITING_ACCEPTANCE


def project(condition: Condition, job: JobRecord) -> Tuple[Status, Optional[str]]:
    projected = _PROJECTION[condition]
    if projected is None:
        return job.status, job.reason
    return projected


def evaluate(job: JobRecord, now: datetime, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> Tuple[Status, Optional[str]]:
    """Status and reason of job as of now. Pure; never reads a clock."""
    return project(classify(job, now, thresholds), job)
