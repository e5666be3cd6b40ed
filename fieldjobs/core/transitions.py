"""
Transition applier.

Turns a user's colour request into a milestone stamp. Milestone requests
infer what actually happened (accepted, arrived, finished) from the job's
progress; anything else passes the requested status straight through
without touching the timestamps.
"""

import dataclasses
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from .job import JobRecord, Status

ACCEPTED_REASON = "Engineer accepted - en route to site"
ON_SITE_REASON = "Engineer on site - work in progress"


class TransitionRule(str, Enum):
    ACCEPT = "accept"
    ARRIVE = "arrive"
    COMPLETE = "complete"
    PASS_THROUGH = "pass_through"


def match_rule(job: JobRecord, requested: Union[Status, str]) -> TransitionRule:
    requested = Status(requested)
    if requested is Status.AMBER and job.accepted is None:
        return TransitionRule.ACCEPT
    if requested is Status.GREEN and job.accepted is not None and job.on_site is None:
        return TransitionRule.ARRIVE
    if requested is Status.GREEN and job.on_site is not None and job.completed is None:
        return TransitionRule.COMPLETE
    return TransitionRule.PASS_THROUGH


def apply_transition(
    job: JobRecord,
    requested: Union[Status, str],
    now: datetime,
    reason: Optional[str] = None,
) -> JobRecord:
    """
    Return a copy of job with the requested change applied.

    At most one timestamp is stamped per call. `reason` is only used by the
    pass-through rule; milestone rules attach their own reason.
    """
    requested = Status(requested)
    rule = match_rule(job, requested)

    if rule is TransitionRule.ACCEPT:
        return dataclasses.replace(job, accepted=now, status=Status.AMBER, reason=ACCEPTED_REASON)
    if rule is TransitionRule.ARRIVE:
        return dataclasses.replace(job, on_site=now, status=Status.GREEN, reason=ON_SITE_REASON)
    if rule is TransitionRule.COMPLETE:
        return dataclasses.replace(job, completed=now, status=Status.GREEN, reason=None)
    return dataclasses.replace(job, status=requested, reason=reason)
