"""
Job record as seen by the status engine.

The record carries only what status derivation needs: the four milestone
timestamps, the on-site work budget and the current status/reason pair.
Records are immutable; every change produces a new record.
"""

from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum
from typing import Optional


class Status(str, Enum):
    GREEN = "green"
    AMBER = "amber"
    RED = "red"


AWAITING_ACCEPTANCE_REASON = "Awaiting engineer acceptance"


class InvalidTimeline(ValueError):
    """Raised when a job record breaks the milestone ordering rules."""


@dataclass(frozen=True)
class JobRecord:
    logged: datetime
    target_completion_minutes: int
    status: Status = Status.AMBER
    reason: Optional[str] = AWAITING_ACCEPTANCE_REASON
    accepted: Optional[datetime] = None
    on_site: Optional[datetime] = None
    completed: Optional[datetime] = None
    id: Optional[str] = None

    @property
    def milestones(self):
        """(name, timestamp) pairs in lifecycle order, unset ones included."""
        return (
            ("logged", self.logged),
            ("accepted", self.accepted),
            ("on_site", self.on_site),
            ("completed", self.completed),
        )

    def to_dict(self):
        out = {f.name: getattr(self, f.name) for f in fields(self)}
        out["status"] = self.status.value
        return out


def check_timeline(job: JobRecord) -> JobRecord:
    """
    Validate a record before it is handed to the status engine.

    Milestones must be set in order (no gaps) and never go backwards,
    the work budget must be positive and the status must be known.
    Returns the record unchanged so it can be used inline.
    """
    if job.logged is None:
        raise InvalidTimeline("logged timestamp is required")
    if not isinstance(job.status, Status):
        raise InvalidTimeline(f"unknown status: {job.status!r}")
    if job.target_completion_minutes is None or job.target_completion_minutes <= 0:
        raise InvalidTimeline(
            f"target_completion_minutes must be positive, got {job.target_completion_minutes!r}"
        )

    previous_name, previous = "logged", job.logged
    gap = None
    for name, stamp in job.milestones[1:]:
        if stamp is None:
            gap = gap or name
            continue
        if gap:
            raise InvalidTimeline(f"{name} is set but {gap} is not")
        if stamp < previous:
            raise InvalidTimeline(f"{name} ({stamp.isoformat()}) is before {previous_name} ({previous.isoformat()})")
        previous_name, previous = name, stamp
    return job
