import logging
import math
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import desc
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from fieldjobs.config import TRAVEL_WARNING_MINUTES, ONSITE_DEADLINE_MINUTES
from fieldjobs.core import (
    AWAITING_ACCEPTANCE_REASON,
    InvalidTimeline,
    Status,
    Thresholds,
    TransitionRule,
    apply_transition,
    as_utc,
    check_timeline,
    classify,
    match_rule,
)
from fieldjobs.core.evaluator import project
from fieldjobs.models.job import Job
from fieldjobs.schemas.job import JobCreate
from .prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)


class JobNotFound(ValueError):
    pass


class VersionConflict(ValueError):
    pass


class TransitionNotAllowed(ValueError):
    pass


def configured_thresholds() -> Thresholds:
    return Thresholds(
        travel_warning_minutes=TRAVEL_WARNING_MINUTES,
        onsite_deadline_minutes=ONSITE_DEADLINE_MINUTES,
    )


class JobService:
    """Service for managing jobs"""

    @staticmethod
    def create_job(db: Session, job_data: JobCreate, now: datetime) -> Job:
        """Log a new job; it starts amber, awaiting acceptance"""
        logged = as_utc(job_data.date_logged) or now
        if logged > now:
            raise InvalidTimeline(f"date_logged ({logged.isoformat()}) is in the future")
        start_date, end_date = as_utc(job_data.start_date), as_utc(job_data.end_date)
        if start_date and end_date and end_date < start_date:
            raise InvalidTimeline(f"end_date ({end_date.isoformat()}) is before start_date ({start_date.isoformat()})")
        job_number = job_data.job_number or JobService._free_job_number(db, now)

        job = Job(
            id=str(uuid.uuid4()),
            job_number=job_number,
            customer=job_data.customer,
            site=job_data.site,
            engineer=job_data.engineer,
            contact=job_data.contact.model_dump(),
            description=job_data.description,
            job_type=job_data.job_type,
            category=job_data.category,
            priority=job_data.priority,
            status=Status.AMBER.value,
            reason=AWAITING_ACCEPTANCE_REASON,
            target_completion_minutes=job_data.target_completion_minutes,
            date_logged=logged,
            project=job_data.project,
            primary_job_trade=job_data.primary_job_trade,
            secondary_job_trades=list(job_data.secondary_job_trades),
            customer_order_number=job_data.customer_order_number,
            reference_number=job_data.reference_number,
            job_owner=job_data.job_owner,
            tags=list(job_data.tags),
            requires_approval=job_data.requires_approval,
            job_ref_1=job_data.job_ref_1,
            job_ref_2=job_data.job_ref_2,
            preferred_appointment_date=as_utc(job_data.preferred_appointment_date),
            start_date=start_date,
            end_date=end_date,
            lock_visit_date_time=job_data.lock_visit_date_time,
            deploy_to_mobile=job_data.deploy_to_mobile,
            is_recurring_job=job_data.is_recurring_job,
            completion_time_from_engineer_onsite=job_data.completion_time_from_engineer_onsite,
        )
        db.add(job)
        db.commit()
        db.refresh(job)

        prometheus_metrics.increment_jobs_created()
        logger.info(f"Logged job {job.job_number} ({job.id}) for {job.customer} at {job.site}")
        return job

    @staticmethod
    def _free_job_number(db: Session, now: datetime) -> str:
        """JL-<epoch ms>, bumped by a millisecond until unused"""
        millis = int(now.timestamp() * 1000)
        while True:
            candidate = f"JL-{millis}"
            if not db.query(Job.id).filter(Job.job_number == candidate).first():
                return candidate
            millis += 1

    @staticmethod
    def job_number_taken(db: Session, job_number: str) -> bool:
        return db.query(Job.id).filter(Job.job_number == job_number).first() is not None

    @staticmethod
    def get_jobs(
        db: Session,
        status: Optional[str] = None,
        page: int = 1,
        size: int = 50
    ) -> Tuple[List[Job], int]:
        """Get paginated jobs, most recently logged first"""
        query = db.query(Job)

        if status:
            query = query.filter(Job.status == status)

        total = query.count()
        jobs = (
            query.order_by(desc(Job.date_logged))
            .offset((page - 1) * size)
            .limit(size)
            .all()
        )
        return jobs, total

    @staticmethod
    def pages(total: int, size: int) -> int:
        return max(1, math.ceil(total / size)) if size else 1

    @staticmethod
    def get_job(db: Session, job_id: str) -> Job:
        """Get a job by ID"""
        job = db.query(Job).filter(Job.id == job_id).first()
        if not job:
            raise JobNotFound(f"Job {job_id} not found")
        return job

    @staticmethod
    def evaluated_view(job: Job, now: datetime, thresholds: Optional[Thresholds] = None) -> Dict:
        """
        The job as a dict with status and reason evaluated as of now.

        Nothing is written back; a record that fails the timeline check is
        returned with its stored status.
        """
        data = job.to_dict()
        try:
            record = check_timeline(job.to_record())
        except ValueError as e:
            logger.warning(f"Job {job.id} has an invalid timeline, showing stored status: {e}")
            return data

        condition = classify(record, now, thresholds or configured_thresholds())
        status, reason = project(condition, record)
        data["status"] = status.value
        data["reason"] = reason
        return data

    @staticmethod
    def change_status(
        db: Session,
        job_id: str,
        requested: str,
        now: datetime,
        reason: Optional[str] = None,
        expected_version: Optional[int] = None,
        required_rule: Optional[TransitionRule] = None,
    ) -> Tuple[Job, str]:
        """
        Apply a user-driven status change and persist it.

        When required_rule is given the change is refused unless that rule
        is the one that would fire. Returns the updated job and the name of
        the rule that fired.
        """
        job = JobService.get_job(db, job_id)
        if expected_version is not None and expected_version != job.version:
            prometheus_metrics.increment_transition_conflicts()
            raise VersionConflict(
                f"Job {job_id} is at version {job.version}, expected {expected_version}"
            )

        record = check_timeline(job.to_record())
        rule = match_rule(record, requested)
        if required_rule is not None and rule is not required_rule:
            raise TransitionNotAllowed(
                f"Job {job_id} cannot {required_rule.value} from its current progress"
            )
        updated = apply_transition(record, requested, now, reason=reason)
        try:
            check_timeline(updated)
        except InvalidTimeline as e:
            raise TransitionNotAllowed(f"Job {job_id} cannot {rule.value} at {now.isoformat()}: {e}")
        job.apply_record(updated)

        try:
            db.commit()
        except StaleDataError:
            db.rollback()
            prometheus_metrics.increment_transition_conflicts()
            raise VersionConflict(f"Job {job_id} was modified concurrently")
        db.refresh(job)

        prometheus_metrics.increment_transitions(rule.value)
        logger.info(f"Job {job.job_number} -> {job.status} via {rule.value}", extra={
            "job_id": job.id,
            "rule": rule.value,
            "component": "transitions",
        })
        return job, rule.value

    @staticmethod
    def reevaluate_all(db: Session, now: datetime, thresholds: Optional[Thresholds] = None) -> Dict[str, int]:
        """
        Re-evaluate every job against one snapshot of now.

        Only status and reason are written, and only where they changed.
        Jobs with an invalid timeline are skipped and logged.
        """
        thresholds = thresholds or configured_thresholds()
        result = {"evaluated": 0, "changed": 0, "skipped": 0}
        counts = {"green": 0, "amber": 0, "red": 0}

        for job in db.query(Job).all():
            try:
                record = check_timeline(job.to_record())
            except ValueError as e:
                result["skipped"] += 1
                logger.warning(f"Skipping job {job.id} during re-evaluation: {e}")
                continue

            condition = classify(record, now, thresholds)
            status, reason = project(condition, record)
            prometheus_metrics.increment_evaluations(condition.value)
            result["evaluated"] += 1
            counts[status.value] += 1

            if status is not record.status or reason != record.reason:
                job.status = status.value
                job.reason = reason
                result["changed"] += 1

        if result["changed"]:
            try:
                db.commit()
            except StaleDataError:
                # A user transition won the race; the next pass picks it up
                db.rollback()
                logger.warning("Re-evaluation pass lost a race with a status change; changes rolled back")
                result["changed"] = 0

        prometheus_metrics.set_jobs_by_status(counts)
        return result

    @staticmethod
    def summary(db: Session, now: datetime, thresholds: Optional[Thresholds] = None) -> Dict[str, int]:
        """Count jobs per evaluated status"""
        counts = {"total": 0, "green": 0, "amber": 0, "red": 0}
        for job in db.query(Job).all():
            view = JobService.evaluated_view(job, now, thresholds)
            if view["status"] not in counts:
                logger.warning(f"Leaving job {job.id} out of the summary: unknown status {view['status']!r}")
                continue
            counts["total"] += 1
            counts[view["status"]] += 1
        return counts
