"""
Tests for the job service against a SQLite database
"""

from datetime import timedelta

import pytest

from fieldjobs.core import (
    ACCEPTED_REASON,
    AWAITING_ACCEPTANCE_REASON,
    NOT_ON_SITE_REASON,
    OVER_TARGET_REASON,
    TRAVELING_REASON,
)
from fieldjobs.models.job import Job
from fieldjobs.schemas.job import JobCreate
from fieldjobs.services.jobs import JobNotFound, JobService, TransitionNotAllowed, VersionConflict
from fieldjobs.core import InvalidTimeline, TransitionRule, check_timeline
from tests.conftest import T0


def log_job(db, job_payload, now, **overrides):
    return JobService.create_job(db, JobCreate(**{**job_payload, **overrides}), now)


class TestCreate:

    def test_new_job_awaits_acceptance(self, db, job_payload, clock):
        job = log_job(db, job_payload, clock.now())
        assert job.status == "amber"
        assert job.reason == AWAITING_ACCEPTANCE_REASON
        assert job.date_accepted is None and job.date_on_site is None and job.date_completed is None
        assert job.to_record().logged == T0
        assert job.version == 1

    def test_job_number_generated_from_clock(self, db, job_payload, clock):
        job = log_job(db, job_payload, clock.now())
        assert job.job_number == f"JL-{int(T0.timestamp() * 1000)}"

    def test_generated_job_numbers_are_unique(self, db, job_payload, clock):
        first = log_job(db, job_payload, clock.now())
        second = log_job(db, job_payload, clock.now())
        assert first.job_number != second.job_number

    def test_explicit_job_number_and_logged_time(self, db, job_payload, clock):
        job = log_job(db, job_payload, clock.now(), job_number="JL-42", date_logged=T0 - timedelta(hours=1))
        assert job.job_number == "JL-42"
        assert job.to_record().logged == T0 - timedelta(hours=1)


def test_jobs_listed_newest_first(db, job_payload, clock):
    for offset in (0, 30, 10):
        log_job(db, job_payload, clock.now(), date_logged=T0 + timedelta(minutes=offset))

    jobs, total = JobService.get_jobs(db)
    assert total == 3
    logged = [job.to_record().logged for job in jobs]
    assert logged == sorted(logged, reverse=True)

def test_get_jobs_paginates_and_filters(db, job_payload, clock):
    for offset in range(5):
        log_job(db, job_payload, clock.now(), date_logged=T0 + timedelta(minutes=offset))
    red = log_job(db, job_payload, clock.now())
    JobService.change_status(db, red.id, "red", clock.now(), reason="Escalated")

    page, total = JobService.get_jobs(db, page=2, size=2)
    assert total == 6 and len(page) == 2

    reds, total = JobService.get_jobs(db, status="red")
    assert total == 1 and reds[0].id == red.id

def test_get_missing_job_raises(db):
    with pytest.raises(JobNotFound):
        JobService.get_job(db, "nope")


class TestChangeStatus:

    def test_lifecycle_persists_milestones(self, db, job_payload, clock):
        job = log_job(db, job_payload, clock.now())

        job, rule = JobService.change_status(db, job.id, "amber", clock.advance(minutes=5))
        assert rule == "accept"
        assert job.reason == ACCEPTED_REASON

        job, rule = JobService.change_status(db, job.id, "green", clock.advance(minutes=15))
        assert rule == "arrive"

        job, rule = JobService.change_status(db, job.id, "green", clock.advance(minutes=45))
        assert rule == "complete"

        db.expire_all()
        stored = db.get(Job, job.id).to_record()
        assert stored.accepted == T0 + timedelta(minutes=5)
        assert stored.on_site == T0 + timedelta(minutes=20)
        assert stored.completed == T0 + timedelta(minutes=65)
        assert stored.reason is None

    def test_each_change_bumps_version(self, db, job_payload, clock):
        job = log_job(db, job_payload, clock.now())
        job, _ = JobService.change_status(db, job.id, "amber", clock.now())
        assert job.version == 2

    def test_stale_expected_version_is_rejected(self, db, job_payload, clock):
        job = log_job(db, job_payload, clock.now())
        JobService.change_status(db, job.id, "amber", clock.now(), expected_version=1)
        with pytest.raises(VersionConflict):
            JobService.change_status(db, job.id, "green", clock.now(), expected_version=1)

    def test_required_rule_mismatch_is_refused(self, db, job_payload, clock):
        job = log_job(db, job_payload, clock.now())
        with pytest.raises(TransitionNotAllowed):
            JobService.change_status(db, job.id, "green", clock.now(), required_rule=TransitionRule.COMPLETE)
        db.expire_all()
        assert db.get(Job, job.id).date_on_site is None


class TestReevaluate:

    def test_only_changed_jobs_are_written(self, db, job_payload, clock):
        waiting = log_job(db, job_payload, clock.now())
        travelling = log_job(db, job_payload, clock.now())
        JobService.change_status(db, travelling.id, "amber", clock.now())

        result = JobService.reevaluate_all(db, T0 + timedelta(minutes=30))
        assert result == {"evaluated": 2, "changed": 1, "skipped": 0}

        db.expire_all()
        assert db.get(Job, waiting.id).reason == AWAITING_ACCEPTANCE_REASON
        assert db.get(Job, travelling.id).reason == TRAVELING_REASON

    def test_never_stamps_timestamps(self, db, job_payload, clock):
        job = log_job(db, job_payload, clock.now())
        JobService.change_status(db, job.id, "amber", clock.now())

        JobService.reevaluate_all(db, T0 + timedelta(minutes=120))

        db.expire_all()
        stored = db.get(Job, job.id)
        assert stored.status == "red"
        assert stored.reason == NOT_ON_SITE_REASON
        assert stored.date_on_site is None

    def test_overdue_on_site_goes_red(self, db, job_payload, clock):
        job = log_job(db, job_payload, clock.now(), target_completion_minutes=90)
        JobService.change_status(db, job.id, "amber", clock.now())
        JobService.change_status(db, job.id, "green", clock.now())

        JobService.reevaluate_all(db, T0 + timedelta(minutes=89))
        db.expire_all()
        assert db.get(Job, job.id).status == "green"

        JobService.reevaluate_all(db, T0 + timedelta(minutes=91))
        db.expire_all()
        stored = db.get(Job, job.id)
        assert stored.status == "red"
        assert stored.reason == OVER_TARGET_REASON

    def test_invalid_stored_job_is_skipped(self, db, job_payload, clock):
        job = log_job(db, job_payload, clock.now())
        job.date_on_site = T0 + timedelta(minutes=5)  # on site without acceptance
        db.commit()

        result = JobService.reevaluate_all(db, T0 + timedelta(minutes=500))
        assert result["skipped"] == 1
        assert result["evaluated"] == 0


def test_summary_counts_evaluated_statuses(db, job_payload, clock):
    log_job(db, job_payload, clock.now())
    late = log_job(db, job_payload, clock.now())
    JobService.change_status(db, late.id, "amber", clock.now())
    done = log_job(db, job_payload, clock.now())
    for requested in ("amber", "green", "green"):
        JobService.change_status(db, done.id, requested, clock.now())

    counts = JobService.summary(db, T0 + timedelta(minutes=61))
    assert counts == {"total": 3, "green": 1, "amber": 1, "red": 1}

def test_summary_leaves_out_unknown_status(db, job_payload, clock):
    log_job(db, job_payload, clock.now())
    corrupt = log_job(db, job_payload, clock.now())
    corrupt.status = "purple"
    db.commit()

    counts = JobService.summary(db, clock.now())
    assert counts == {"total": 1, "green": 0, "amber": 1, "red": 0}


class TestTimelineGuards:

    def test_future_date_logged_is_rejected(self, db, job_payload, clock):
        with pytest.raises(InvalidTimeline, match="in the future"):
            log_job(db, job_payload, clock.now(), date_logged=T0 + timedelta(hours=2))
        assert db.query(Job).count() == 0

    def test_end_date_before_start_date_is_rejected(self, db, job_payload, clock):
        with pytest.raises(InvalidTimeline, match="before start_date"):
            log_job(db, job_payload, clock.now(), start_date=T0 + timedelta(days=2), end_date=T0 + timedelta(days=1))

    def test_transition_that_would_break_the_timeline_is_not_saved(self, db, job_payload, clock):
        job = log_job(db, job_payload, clock.now())
        job.date_logged = T0 + timedelta(hours=2)
        db.commit()

        with pytest.raises(TransitionNotAllowed, match="before logged"):
            JobService.change_status(db, job.id, "amber", clock.now())

        db.expire_all()
        stored = db.get(Job, job.id)
        assert stored.date_accepted is None
        assert stored.version == 2  # only the direct edit above
        assert check_timeline(stored.to_record())

    def test_job_stays_workable_once_the_clock_catches_up(self, db, job_payload, clock):
        job = log_job(db, job_payload, clock.now())
        job.date_logged = T0 + timedelta(minutes=10)
        db.commit()

        with pytest.raises(TransitionNotAllowed):
            JobService.change_status(db, job.id, "amber", clock.now())
        job, rule = JobService.change_status(db, job.id, "amber", clock.advance(minutes=15))
        assert rule == "accept"


def test_scheduling_fields_are_stored(db, job_payload, clock):
    job = log_job(
        db, job_payload, clock.now(),
        job_ref_1="PO-77",
        start_date=T0 + timedelta(days=1),
        end_date=T0 + timedelta(days=2),
        is_recurring_job=True,
    )
    db.expire_all()
    stored = db.get(Job, job.id).to_dict()
    assert stored["job_ref_1"] == "PO-77"
    assert stored["job_ref_2"] is None
    assert stored["start_date"] == T0 + timedelta(days=1)
    assert stored["end_date"] == T0 + timedelta(days=2)
    assert stored["deploy_to_mobile"] is True
    assert stored["is_recurring_job"] is True
    assert stored["lock_visit_date_time"] is False
