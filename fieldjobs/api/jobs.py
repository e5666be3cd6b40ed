"""
Jobs API: logging, listing and status changes
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from fieldjobs.core import InvalidTimeline, Status, TransitionRule
from fieldjobs.db import get_db
from fieldjobs.schemas.job import (
    JobCreate, JobOut, JobListResponse, JobSummary, StatusChange, ReevaluationResult, StatusValue
)
from fieldjobs.services.jobs import JobService, JobNotFound, TransitionNotAllowed, VersionConflict
from .deps import get_clock

logger = logging.getLogger("fieldjobs.api.jobs")

router = APIRouter(tags=["Jobs"])


@router.post("/jobs", response_model=JobOut, status_code=201)
async def create_job(job_data: JobCreate, db: Session = Depends(get_db), clock=Depends(get_clock)):
    """Log a new job"""
    if job_data.job_number and JobService.job_number_taken(db, job_data.job_number):
        raise HTTPException(status_code=409, detail="Job number already exists")

    now = clock.now()
    try:
        job = JobService.create_job(db, job_data, now)
    except InvalidTimeline as e:
        raise HTTPException(status_code=400, detail=str(e))
    return JobOut(**JobService.evaluated_view(job, now))


@router.get("/jobs", response_model=JobListResponse)
async def list_jobs(
    status: Optional[StatusValue] = Query(None, description="Filter by stored status"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(50, ge=1, le=200, description="Page size"),
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
):
    """Jobs, most recently logged first, with status evaluated as of now"""
    now = clock.now()
    jobs, total = JobService.get_jobs(db, status=status, page=page, size=size)
    return JobListResponse(
        jobs=[JobOut(**JobService.evaluated_view(job, now)) for job in jobs],
        total=total,
        page=page,
        size=size,
        pages=JobService.pages(total, size),
    )


@router.get("/jobs/summary", response_model=JobSummary)
async def job_summary(db: Session = Depends(get_db), clock=Depends(get_clock)):
    """Job counts per evaluated status"""
    return JobSummary(**JobService.summary(db, clock.now()))


@router.post("/jobs/reevaluate", response_model=ReevaluationResult)
async def reevaluate_jobs(db: Session = Depends(get_db), clock=Depends(get_clock)):
    """Run one re-evaluation pass now"""
    result = JobService.reevaluate_all(db, clock.now())
    logger.info("Manual re-evaluation", extra={"component": "api", **result})
    return ReevaluationResult(**result)


@router.get("/jobs/{job_id}", response_model=JobOut)
async def get_job(job_id: str, db: Session = Depends(get_db), clock=Depends(get_clock)):
    """Get a job by ID"""
    try:
        job = JobService.get_job(db, job_id)
    except JobNotFound:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobOut(**JobService.evaluated_view(job, clock.now()))


def _change_status(
    db: Session,
    clock,
    job_id: str,
    change: StatusChange,
    required_rule: Optional[TransitionRule] = None,
) -> JobOut:
    now = clock.now()
    try:
        job, _ = JobService.change_status(
            db,
            job_id,
            change.status,
            now,
            reason=change.reason,
            expected_version=change.expected_version,
            required_rule=required_rule,
        )
    except JobNotFound:
        raise HTTPException(status_code=404, detail="Job not found")
    except (VersionConflict, TransitionNotAllowed) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InvalidTimeline as e:
        raise HTTPException(status_code=400, detail=f"Stored job is invalid: {e}")
    # The record as the transition left it, not re-evaluated
    return JobOut(**job.to_dict())


@router.post("/jobs/{job_id}/status", response_model=JobOut)
async def change_job_status(
    job_id: str,
    change: StatusChange,
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
):
    """Request a status colour; milestones are stamped where the request implies one"""
    return _change_status(db, clock, job_id, change)


@router.post("/jobs/{job_id}/accept", response_model=JobOut)
async def accept_job(job_id: str, db: Session = Depends(get_db), clock=Depends(get_clock)):
    return _change_status(db, clock, job_id, StatusChange(status=Status.AMBER.value), TransitionRule.ACCEPT)


@router.post("/jobs/{job_id}/on-site", response_model=JobOut)
async def mark_on_site(job_id: str, db: Session = Depends(get_db), clock=Depends(get_clock)):
    return _change_status(db, clock, job_id, StatusChange(status=Status.GREEN.value), TransitionRule.ARRIVE)


@router.post("/jobs/{job_id}/complete", response_model=JobOut)
async def complete_job(job_id: str, db: Session = Depends(get_db), clock=Depends(get_clock)):
    return _change_status(db, clock, job_id, StatusChange(status=Status.GREEN.value), TransitionRule.COMPLETE)
