#!/usr/bin/env python3
"""
Seed script to insert sample jobs
"""
import os
import sys
from pathlib import Path

# Add the repo root to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fieldjobs.core import SystemClock
from fieldjobs.db import SessionLocal, init_db
from fieldjobs.schemas.job import JobCreate
from fieldjobs.services.jobs import JobService

SAMPLE_JOBS = [
    {
        "customer": "Acme Ltd",
        "site": "Site A - Manchester",
        "contact": {"name": "John Doe", "number": "0123456789", "email": "john@acme.com", "relationship": "Manager"},
        "description": "Fix electrical issue in main hall",
        "job_type": "Maintenance",
        "category": "Electrical",
        "priority": "Medium",
        "target_completion_minutes": 60,
        "engineer": "Jane Smith",
        "project": "Main Hall Refurb",
        "primary_job_trade": "Electrical",
        "secondary_job_trades": ["Plumbing"],
        "customer_order_number": "ORD123",
        "reference_number": "REF456",
        "tags": ["Urgent", "Out of Hours"],
    },
    {
        "customer": "Beta Corp",
        "site": "Site C - London",
        "contact": {"name": "Alice Brown", "number": "0987654321", "email": "alice@beta.com", "relationship": "Supervisor"},
        "description": "Install new HVAC system",
        "job_type": "Installation",
        "category": "HVAC",
        "priority": "High",
        "target_completion_minutes": 120,
        "engineer": "Tom Brown",
        "project": "HVAC Upgrade",
        "primary_job_trade": "HVAC",
        "secondary_job_trades": ["Electrical", "Mechanical"],
        "customer_order_number": "ORD789",
        "reference_number": "REF101",
        "tags": ["Scheduled", "Preventive"],
        "requires_approval": True,
        "job_ref_1": "PPM-Q2",
        "lock_visit_date_time": True,
        "is_recurring_job": True,
    },
]

if __name__ == "__main__":
    # Allow disabling seeding entirely (prod)
    if os.getenv("SEED_SAMPLE_JOBS", "1") in ("0", "false", "False"):
        print("Seeding disabled via SEED_SAMPLE_JOBS=0")
        raise SystemExit(0)

    init_db()
    clock = SystemClock()
    db = SessionLocal()
    try:
        for data in SAMPLE_JOBS:
            job = JobService.create_job(db, JobCreate(**data), clock.now())
            print(f"✓ Logged {job.job_number} for {job.customer}")
    except Exception as e:
        print(f"Error: {e}")
        db.rollback()
        raise SystemExit(1)
    finally:
        db.close()
