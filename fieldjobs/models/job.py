from sqlalchemy import Column, String, DateTime, Index, Text, Integer, Boolean, JSON

from fieldjobs.core import InvalidTimeline, JobRecord, Status, as_utc
from fieldjobs.db import Base


class Job(Base):
    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True)  # uuid4
    job_number = Column(String(32), nullable=False, unique=True)  # JL-<epoch ms>
    customer = Column(String(128), nullable=False)
    site = Column(String(128), nullable=False)
    engineer = Column(String(128), nullable=True)
    contact = Column(JSON, nullable=False, default=dict)  # name, number, email, relationship
    description = Column(Text, nullable=False, default="")
    job_type = Column(String(32), nullable=False)  # Maintenance|Repair|Installation|Emergency|Inspection
    category = Column(String(32), nullable=False)  # Electrical|Mechanical|Plumbing|HVAC|General
    priority = Column(String(16), nullable=False, default="Medium")  # Low|Medium|High|Critical

    status = Column(String(16), nullable=False, default="amber")  # green|amber|red
    reason = Column(Text, nullable=True)
    target_completion_minutes = Column(Integer, nullable=False, default=60)

    # Milestones; NULL means never set
    date_logged = Column(DateTime(timezone=True), nullable=False)
    date_accepted = Column(DateTime(timezone=True), nullable=True)
    date_on_site = Column(DateTime(timezone=True), nullable=True)
    date_completed = Column(DateTime(timezone=True), nullable=True)

    # Additional job fields
    project = Column(String(128), nullable=True)
    primary_job_trade = Column(String(64), nullable=True)
    secondary_job_trades = Column(JSON, nullable=False, default=list)
    customer_order_number = Column(String(64), nullable=True)
    reference_number = Column(String(64), nullable=True)
    job_owner = Column(String(128), nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    requires_approval = Column(Boolean, nullable=False, default=False)
    job_ref_1 = Column(String(64), nullable=True)
    job_ref_2 = Column(String(64), nullable=True)

    # Scheduling preferences captured when the job is logged
    preferred_appointment_date = Column(DateTime(timezone=True), nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    lock_visit_date_time = Column(Boolean, nullable=False, default=False)
    deploy_to_mobile = Column(Boolean, nullable=False, default=True)
    is_recurring_job = Column(Boolean, nullable=False, default=False)
    completion_time_from_engineer_onsite = Column(Boolean, nullable=False, default=False)

    # Bumped on every write; used for optimistic concurrency
    version = Column(Integer, nullable=False)

    __table_args__ = (
        Index("idx_jobs_status", "status"),
        Index("idx_jobs_date_logged", "date_logged"),
    )
    __mapper_args__ = {"version_id_col": version}

    def to_record(self) -> JobRecord:
        """Snapshot the fields the status engine works on"""
        try:
            status = Status(self.status)
        except ValueError:
            raise InvalidTimeline(f"unknown status: {self.status!r}")
        return JobRecord(
            id=self.id,
            status=status,
            reason=self.reason,
            logged=as_utc(self.date_logged),
            accepted=as_utc(self.date_accepted),
            on_site=as_utc(self.date_on_site),
            completed=as_utc(self.date_completed),
            target_completion_minutes=self.target_completion_minutes,
        )

    def apply_record(self, record: JobRecord):
        """Copy status, reason and milestones back from a record"""
        self.status = record.status.value
        self.reason = record.reason
        self.date_accepted = record.accepted
        self.date_on_site = record.on_site
        self.date_completed = record.completed

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": self.id,
            "job_number": self.job_number,
            "customer": self.customer,
            "site": self.site,
            "engineer": self.engineer,
            "contact": self.contact or {},
            "description": self.description,
            "job_type": self.job_type,
            "category": self.category,
            "priority": self.priority,
            "status": self.status,
            "reason": self.reason,
            "target_completion_minutes": self.target_completion_minutes,
            "date_logged": as_utc(self.date_logged),
            "date_accepted": as_utc(self.date_accepted),
            "date_on_site": as_utc(self.date_on_site),
            "date_completed": as_utc(self.date_completed),
            "project": self.project,
            "primary_job_trade": self.primary_job_trade,
            "secondary_job_trades": self.secondary_job_trades or [],
            "customer_order_number": self.customer_order_number,
            "reference_number": self.reference_number,
            "job_owner": self.job_owner,
            "tags": self.tags or [],
            "requires_approval": self.requires_approval,
            "job_ref_1": self.job_ref_1,
            "job_ref_2": self.job_ref_2,
            "preferred_appointment_date": as_utc(self.preferred_appointment_date),
            "start_date": as_utc(self.start_date),
            "end_date": as_utc(self.end_date),
            "lock_visit_date_time": self.lock_visit_date_time,
            "deploy_to_mobile": self.deploy_to_mobile,
            "is_recurring_job": self.is_recurring_job,
            "completion_time_from_engineer_onsite": self.completion_time_from_engineer_onsite,
            "version": self.version,
        }
