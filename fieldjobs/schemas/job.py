from typing import Optional, List, Literal
from datetime import datetime
from pydantic import BaseModel, Field

from fieldjobs.config import DEFAULT_TARGET_COMPLETION_MINUTES

StatusValue = Literal["green", "amber", "red"]
JobType = Literal["Maintenance", "Repair", "Installation", "Emergency", "Inspection"]
Category = Literal["Electrical", "Mechanical", "Plumbing", "HVAC", "General"]
Priority = Literal["Low", "Medium", "High", "Critical"]


class Contact(BaseModel):
    name: str = Field(..., max_length=128)
    number: str = Field("", max_length=32)
    email: str = Field("", max_length=128)
    relationship: str = Field("", max_length=64)


class JobCreate(BaseModel):
    job_number: Optional[str] = Field(None, max_length=32, description="Generated as JL-<epoch ms> when omitted")
    customer: str = Field(..., min_length=1, max_length=128)
    site: str = Field(..., min_length=1, max_length=128)
    contact: Contact
    description: str = Field("", description="What needs doing")
    job_type: JobType
    category: Category
    priority: Priority = "Medium"
    engineer: Optional[str] = Field(None, max_length=128, description="Assigned engineer")
    target_completion_minutes: int = Field(
        DEFAULT_TARGET_COMPLETION_MINUTES, gt=0, description="On-site work budget in minutes"
    )
    date_logged: Optional[datetime] = Field(None, description="Defaults to the server clock")
    # Additional fields
    project: Optional[str] = None
    primary_job_trade: Optional[str] = None
    secondary_job_trades: List[str] = []
    customer_order_number: Optional[str] = None
    reference_number: Optional[str] = None
    job_owner: Optional[str] = None
    tags: List[str] = []
    requires_approval: bool = False
    job_ref_1: Optional[str] = Field(None, max_length=64)
    job_ref_2: Optional[str] = Field(None, max_length=64)
    preferred_appointment_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    lock_visit_date_time: bool = False
    deploy_to_mobile: bool = True
    is_recurring_job: bool = False
    completion_time_from_engineer_onsite: bool = False


class StatusChange(BaseModel):
    status: StatusValue
    reason: Optional[str] = Field(None, description="Only kept when no milestone is stamped")
    expected_version: Optional[int] = Field(None, description="Reject the change if the job has moved on")


class JobOut(BaseModel):
    id: str
    job_number: str
    customer: str
    site: str
    engineer: Optional[str]
    contact: Contact
    description: str
    job_type: str
    category: str
    priority: str
    status: StatusValue
    reason: Optional[str]
    target_completion_minutes: int
    date_logged: datetime
    date_accepted: Optional[datetime]
    date_on_site: Optional[datetime]
    date_completed: Optional[datetime]
    project: Optional[str] = None
    primary_job_trade: Optional[str] = None
    secondary_job_trades: List[str] = []
    customer_order_number: Optional[str] = None
    reference_number: Optional[str] = None
    job_owner: Optional[str] = None
    tags: List[str] = []
    requires_approval: bool = False
    job_ref_1: Optional[str] = None
    job_ref_2: Optional[str] = None
    preferred_appointment_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    lock_visit_date_time: bool = False
    deploy_to_mobile: bool = True
    is_recurring_job: bool = False
    completion_time_from_engineer_onsite: bool = False
    version: int


class JobListResponse(BaseModel):
    jobs: List[JobOut]
    total: int
    page: int
    size: int
    pages: int


class JobSummary(BaseModel):
    total: int = 0
    green: int = 0
    amber: int = 0
    red: int = 0


class ReevaluationResult(BaseModel):
    evaluated: int = 0
    changed: int = 0
    skipped: int = 0
