from datetime import datetime
from typing import Annotated, Optional
from pydantic import Field, StringConstraints
from app.domain.schema_base import CamelModel
from .models import IssueStatus, Priority

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class TimelineEntryOut(CamelModel):
    status: IssueStatus
    message: str
    updated_by: str
    date: datetime

class AssignedStaff(CamelModel):
    email: str
    name: str
    photo_url: str = Field("", alias="photoURL")
    assigned_at: Optional[datetime] = None

class IssueOut(CamelModel):
    id: str
    title: str
    description: str
    category: str
    location: str
    image: str = ""
    priority: Priority
    status: IssueStatus
    reported_by: str
    reported_by_name: str = ""
    reported_by_photo_url: str = Field("", alias="reportedByPhotoURL")
    assigned_to: Optional[AssignedStaff] = None
    upvote_count: int
    upvoted_by: list[str]
    timeline: list[TimelineEntryOut]
    created_at: datetime
    updated_at: datetime

class IssueCreate(CamelModel):
    title: NonEmptyStr
    description: NonEmptyStr
    category: NonEmptyStr
    location: NonEmptyStr
    image: str = ""
    priority: Priority = Priority.NORMAL

class IssueUpdate(CamelModel):
    title: Optional[NonEmptyStr] = None
    description: Optional[NonEmptyStr] = None
    category: Optional[NonEmptyStr] = None
    location: Optional[NonEmptyStr] = None
    image: Optional[str] = None
    priority: Optional[Priority] = None

class AssignStaffBody(CamelModel):
    staff_email: Optional[str] = None

class StatusBody(CamelModel):
    status: Optional[str] = None

class IssueFilters(CamelModel):
    """
    Query filters shared by the listing endpoints. `all` disables a filter.
    """
    search: str = ""
    category: str = "all"
    status: str = "all"
    priority: str = "all"
    reported_by: str = ""


class IssueResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
    issue: IssueOut

class IssueCreatedResponse(IssueResponse):
    issue_id: str

class IssuePageResponse(CamelModel):
    success: bool = True
    issues: list[IssueOut]
    total: int
    page: int
    limit: int
    total_pages: int
    has_more: bool

class IssueListResponse(CamelModel):
    success: bool = True
    issues: list[IssueOut]

class StaffStatusResponse(IssueResponse):
    normalized_status: IssueStatus
    received_status: str

class UpvoteResponse(CamelModel):
    success: bool = True
    message: str
    upvote_count: int
    has_upvoted: bool = True

class IssueCounts(CamelModel):
    total: int
    pending: int
    in_progress: int
    resolved: int
    rejected: int
    high_priority: int

class UserCounts(CamelModel):
    total: int
    premium: int
    blocked: int
    staff: int

class PaymentTotals(CamelModel):
    total_received: int
    count: int

class Stats(CamelModel):
    users: UserCounts
    issues: IssueCounts
    payments: PaymentTotals
