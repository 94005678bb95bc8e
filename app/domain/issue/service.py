from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import case, func, or_, select, update
from fastapi_pagination import Params, Page, paginate
from typing import Iterable, Optional
from app.config import FREE_ISSUE_LIMIT
from app.exceptions import ServiceError, NotFound, InvalidInput, InvalidOperation, QuotaExceeded, Conflict
from app.domain.user.models import User, Role
from app.domain.user.service import get_user_by_email
from app import permissions
from ..model_base import utcnow
from . import models, schemas
import datetime
import logging
import re

logger = logging.getLogger(__name__)

ISSUE_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")

# legacy spellings accepted from clients, stored under the canonical value
STATUS_SYNONYMS = {
    "working": models.IssueStatus.IN_PROGRESS,
    "closed": models.IssueStatus.RESOLVED,
}

# target status -> statuses staff may move an issue from
STAFF_TRANSITIONS = {
    models.IssueStatus.IN_PROGRESS: (models.IssueStatus.PENDING,),
    models.IssueStatus.RESOLVED: (models.IssueStatus.IN_PROGRESS,),
}

STAFF_MESSAGES = {
    models.IssueStatus.IN_PROGRESS: "Work started on the issue",
    models.IssueStatus.RESOLVED: "Issue resolved by staff",
}


def normalize_status(value: Optional[str]) -> Optional[models.IssueStatus]:
    raw = (value or "").strip().lower()
    if raw in STATUS_SYNONYMS:
        return STATUS_SYNONYMS[raw]
    try:
        return models.IssueStatus(raw)
    except ValueError:
        return None

def get_issue(db: Session, issue_id: str) -> models.Issue:
    if not ISSUE_ID_PATTERN.fullmatch(issue_id or ""):
        raise InvalidInput("Invalid issue ID format")

    if not (issue := db.get(models.Issue, issue_id)):
        raise NotFound("Issue not found")
    return issue

def next_timeline_date(issue: models.Issue) -> datetime.datetime:
    """
    Current time, never earlier than the issue's last timeline entry.
    """
    now = utcnow()
    if issue.timeline and issue.timeline[-1].date > now:
        return issue.timeline[-1].date
    return now

def _apply_transition(
    db: Session,
    issue: models.Issue,
    *,
    conditions: Iterable,
    values: dict,
    status: models.IssueStatus,
    message: str,
    updated_by: str,
    date: datetime.datetime,
    failure: ServiceError
) -> models.Issue:
    """
    Conditional single-row update plus its timeline entry, in one transaction.

    `conditions` re-assert the state the caller validated, so a concurrent
    change makes the update match nothing and `failure` is raised instead.
    """
    result = db.execute(
        update(models.Issue)
        .where(models.Issue.id == issue.id, *conditions)
        .values(updated_at=date, **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise failure

    db.add(models.TimelineEntry(issue_id=issue.id, status=status, message=message, updated_by=updated_by, date=date))
    db.commit()
    db.refresh(issue)

    logger.info("Issue %s: %s (%s)", issue.id, message, updated_by)
    return issue

def create_issue(db: Session, reporter: User, issue_in: schemas.IssueCreate) -> models.Issue:
    permissions.check(reporter, permissions.NOT_BLOCKED.with_message("Blocked users cannot report issues"))
    permissions.check(reporter, permissions.IS_CITIZEN)

    if not reporter.is_premium and (reporter.issue_count or 0) >= FREE_ISSUE_LIMIT:
        raise QuotaExceeded(f"Free users can only report {FREE_ISSUE_LIMIT} issues. Please upgrade to premium.")

    now = utcnow()
    db_issue = models.Issue(
        **issue_in.model_dump(),
        status=models.IssueStatus.PENDING,
        reported_by=reporter.email,
        reported_by_name=reporter.name or "",
        reported_by_photo_url=reporter.photo_url or "",
        upvote_count=0,
        created_at=now,
        updated_at=now
    )
    db_issue.timeline.append(models.TimelineEntry(
        status=models.IssueStatus.PENDING,
        message="Issue reported",
        updated_by=reporter.name or reporter.email,
        date=now
    ))
    db.add(db_issue)

    db.execute(
        update(User)
        .where(User.email == reporter.email)
        .values(issue_count=User.issue_count + 1, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(db_issue)

    logger.info("Issue %s reported by %s", db_issue.id, reporter.email)
    return db_issue

def update_issue(db: Session, requester: User, issue_id: str, changes: schemas.IssueUpdate) -> models.Issue:
    issue = get_issue(db, issue_id)
    permissions.check(requester, permissions.IS_OWNER, issue.reported_by)

    if issue.status != models.IssueStatus.PENDING:
        raise InvalidOperation("Only pending issues can be edited")

    values = {field: value for field, value in changes.model_dump(exclude_unset=True).items() if value is not None}

    return _apply_transition(
        db,
        issue,
        conditions=[models.Issue.status == models.IssueStatus.PENDING],
        values=values,
        status=models.IssueStatus.PENDING,
        message="Issue updated by citizen",
        updated_by=issue.reported_by_name or requester.email,
        date=next_timeline_date(issue),
        failure=InvalidOperation("Only pending issues can be edited")
    )

def delete_issue(db: Session, requester: User, issue_id: str) -> None:
    issue = get_issue(db, issue_id)
    permissions.check(requester, permissions.OWNER_OR_ADMIN, issue.reported_by)

    if not permissions.is_allowed(requester, permissions.IS_ADMIN) and issue.status != models.IssueStatus.PENDING:
        raise InvalidOperation("Only pending issues can be deleted")

    db.delete(issue)
    db.commit()
    logger.info("Issue %s deleted by %s", issue_id, requester.email)

def upvote_issue(db: Session, requester: User, issue_id: str) -> models.Issue:
    issue = get_issue(db, issue_id)
    permissions.check(requester, permissions.NOT_BLOCKED.with_message("Blocked users cannot upvote issues"))
    permissions.check(requester, permissions.NOT_OWNER, issue.reported_by)

    # the unique (issue_id, email) constraint is the membership check
    try:
        db.add(models.Upvote(issue_id=issue.id, email=requester.email))
        db.flush()
    except IntegrityError:
        db.rollback()
        raise Conflict("You have already upvoted this issue")

    db.execute(
        update(models.Issue)
        .where(models.Issue.id == issue.id)
        .values(upvote_count=models.Issue.upvote_count + 1, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(issue)
    return issue

def assign_staff(db: Session, issue_id: str, staff_email: Optional[str]) -> models.Issue:
    if not (staff_email or "").strip():
        raise InvalidInput("staffEmail is required")

    issue = get_issue(db, issue_id)

    if issue.assigned_email:
        raise InvalidOperation("This issue is already assigned")

    if issue.status != models.IssueStatus.PENDING:
        raise InvalidOperation("Only pending issues can be assigned")

    staff = get_user_by_email(db, staff_email)
    if not staff or staff.role != Role.STAFF:
        raise NotFound("Staff user not found")

    date = next_timeline_date(issue)
    name = staff.name or staff.email

    return _apply_transition(
        db,
        issue,
        conditions=[models.Issue.assigned_email.is_(None), models.Issue.status == models.IssueStatus.PENDING],
        values={
            "assigned_email": staff.email,
            "assigned_name": name,
            "assigned_photo_url": staff.photo_url or "",
            "assigned_at": date,
        },
        status=models.IssueStatus.PENDING,
        message=f"Issue assigned to staff: {name}",
        updated_by="Admin",
        date=date,
        failure=InvalidOperation("This issue is already assigned")
    )

def reject_issue(db: Session, issue_id: str) -> models.Issue:
    issue = get_issue(db, issue_id)

    if issue.status != models.IssueStatus.PENDING:
        raise InvalidOperation("Can only reject pending issues")

    return _apply_transition(
        db,
        issue,
        conditions=[models.Issue.status == models.IssueStatus.PENDING],
        values={"status": models.IssueStatus.REJECTED},
        status=models.IssueStatus.REJECTED,
        message="Issue rejected by admin",
        updated_by="Admin",
        date=next_timeline_date(issue),
        failure=InvalidOperation("Can only reject pending issues")
    )

def update_status_by_staff(db: Session, staff: User, issue_id: str, raw_status: Optional[str]) -> models.Issue:
    if not (raw_status or "").strip():
        raise InvalidInput("Status is required")

    target = normalize_status(raw_status)
    if target not in STAFF_TRANSITIONS:
        raise InvalidInput("Invalid status")

    issue = get_issue(db, issue_id)
    permissions.check(staff, permissions.IS_ASSIGNEE, issue.assigned_email)

    current = issue.status
    if current not in STAFF_TRANSITIONS[target]:
        raise InvalidOperation(f"Cannot change status from {current.value} to {target.value}")

    return _apply_transition(
        db,
        issue,
        conditions=[models.Issue.status == current, models.Issue.assigned_email == staff.email],
        values={"status": target},
        status=target,
        message=STAFF_MESSAGES[target],
        updated_by="Staff",
        date=next_timeline_date(issue),
        failure=InvalidOperation(f"Cannot change status from {current.value} to {target.value}")
    )

def _filter_criteria(filters: schemas.IssueFilters) -> list:
    criteria = []

    if filters.category and filters.category != "all":
        criteria.append(models.Issue.category == filters.category)

    if filters.status and filters.status != "all":
        criteria.append(models.Issue.status == normalize_status(filters.status))

    if filters.priority and filters.priority != "all":
        criteria.append(models.Issue.priority == filters.priority.strip().lower())

    if filters.reported_by and filters.reported_by != "all":
        criteria.append(models.Issue.reported_by == permissions.normalize_email(filters.reported_by))

    if (search := filters.search.strip()):
        escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        criteria.append(or_(
            models.Issue.title.ilike(pattern, escape="\\"),
            models.Issue.category.ilike(pattern, escape="\\"),
            models.Issue.location.ilike(pattern, escape="\\"),
            models.Issue.description.ilike(pattern, escape="\\")
        ))

    return criteria

def get_issues(
    db: Session,
    filters: schemas.IssueFilters,
    params: Params,
    *,
    priority_first: bool = False,
    assigned_to: Optional[str] = None
) -> Page:
    query = select(models.Issue).where(*_filter_criteria(filters))

    if assigned_to is not None:
        query = query.where(models.Issue.assigned_email == permissions.normalize_email(assigned_to))

    ordering = [models.Issue.created_at.desc(), models.Issue.id.desc()]
    if priority_first:
        ordering.insert(0, case((models.Issue.priority == models.Priority.HIGH, 1), else_=0).desc())

    return paginate(db.scalars(query.order_by(*ordering)).all(), params)

def get_resolved_issues(db: Session, limit: int = 6) -> list[models.Issue]:
    return db.scalars(
        select(models.Issue)
        .where(models.Issue.status == models.IssueStatus.RESOLVED)
        .order_by(models.Issue.updated_at.desc())
        .limit(limit)
    ).all()

def get_recent_issues(db: Session, limit: int = 6) -> list[models.Issue]:
    return db.scalars(
        select(models.Issue).order_by(models.Issue.created_at.desc()).limit(limit)
    ).all()

def count_issues(db: Session, *criteria) -> int:
    return db.scalar(select(func.count(models.Issue.id)).where(*criteria)) or 0
