from sqlalchemy.orm import Session
from app.domain.model_base import utcnow
from app.domain.user.models import User, Role
from app.domain.issue.models import Issue, IssueStatus, Priority, TimelineEntry
from app.domain.payment.models import Payment
from typing import Final

EXAMPLE_ISSUE: Final[dict] = {
    "title": "Pothole",
    "description": "Large pothole",
    "category": "Road",
    "location": "Main St",
}


def create_test_user(session: Session, email: str, role: Role = Role.CITIZEN, **fields) -> User:
    user_data = {
        "email": email,
        "name": email.split("@")[0],
        "role": role,
        "is_premium": False,
        "is_blocked": False,
        "issue_count": 0,
        **fields,
    }

    user = User(**user_data)

    session.add(user)
    session.commit()
    session.refresh(user)

    return user

def create_test_issue(session: Session, reporter: User, **fields) -> Issue:
    now = utcnow()
    issue_data = {
        **EXAMPLE_ISSUE,
        "priority": Priority.NORMAL,
        "status": IssueStatus.PENDING,
        "reported_by": reporter.email,
        "reported_by_name": reporter.name,
        "created_at": now,
        "updated_at": now,
        **fields,
    }

    issue = Issue(**issue_data)
    issue.timeline.append(TimelineEntry(status=IssueStatus.PENDING, message="Issue reported", updated_by=reporter.name, date=now))

    session.add(issue)
    session.commit()
    session.refresh(issue)

    return issue

def assign_test_issue(session: Session, issue: Issue, staff: User, status: IssueStatus = IssueStatus.PENDING) -> Issue:
    issue.assigned_email = staff.email
    issue.assigned_name = staff.name
    issue.assigned_photo_url = ""
    issue.assigned_at = utcnow()
    issue.status = status

    session.commit()
    session.refresh(issue)

    return issue

def create_test_payment(session: Session, email: str, month_key: str = "2026-01", **fields) -> Payment:
    payment = Payment(
        email=email,
        amount=1000,
        method="assignment",
        transaction_id=fields.pop("transaction_id", f"TRX-{email}-{month_key}"),
        month_key=month_key,
        **fields
    )

    session.add(payment)
    session.commit()
    session.refresh(payment)

    return payment
