from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from faker import Faker
from app.dependencies import get_db
from app.domain.schema_base import CamelModel
from app.domain.model_base import utcnow
from app.domain.user.models import User, Role
from app.domain.issue.models import Issue, IssueStatus, Priority, TimelineEntry
import datetime
import logging
import random

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix='/develop',
    tags=['Develop']
)

CATEGORIES = ["Road", "Streetlight", "Water", "Garbage", "Drainage", "Footpath"]


class SeedResponse(CamelModel):
    success: bool = True
    users: int
    staff: int
    issues: int


def unique_email(fake: Faker, used: set[str]) -> str:
    while (email := fake.email().lower()) in used:
        continue
    used.add(email)
    return email


@router.post("/sample-data", status_code=status.HTTP_201_CREATED)
def seed_data(
    db: Annotated[Session, Depends(get_db)],
    user_amount: int = Query(10, ge=1, le=100, description="Must be between 1 and 100"),
    staff_amount: int = Query(3, ge=0, le=20, description="Must be between 0 and 20"),
    issue_amount: int = Query(20, ge=0, le=200, description="Must be between 0 and 200")
) -> SeedResponse:
    fake = Faker()
    used = {email for (email,) in db.query(User.email).all()}

    citizens = [
        User(
            email=unique_email(fake, used),
            name=fake.name(),
            photo_url=fake.image_url(),
            phone=fake.phone_number()[:31],
            role=Role.CITIZEN,
            is_premium=fake.boolean(chance_of_getting_true=20)
        ) for _ in range(user_amount)
    ]
    staff = [
        User(
            email=unique_email(fake, used),
            name=fake.name(),
            phone=fake.phone_number()[:31],
            role=Role.STAFF
        ) for _ in range(staff_amount)
    ]
    db.add_all(citizens + staff)

    issues = []
    for _ in range(issue_amount):
        reporter = random.choice(citizens)
        created_at = utcnow() - datetime.timedelta(days=random.randint(0, 60), minutes=random.randint(0, 1440))

        issue = Issue(
            title=fake.sentence(nb_words=5).rstrip("."),
            description=fake.paragraph(),
            category=random.choice(CATEGORIES),
            location=fake.street_address(),
            image=fake.image_url(),
            priority=Priority.HIGH if reporter.is_premium else Priority.NORMAL,
            status=IssueStatus.PENDING,
            reported_by=reporter.email,
            reported_by_name=reporter.name,
            reported_by_photo_url=reporter.photo_url,
            created_at=created_at,
            updated_at=created_at
        )
        issue.timeline.append(TimelineEntry(status=IssueStatus.PENDING, message="Issue reported", updated_by=reporter.name, date=created_at))
        reporter.issue_count = (reporter.issue_count or 0) + 1

        if staff and fake.boolean():
            assignee = random.choice(staff)
            assigned_at = created_at + datetime.timedelta(hours=1)
            issue.assigned_email = assignee.email
            issue.assigned_name = assignee.name
            issue.assigned_photo_url = ""
            issue.assigned_at = assigned_at
            issue.timeline.append(TimelineEntry(status=IssueStatus.PENDING, message=f"Issue assigned to staff: {assignee.name}", updated_by="Admin", date=assigned_at))

            if fake.boolean():
                issue.status = IssueStatus.IN_PROGRESS
                issue.updated_at = assigned_at + datetime.timedelta(hours=1)
                issue.timeline.append(TimelineEntry(status=IssueStatus.IN_PROGRESS, message="Work started on the issue", updated_by="Staff", date=issue.updated_at))

        issues.append(issue)

    db.add_all(issues)
    db.commit()

    logger.info("Seeded %d citizens, %d staff and %d issues", len(citizens), len(staff), len(issues))
    return SeedResponse(users=len(citizens), staff=len(staff), issues=len(issues))
