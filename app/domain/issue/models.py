from sqlalchemy import Column, ForeignKey, Integer, String, Text, DateTime, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from ..model_base import Base, utcnow
from uuid import uuid4
import enum


class IssueStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class Priority(str, enum.Enum):
    NORMAL = "normal"
    HIGH = "high"


def _values(enum_class):
    return [member.value for member in enum_class]


def generate_issue_id() -> str:
    return uuid4().hex


class Issue(Base):
    __tablename__ = "issues"

    id = Column(String(32), primary_key=True, default=generate_issue_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(63), nullable=False, index=True)
    location = Column(String(255), nullable=False)
    image = Column(String, nullable=False, default="")
    priority = Column(Enum(Priority, native_enum=False, length=15, values_callable=_values), nullable=False, default=Priority.NORMAL)
    status = Column(Enum(IssueStatus, native_enum=False, length=15, values_callable=_values), nullable=False, default=IssueStatus.PENDING, index=True)

    reported_by = Column(String(255), nullable=False, index=True)
    reported_by_name = Column(String(255), nullable=False, default="")
    reported_by_photo_url = Column(String, nullable=False, default="")

    assigned_email = Column(String(255), nullable=True, index=True)
    assigned_name = Column(String(255), nullable=True)
    assigned_photo_url = Column(String, nullable=True)
    assigned_at = Column(DateTime, nullable=True)

    upvote_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    timeline = relationship('TimelineEntry', back_populates='issue', order_by='TimelineEntry.id', cascade='all, delete-orphan', lazy='selectin')
    upvotes = relationship('Upvote', back_populates='issue', order_by='Upvote.id', cascade='all, delete-orphan', lazy='selectin')

    @property
    def upvoted_by(self) -> list[str]:
        return [upvote.email for upvote in self.upvotes]

    @property
    def assigned_to(self) -> dict | None:
        if not self.assigned_email:
            return None
        return {
            "email": self.assigned_email,
            "name": self.assigned_name or self.assigned_email,
            "photo_url": self.assigned_photo_url or "",
            "assigned_at": self.assigned_at,
        }

    def __str__(self):
        return f'{self.title} ({self.status.value})'


class TimelineEntry(Base):
    __tablename__ = "issue_timeline"

    id = Column(Integer, primary_key=True, autoincrement=True)
    issue_id = Column(String(32), ForeignKey('issues.id', ondelete='CASCADE'), nullable=False, index=True)
    status = Column(Enum(IssueStatus, native_enum=False, length=15, values_callable=_values), nullable=False)
    message = Column(String(255), nullable=False)
    updated_by = Column(String(255), nullable=False)
    date = Column(DateTime, nullable=False, default=utcnow)

    issue = relationship('Issue', back_populates='timeline')


class Upvote(Base):
    __tablename__ = "issue_upvotes"
    __table_args__ = (
        UniqueConstraint('issue_id', 'email', name='uq_issue_upvotes_issue_email'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    issue_id = Column(String(32), ForeignKey('issues.id', ondelete='CASCADE'), nullable=False)
    email = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    issue = relationship('Issue', back_populates='upvotes')
