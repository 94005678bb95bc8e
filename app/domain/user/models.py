from sqlalchemy import Boolean, Column, Integer, String, DateTime, Enum
from ..model_base import Base, utcnow
import enum


class Role(str, enum.Enum):
    CITIZEN = "citizen"
    STAFF = "staff"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False, default="")
    photo_url = Column(String, nullable=False, default="")
    phone = Column(String(31), nullable=False, default="")
    role = Column(
        Enum(Role, native_enum=False, length=15, values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=Role.CITIZEN
    )
    is_premium = Column(Boolean, nullable=False, default=False)
    is_blocked = Column(Boolean, nullable=False, default=False)
    issue_count = Column(Integer, nullable=False, default=0)
    provider_uid = Column(String(128), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def __str__(self):
        return f'{self.email} ({self.role.value})'
