from sqlalchemy import Column, Integer, String, DateTime
from ..model_base import Base, utcnow


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    method = Column(String(63), nullable=False, default="assignment")
    transaction_id = Column(String(255), nullable=False)
    month_key = Column(String(7), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    def __str__(self):
        return f'{self.transaction_id} ({self.email})'
