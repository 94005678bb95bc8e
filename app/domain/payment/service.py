from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Optional, Tuple
from app.config import PREMIUM_PRICE, DEFAULT_PAYMENT_METHOD
from app.exceptions import InvalidOperation
from app.domain.user.models import User
from app import permissions
from ..model_base import utcnow
from . import models
import logging
import time

logger = logging.getLogger(__name__)


def generate_transaction_id() -> str:
    return f"TRX-{int(time.time() * 1000)}"

def subscribe(
    db: Session,
    requester: User,
    transaction_id: Optional[str] = None,
    method: Optional[str] = None
) -> Tuple[models.Payment, User]:
    """
    Records the one-time premium payment and grants premium in the same commit.
    """
    permissions.check(requester, permissions.NOT_BLOCKED.with_message("Blocked users cannot subscribe"))

    if requester.is_premium:
        raise InvalidOperation("You are already a premium user")

    now = utcnow()
    db_payment = models.Payment(
        email=requester.email,
        amount=PREMIUM_PRICE,
        method=(method or "").strip() or DEFAULT_PAYMENT_METHOD,
        transaction_id=(transaction_id or "").strip() or generate_transaction_id(),
        month_key=now.strftime("%Y-%m"),
        created_at=now
    )
    db.add(db_payment)

    requester.is_premium = True
    requester.updated_at = now

    db.commit()
    db.refresh(db_payment)
    db.refresh(requester)

    logger.info("Premium granted to %s (%s)", requester.email, db_payment.transaction_id)
    return db_payment, requester

def get_payments(db: Session, email: Optional[str] = None, month_key: Optional[str] = None):
    query = db.query(models.Payment)

    if email:
        query = query.filter(models.Payment.email == permissions.normalize_email(email))

    if month_key:
        query = query.filter(models.Payment.month_key == month_key.strip())

    return query.order_by(models.Payment.created_at.desc(), models.Payment.id.desc()).all()

def get_totals(db: Session) -> Tuple[int, int]:
    """Sum of payment amounts and number of payments."""
    total, count = db.query(func.coalesce(func.sum(models.Payment.amount), 0), func.count(models.Payment.id)).one()
    return int(total), int(count)
