from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional, Tuple
from app.config import ADMIN_SETUP_SECRET
from app.exceptions import NotFound, InvalidInput, InvalidOperation, Forbidden, Internal
from app.internal.identity import IdentityProvider, IdentityProviderError
from app.permissions import normalize_email, same_identity
from ..model_base import utcnow
from . import models, schemas
import logging

logger = logging.getLogger(__name__)


def default_name(email: str) -> str:
    return email.split("@")[0]

def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == normalize_email(email)).first()

def get_user_or_404(db: Session, email: str) -> models.User:
    if not (user := get_user_by_email(db, email)):
        raise NotFound("User not found")
    return user

def get_users(db: Session):
    return db.query(models.User).order_by(models.User.created_at.desc(), models.User.id.desc()).all()

def get_staff(db: Session):
    return db.query(models.User)\
             .filter(models.User.role == models.Role.STAFF)\
             .order_by(models.User.created_at.desc(), models.User.id.desc())\
             .all()

def create_user(db: Session, email: str, name: str = "", photo_url: str = "") -> models.User:
    email = normalize_email(email)
    db_user = models.User(
        email=email,
        name=name or default_name(email),
        photo_url=photo_url or "",
        role=models.Role.CITIZEN,
        is_premium=False,
        is_blocked=False,
        issue_count=0
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info("Created user %s", email)
    return db_user

def get_or_create_user(db: Session, email: str) -> models.User:
    """
    Resolves the requester's record, creating a citizen on first contact.
    """
    if (user := get_user_by_email(db, email)):
        return user

    try:
        return create_user(db, email)
    except IntegrityError:
        # another request created it first
        db.rollback()
        return get_user_or_404(db, email)

def register_or_touch(
    db: Session,
    email: str,
    name: Optional[str] = None,
    photo_url: Optional[str] = None
) -> Tuple[models.User, bool]:
    """
    Idempotent registration.

    Returns the user and whether it was created. An existing record only
    takes the provided non-empty fields, nothing is ever blanked.
    """
    if not normalize_email(email):
        raise InvalidInput("Email is required")

    if not (user := get_user_by_email(db, email)):
        try:
            return create_user(db, email, name or "", photo_url or ""), True
        except IntegrityError:
            db.rollback()
            user = get_user_or_404(db, email)

    changed = False
    if name and name.strip():
        user.name = name.strip()
        changed = True
    if photo_url and photo_url.strip():
        user.photo_url = photo_url.strip()
        changed = True

    if changed:
        db.commit()
        db.refresh(user)

    return user, False

def update_profile(db: Session, user: models.User, changes: schemas.ProfileUpdate) -> models.User:
    for field, value in changes.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(user, field, value)

    user.updated_at = utcnow()
    db.commit()
    db.refresh(user)
    return user

def toggle_block(db: Session, email: str) -> models.User:
    user = get_user_or_404(db, email)

    if user.role == models.Role.ADMIN:
        raise InvalidOperation("Cannot block admin users")

    user.is_blocked = not user.is_blocked
    db.commit()
    db.refresh(user)
    logger.info("User %s %s", user.email, "blocked" if user.is_blocked else "unblocked")
    return user

def change_role(db: Session, requester: models.User, email: str, role: models.Role) -> models.User:
    user = get_user_or_404(db, email)

    if same_identity(requester.email, user.email) and role != user.role:
        raise InvalidOperation("Admins cannot change their own role")

    user.role = role
    if role == models.Role.ADMIN:
        user.is_blocked = False
    db.commit()
    db.refresh(user)
    logger.info("%s changed role of %s to %s", requester.email, user.email, role.value)
    return user

def setup_admin(db: Session, email: Optional[str], secret: Optional[str]) -> models.User:
    if not ADMIN_SETUP_SECRET:
        raise Internal("ADMIN_SETUP_SECRET is missing in server configuration")

    if (secret or "").strip() != ADMIN_SETUP_SECRET:
        raise Forbidden("Invalid secret key")

    if not normalize_email(email):
        raise InvalidInput("Email is required")

    if not (user := get_user_by_email(db, email)):
        raise NotFound("User not found. Please register first.")

    user.role = models.Role.ADMIN
    user.is_premium = True
    user.is_blocked = False
    db.commit()
    db.refresh(user)
    logger.info("Bootstrapped admin %s", user.email)
    return user

def get_staff_or_404(db: Session, email: str) -> models.User:
    if not (staff := get_user_by_email(db, email)):
        raise NotFound("Staff not found")

    if staff.role != models.Role.STAFF:
        raise InvalidOperation("Target user is not staff")
    return staff

def create_staff(db: Session, identity_provider: IdentityProvider, staff_in: schemas.StaffCreate) -> Tuple[models.User, bool]:
    """
    Provisions the identity provider account first, then mirrors it in the store.

    An existing user with the same email is promoted and overwritten.
    """
    email = normalize_email(staff_in.email)

    try:
        uid = identity_provider.create_account(email, staff_in.password, staff_in.name, staff_in.photo_url)
    except IdentityProviderError as e:
        raise InvalidInput(str(e) or "Failed to create identity provider user")

    fields = {
        "name": staff_in.name,
        "phone": staff_in.phone or "",
        "photo_url": staff_in.photo_url or "",
        "role": models.Role.STAFF,
        "is_blocked": False,
        "is_premium": False,
        "issue_count": 0,
        "provider_uid": uid,
    }

    if (existing := get_user_by_email(db, email)):
        for field, value in fields.items():
            setattr(existing, field, value)
        db.commit()
        db.refresh(existing)
        logger.info("Promoted %s to staff", email)
        return existing, False

    db_staff = models.User(email=email, **fields)
    db.add(db_staff)
    db.commit()
    db.refresh(db_staff)
    logger.info("Created staff %s", email)
    return db_staff, True

def update_staff(db: Session, identity_provider: IdentityProvider, email: str, changes: schemas.StaffUpdate) -> models.User:
    staff = get_staff_or_404(db, email)
    data = changes.model_dump(exclude_unset=True)

    for field in ("name", "phone", "photo_url", "is_blocked"):
        if data.get(field) is not None:
            setattr(staff, field, data[field])

    staff.updated_at = utcnow()
    db.commit()
    db.refresh(staff)

    try:
        identity_provider.update_account(
            staff.email,
            display_name=data.get("name"),
            photo_url=data.get("photo_url"),
            password=data.get("password") or None
        )
    except IdentityProviderError as e:
        logger.warning("Could not sync staff %s to identity provider: %s", staff.email, e)

    return staff

def delete_staff(db: Session, identity_provider: IdentityProvider, email: str) -> None:
    staff = get_staff_or_404(db, email)
    staff_email = staff.email

    db.delete(staff)
    db.commit()
    logger.info("Deleted staff %s", staff_email)

    try:
        identity_provider.delete_account(staff_email)
    except IdentityProviderError as e:
        logger.warning("Could not delete staff %s from identity provider: %s", staff_email, e)

def count_users(db: Session, *criteria) -> int:
    return db.query(models.User).filter(*criteria).count()

def get_recent_users(db: Session, limit: int = 6):
    return db.query(models.User).order_by(models.User.created_at.desc(), models.User.id.desc()).limit(limit).all()
