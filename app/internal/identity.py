from dataclasses import dataclass, field
from typing import Optional, Protocol
from uuid import uuid4
from passlib.context import CryptContext
from app.config import FIREBASE_SERVICE_ACCOUNT, SECRET_KEY, ENCRYPTION_ALGORITHM, ACCESS_TOKEN_EXPIRE_TIME
from app.exceptions import Unauthenticated
import base64
import datetime
import json
import logging
import jwt

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    """Raised when the identity provider rejects an account operation."""


class IdentityProvider(Protocol):
    """Operations the API needs from the external identity provider."""

    def verify_token(self, token: str) -> str:
        ...

    def create_account(self, email: str, password: str, display_name: str, photo_url: str = "") -> str:
        ...

    def update_account(
        self,
        email: str,
        *,
        display_name: Optional[str] = None,
        photo_url: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        ...

    def delete_account(self, email: str) -> None:
        ...


class FirebaseIdentityProvider:
    """
    Verifies Firebase ID tokens and manages Firebase Auth accounts.

    `service_account` is the base64 encoded service account JSON.
    """

    def __init__(self, service_account: str):
        import firebase_admin
        from firebase_admin import credentials

        try:
            info = json.loads(base64.b64decode(service_account).decode("utf-8"))
        except (ValueError, UnicodeDecodeError) as e:
            raise RuntimeError("Invalid FIREBASE_SERVICE_ACCOUNT base64") from e

        try:
            self._app = firebase_admin.get_app()
        except ValueError:
            self._app = firebase_admin.initialize_app(credentials.Certificate(info))

    def verify_token(self, token: str) -> str:
        from firebase_admin import auth

        try:
            decoded = auth.verify_id_token(token, app=self._app)
        except auth.ExpiredIdTokenError as e:
            raise Unauthenticated("Unauthorized (token expired)", str(e))
        except (auth.InvalidIdTokenError, auth.CertificateFetchError, ValueError) as e:
            raise Unauthenticated("Unauthorized (invalid token)", str(e))

        if not (email := decoded.get("email")):
            raise Unauthenticated("Unauthorized (no email in token)")
        return email

    def create_account(self, email: str, password: str, display_name: str, photo_url: str = "") -> str:
        from firebase_admin import auth, exceptions

        try:
            record = auth.create_user(
                email=email,
                password=password,
                display_name=display_name,
                photo_url=photo_url or None,
                app=self._app
            )
        except (exceptions.FirebaseError, ValueError) as e:
            raise IdentityProviderError(str(e)) from e
        return record.uid

    def update_account(self, email, *, display_name=None, photo_url=None, password=None) -> None:
        from firebase_admin import auth, exceptions

        changes = {}
        if display_name is not None:
            changes["display_name"] = display_name
        if photo_url is not None:
            changes["photo_url"] = photo_url or auth.DELETE_ATTRIBUTE
        if password:
            changes["password"] = password
        if not changes:
            return

        try:
            record = auth.get_user_by_email(email, app=self._app)
            auth.update_user(record.uid, app=self._app, **changes)
        except (exceptions.FirebaseError, ValueError) as e:
            raise IdentityProviderError(str(e)) from e

    def delete_account(self, email: str) -> None:
        from firebase_admin import auth, exceptions

        try:
            record = auth.get_user_by_email(email, app=self._app)
            auth.delete_user(record.uid, app=self._app)
        except (exceptions.FirebaseError, ValueError) as e:
            raise IdentityProviderError(str(e)) from e


@dataclass
class LocalAccount:
    uid: str
    hashed_password: str
    display_name: str
    photo_url: str = ""


pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass
class LocalIdentityProvider:
    """
    Self-signed bearer tokens for development and tests.

    Tokens are HS256 JWTs carrying the subject's email. Accounts created
    through the admin API live in memory only.
    """

    secret_key: str = SECRET_KEY
    algorithm: str = ENCRYPTION_ALGORITHM
    expire_minutes: int = ACCESS_TOKEN_EXPIRE_TIME
    accounts: dict[str, LocalAccount] = field(default_factory=dict)

    def issue_token(self, email: str, expires_in: Optional[datetime.timedelta] = None) -> str:
        now = datetime.datetime.now(datetime.UTC)
        payload = {
            "sub": email,
            "email": email,
            "iat": now,
            "exp": now + (expires_in if expires_in is not None else datetime.timedelta(minutes=self.expire_minutes)),
            "token_type": "Bearer"
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> str:
        try:
            decoded = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise Unauthenticated("Unauthorized (token expired)")
        except jwt.PyJWTError as e:
            raise Unauthenticated("Unauthorized (invalid token)", str(e))

        if not (email := decoded.get("email")):
            raise Unauthenticated("Unauthorized (no email in token)")
        return email

    def sign_in(self, email: str, password: str) -> str:
        account = self.accounts.get(email)
        if account is None or not pwd_context.verify(password, account.hashed_password):
            raise IdentityProviderError("Invalid credentials")
        return self.issue_token(email)

    def create_account(self, email: str, password: str, display_name: str, photo_url: str = "") -> str:
        if email in self.accounts:
            raise IdentityProviderError("The user with the provided email already exists")
        if len(password) < 6:
            raise IdentityProviderError("The password must be a string with at least 6 characters")

        account = LocalAccount(
            uid=uuid4().hex,
            hashed_password=pwd_context.hash(password),
            display_name=display_name,
            photo_url=photo_url
        )
        self.accounts[email] = account
        return account.uid

    def update_account(self, email, *, display_name=None, photo_url=None, password=None) -> None:
        if not (account := self.accounts.get(email)):
            raise IdentityProviderError(f"No user record found for {email}")

        if display_name is not None:
            account.display_name = display_name
        if photo_url is not None:
            account.photo_url = photo_url
        if password:
            account.hashed_password = pwd_context.hash(password)

    def delete_account(self, email: str) -> None:
        if self.accounts.pop(email, None) is None:
            raise IdentityProviderError(f"No user record found for {email}")


def create_identity_provider() -> IdentityProvider:
    if FIREBASE_SERVICE_ACCOUNT:
        logger.info("Using Firebase identity provider")
        return FirebaseIdentityProvider(FIREBASE_SERVICE_ACCOUNT)

    logger.warning("FIREBASE_SERVICE_ACCOUNT is not set, using local signed tokens")
    return LocalIdentityProvider()
