from fastapi import FastAPI
from sqladmin import Admin
from sqladmin.authentication import AuthenticationBackend
from sqlalchemy.engine import Engine
from starlette.requests import Request
from app.config import ADMIN_LOGIN, ADMIN_PASSWORD, SECRET_KEY
from app.domain.user.views import UserView
from app.domain.issue.views import IssueView, TimelineEntryView
from app.domain.payment.views import PaymentView
import secrets

class AdminAuth(AuthenticationBackend):

    async def login(self, request: Request) -> bool:
        form = await request.form()

        # panel stays locked until both credentials are configured
        if not ADMIN_LOGIN or not ADMIN_PASSWORD:
            return False

        if not (
            secrets.compare_digest(str(form.get('username', '')), ADMIN_LOGIN)
            and secrets.compare_digest(str(form.get('password', '')), ADMIN_PASSWORD)
        ):
            return False

        request.session.update({"token": form.get('username')})

        return True

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        token = request.session.get("token")
        return token is not None

def create_admin(app: FastAPI, engine: Engine) -> Admin:
    authentication_backend = AdminAuth(secret_key=SECRET_KEY)
    admin = Admin(app=app, engine=engine, base_url="/admin-panel", authentication_backend=authentication_backend)

    admin.add_view(UserView)
    admin.add_view(IssueView)
    admin.add_view(TimelineEntryView)
    admin.add_view(PaymentView)

    return admin
