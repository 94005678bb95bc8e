from typing import Annotated
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from pydantic import BaseModel
from ..dependencies import get_db, Responses, CreateExampleResponse, Example, DefaultErrorModel
from app.domain.schema_base import CamelModel
from app.domain.user import schemas as user_schemas
from app.domain.user.service import setup_admin, count_users
from app.domain.issue.service import count_issues
from app.domain.payment.service import get_totals

router = APIRouter(
    prefix="",
    tags=["Root"],
    responses={404: {'description': 'Not found'}},
)


class RootResponse(BaseModel):
    success: bool = True
    message: str

class TableCounts(CamelModel):
    users: int
    issues: int
    payments: int

class HealthResponse(CamelModel):
    success: bool = True
    database: str
    counts: TableCounts


@router.get("/")
async def root() -> RootResponse:
    return RootResponse(message="CivicCare server is running")

@router.get("/health")
def health(request: Request, db: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    request.app.state.database.ping()
    _, payments = get_totals(db)

    return HealthResponse(
        database="connected",
        counts=TableCounts(users=count_users(db), issues=count_issues(db), payments=payments)
    )

@router.post(
    "/setup-admin",
    responses=Responses(
        CreateExampleResponse(
            code=403,
            description="Forbidden",
            examples=[Example(name="Invalid secret", summary="Invalid secret", description="The shared secret does not match", value=DefaultErrorModel(message="Invalid secret key"))]
        ),
        CreateExampleResponse(
            code=404,
            description="Not Found",
            examples=[Example(name="Unknown user", summary="Unknown user", description="The user has to register before becoming admin", value=DefaultErrorModel(message="User not found. Please register first."))]
        )
    )
)
def bootstrap_admin(
    body: user_schemas.AdminSetup,
    db: Annotated[Session, Depends(get_db)]
) -> user_schemas.UserResponse:
    user = setup_admin(db, body.email, body.secret)
    return user_schemas.UserResponse(
        message="Admin setup complete",
        user=user_schemas.UserOut.model_validate(user)
    )
