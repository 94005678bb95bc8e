from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Path, Query, Response, status
from fastapi_pagination import Params
from sqlalchemy.orm import Session
from app.dependencies import get_db, get_identity_provider, require_admin, CreateAuthResponses, Responses, CreateExampleResponse, Example, DefaultErrorModel
from app.internal.identity import IdentityProvider
from app.domain.schema_base import CamelModel
from app.domain.user.models import User, Role
from app.domain.user import schemas as user_schemas, service as user_service
from app.domain.issue import schemas as issue_schemas, service as issue_service
from app.domain.issue.models import IssueStatus, Priority, Issue
from app.domain.payment import schemas as payment_schemas, service as payment_service
from .issue import issue_filters, issue_out, to_page_response, IssueIdPath

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
    responses={**CreateAuthResponses(), 404: {'description': 'Not found'}, 500: {'description': 'Internal Server Error'}},
)


class StatsResponse(CamelModel):
    success: bool = True
    stats: issue_schemas.Stats
    recent_issues: list[issue_schemas.IssueOut]
    recent_users: list[user_schemas.UserOut]


### Issues
@router.get("/issues")
def list_all_issues(
    filters: Annotated[issue_schemas.IssueFilters, Depends(issue_filters)],
    db: Annotated[Session, Depends(get_db)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10
) -> issue_schemas.IssuePageResponse:
    return to_page_response(
        issue_service.get_issues(db, filters, Params(page=page, size=limit), priority_first=True)
    )

@router.patch(
    "/issues/{issue_id}/assign-staff",
    responses=Responses(
        CreateExampleResponse(
            code=400,
            description="Bad Request",
            examples=[
                Example(name="Already assigned", summary="Already assigned", description="An issue keeps its first assignee", value=DefaultErrorModel(message="This issue is already assigned")),
                Example(name="Missing staff email", summary="Missing staff email", description="staffEmail is required", value=DefaultErrorModel(message="staffEmail is required")),
            ]
        )
    )
)
def assign_staff(
    issue_id: IssueIdPath,
    body: issue_schemas.AssignStaffBody,
    db: Annotated[Session, Depends(get_db)]
) -> issue_schemas.IssueResponse:
    issue = issue_service.assign_staff(db, issue_id, body.staff_email)
    return issue_schemas.IssueResponse(message="Staff assigned successfully", issue=issue_out(issue))

@router.patch("/issues/{issue_id}/reject")
def reject_issue(issue_id: IssueIdPath, db: Annotated[Session, Depends(get_db)]) -> issue_schemas.IssueResponse:
    issue = issue_service.reject_issue(db, issue_id)
    return issue_schemas.IssueResponse(message="Issue rejected", issue=issue_out(issue))


### Stats
@router.get("/stats")
def get_stats(db: Annotated[Session, Depends(get_db)]) -> StatsResponse:
    total_received, payment_count = payment_service.get_totals(db)

    stats = issue_schemas.Stats(
        users=issue_schemas.UserCounts(
            total=user_service.count_users(db),
            premium=user_service.count_users(db, User.is_premium.is_(True)),
            blocked=user_service.count_users(db, User.is_blocked.is_(True)),
            staff=user_service.count_users(db, User.role == Role.STAFF)
        ),
        issues=issue_schemas.IssueCounts(
            total=issue_service.count_issues(db),
            pending=issue_service.count_issues(db, Issue.status == IssueStatus.PENDING),
            in_progress=issue_service.count_issues(db, Issue.status == IssueStatus.IN_PROGRESS),
            resolved=issue_service.count_issues(db, Issue.status == IssueStatus.RESOLVED),
            rejected=issue_service.count_issues(db, Issue.status == IssueStatus.REJECTED),
            high_priority=issue_service.count_issues(db, Issue.priority == Priority.HIGH)
        ),
        payments=issue_schemas.PaymentTotals(total_received=total_received, count=payment_count)
    )

    return StatsResponse(
        stats=stats,
        recent_issues=[issue_out(issue) for issue in issue_service.get_recent_issues(db)],
        recent_users=[user_schemas.UserOut.model_validate(user) for user in user_service.get_recent_users(db)]
    )


### Payments
@router.get("/payments")
def list_payments(
    db: Annotated[Session, Depends(get_db)],
    email: Optional[str] = None,
    month_key: Annotated[Optional[str], Query(alias="monthKey", pattern=r"^\d{4}-\d{2}$")] = None
) -> payment_schemas.PaymentListResponse:
    payments = payment_service.get_payments(db, email=email, month_key=month_key)
    return payment_schemas.PaymentListResponse(payments=[payment_schemas.PaymentOut.model_validate(p) for p in payments])


### Users
@router.patch("/users/{email}/role")
def change_user_role(
    email: Annotated[str, Path()],
    body: user_schemas.RoleUpdate,
    requester: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)]
) -> user_schemas.UserResponse:
    user = user_service.change_role(db, requester, email, body.role)
    return user_schemas.UserResponse(message="Role updated", user=user_schemas.UserOut.model_validate(user))


### Staff
@router.get("/staff")
def list_staff(db: Annotated[Session, Depends(get_db)]) -> user_schemas.StaffListResponse:
    return user_schemas.StaffListResponse(staff=[user_schemas.StaffOut.model_validate(s) for s in user_service.get_staff(db)])

@router.post("/staff", status_code=status.HTTP_201_CREATED)
def create_staff(
    response: Response,
    body: user_schemas.StaffCreate,
    db: Annotated[Session, Depends(get_db)],
    identity_provider: Annotated[IdentityProvider, Depends(get_identity_provider)]
) -> user_schemas.UserResponse:
    staff, created = user_service.create_staff(db, identity_provider, body)

    if not created:
        response.status_code = status.HTTP_200_OK

    return user_schemas.UserResponse(
        message="Staff created successfully" if created else "Existing user promoted to staff",
        user=user_schemas.UserOut.model_validate(staff)
    )

@router.patch("/staff/{email}")
def update_staff(
    email: Annotated[str, Path()],
    body: user_schemas.StaffUpdate,
    db: Annotated[Session, Depends(get_db)],
    identity_provider: Annotated[IdentityProvider, Depends(get_identity_provider)]
) -> user_schemas.UserResponse:
    staff = user_service.update_staff(db, identity_provider, email, body)
    return user_schemas.UserResponse(message="Staff updated successfully", user=user_schemas.UserOut.model_validate(staff))

@router.delete("/staff/{email}")
def delete_staff(
    email: Annotated[str, Path()],
    db: Annotated[Session, Depends(get_db)],
    identity_provider: Annotated[IdentityProvider, Depends(get_identity_provider)]
) -> user_schemas.MessageResponse:
    user_service.delete_staff(db, identity_provider, email)
    return user_schemas.MessageResponse(message="Staff deleted successfully")
