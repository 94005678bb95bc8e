from typing import Annotated
from fastapi import APIRouter, Depends, Query
from fastapi_pagination import Params
from sqlalchemy.orm import Session
from app.dependencies import get_db, require_staff, CreateAuthResponses, Responses, CreateExampleResponse, Example, DefaultErrorModel
from app.domain.user.models import User
from app.domain.issue import schemas, service
from .issue import issue_out, to_page_response, IssueIdPath

router = APIRouter(
    prefix="/staff",
    tags=["Staff"],
    responses={**CreateAuthResponses(), 404: {'description': 'Not found'}},
)


@router.get("/issues")
def list_assigned_issues(
    requester: Annotated[User, Depends(require_staff)],
    db: Annotated[Session, Depends(get_db)],
    status: str = "all",
    priority: str = "all",
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10
) -> schemas.IssuePageResponse:
    filters = schemas.IssueFilters(status=status, priority=priority)
    return to_page_response(
        service.get_issues(db, filters, Params(page=page, size=limit), priority_first=True, assigned_to=requester.email)
    )

@router.patch(
    "/issues/{issue_id}/status",
    responses=Responses(
        CreateExampleResponse(
            code=400,
            description="Bad Request",
            examples=[
                Example(name="Invalid status", summary="Invalid status", description="Only in-progress (working) and resolved (closed) are accepted", value=DefaultErrorModel(message="Invalid status")),
                Example(name="Invalid transition", summary="Invalid transition", description="Issues move pending -> in-progress -> resolved", value=DefaultErrorModel(message="Cannot change status from pending to resolved")),
            ]
        )
    )
)
def update_issue_status(
    issue_id: IssueIdPath,
    body: schemas.StatusBody,
    requester: Annotated[User, Depends(require_staff)],
    db: Annotated[Session, Depends(get_db)]
) -> schemas.StaffStatusResponse:
    issue = service.update_status_by_staff(db, requester, issue_id, body.status)
    return schemas.StaffStatusResponse(
        message="Status updated successfully",
        issue=issue_out(issue),
        normalized_status=issue.status,
        received_status=body.status
    )
