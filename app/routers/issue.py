from typing import Annotated
from fastapi import APIRouter, Depends, Path, Query, status
from fastapi_pagination import Params, Page
from sqlalchemy.orm import Session
from app.dependencies import get_db, get_requester, CreateAuthResponses, Responses, CreateExampleResponse, Example, DefaultErrorModel
from app.domain.user.models import User
from app.domain.user.schemas import MessageResponse
from app.domain.issue import schemas, service
import math

router = APIRouter(
    prefix="",
    tags=["Issues"],
    responses={404: {'description': 'Not found'}, 500: {'description': 'Internal Server Error'}},
)


def issue_filters(
    search: str = "",
    category: str = "all",
    status: str = "all",
    priority: str = "all",
    reported_by: Annotated[str, Query(alias="reportedBy")] = "",
) -> schemas.IssueFilters:
    return schemas.IssueFilters(
        search=search,
        category=category,
        status=status,
        priority=priority,
        reported_by=reported_by
    )

def to_page_response(page: Page) -> schemas.IssuePageResponse:
    total_pages = max(1, math.ceil(page.total / page.size))
    return schemas.IssuePageResponse(
        issues=[schemas.IssueOut.model_validate(issue) for issue in page.items],
        total=page.total,
        page=page.page,
        limit=page.size,
        total_pages=total_pages,
        has_more=page.page < total_pages
    )

def issue_out(issue) -> schemas.IssueOut:
    return schemas.IssueOut.model_validate(issue)

IssueIdPath = Annotated[str, Path(description="32 character hexadecimal issue id")]


@router.get("/issues")
def list_issues(
    filters: Annotated[schemas.IssueFilters, Depends(issue_filters)],
    db: Annotated[Session, Depends(get_db)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 6
) -> schemas.IssuePageResponse:
    return to_page_response(service.get_issues(db, filters, Params(page=page, size=limit)))

@router.get("/issues/resolved")
def list_resolved_issues(db: Annotated[Session, Depends(get_db)]) -> schemas.IssueListResponse:
    return schemas.IssueListResponse(issues=[issue_out(issue) for issue in service.get_resolved_issues(db)])

@router.get("/issues/{issue_id}")
def get_issue(issue_id: IssueIdPath, db: Annotated[Session, Depends(get_db)]) -> schemas.IssueResponse:
    return schemas.IssueResponse(issue=issue_out(service.get_issue(db, issue_id)))

@router.post(
    "/issues",
    status_code=status.HTTP_201_CREATED,
    responses=Responses(
        CreateAuthResponses(),
        CreateExampleResponse(
            code=400,
            description="Bad Request",
            examples=[
                Example(name="Quota exceeded", summary="Quota exceeded", description="Free users may report a limited number of issues", value=DefaultErrorModel(message="Free users can only report 3 issues. Please upgrade to premium.")),
                Example(name="Missing field", summary="Missing field", description="Title, description, category and location are required", value=DefaultErrorModel(message="title: String should have at least 1 character")),
            ]
        )
    )
)
def create_issue(
    body: schemas.IssueCreate,
    requester: Annotated[User, Depends(get_requester)],
    db: Annotated[Session, Depends(get_db)]
) -> schemas.IssueCreatedResponse:
    issue = service.create_issue(db, requester, body)
    return schemas.IssueCreatedResponse(message="Issue reported successfully", issue_id=issue.id, issue=issue_out(issue))

@router.patch("/issues/{issue_id}", responses=CreateAuthResponses())
def update_issue(
    issue_id: IssueIdPath,
    body: schemas.IssueUpdate,
    requester: Annotated[User, Depends(get_requester)],
    db: Annotated[Session, Depends(get_db)]
) -> schemas.IssueResponse:
    issue = service.update_issue(db, requester, issue_id, body)
    return schemas.IssueResponse(message="Issue updated successfully", issue=issue_out(issue))

@router.delete("/issues/{issue_id}", responses=CreateAuthResponses())
def delete_issue(
    issue_id: IssueIdPath,
    requester: Annotated[User, Depends(get_requester)],
    db: Annotated[Session, Depends(get_db)]
) -> MessageResponse:
    service.delete_issue(db, requester, issue_id)
    return MessageResponse(message="Issue deleted successfully")

@router.patch(
    "/issues/{issue_id}/upvote",
    responses=Responses(
        CreateAuthResponses(),
        CreateExampleResponse(
            code=409,
            description="Conflict",
            examples=[Example(name="Already upvoted", summary="Already upvoted", description="Each user may upvote an issue once", value=DefaultErrorModel(message="You have already upvoted this issue"))]
        )
    )
)
def upvote_issue(
    issue_id: IssueIdPath,
    requester: Annotated[User, Depends(get_requester)],
    db: Annotated[Session, Depends(get_db)]
) -> schemas.UpvoteResponse:
    issue = service.upvote_issue(db, requester, issue_id)
    return schemas.UpvoteResponse(message="Upvoted successfully", upvote_count=issue.upvote_count)

@router.get("/my-issues", responses=CreateAuthResponses())
def list_my_issues(
    requester: Annotated[User, Depends(get_requester)],
    db: Annotated[Session, Depends(get_db)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20
) -> schemas.IssuePageResponse:
    filters = schemas.IssueFilters(reported_by=requester.email)
    return to_page_response(service.get_issues(db, filters, Params(page=page, size=limit)))
