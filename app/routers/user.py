from typing import Annotated
from fastapi import APIRouter, Depends, Response, Body, Path, status
from sqlalchemy.orm import Session
from app.dependencies import get_db, get_requester, require_admin, CreateAuthResponses
from app.domain.user.models import User
from app.domain.user.service import register_or_touch, get_user_or_404, get_users, update_profile, toggle_block
from app.domain.user.schemas import (
    UserRegister, ProfileUpdate, UserOut,
    UserResponse, UserListResponse, BlockResponse
)
from app import permissions

router = APIRouter(
    prefix="/users",
    tags=["User"],
    responses={404: {'description': 'Not found'}, 500: {'description': 'Internal Server Error'}},
)


@router.post("", status_code=status.HTTP_200_OK)
def register_user(
    response: Response,
    body: Annotated[UserRegister, Body()],
    db: Annotated[Session, Depends(get_db)]
) -> UserResponse:
    user, created = register_or_touch(db, body.email, body.name, body.photo_url)

    if created:
        response.status_code = status.HTTP_201_CREATED
        return UserResponse(message="User created", user=UserOut.model_validate(user))

    return UserResponse(message="User already exists", user=UserOut.model_validate(user))

@router.get("/profile/{email}", responses=CreateAuthResponses())
def get_profile(
    email: Annotated[str, Path()],
    requester: Annotated[User, Depends(get_requester)],
    db: Annotated[Session, Depends(get_db)]
) -> UserResponse:
    permissions.check(requester, permissions.SELF_OR_ADMIN, email)
    return UserResponse(user=UserOut.model_validate(get_user_or_404(db, email)))

@router.patch("/profile", responses=CreateAuthResponses())
def modify_profile(
    body: ProfileUpdate,
    requester: Annotated[User, Depends(get_requester)],
    db: Annotated[Session, Depends(get_db)]
) -> UserResponse:
    user = update_profile(db, requester, body)
    return UserResponse(message="Profile updated", user=UserOut.model_validate(user))

@router.get("", responses=CreateAuthResponses(), dependencies=[Depends(require_admin)])
def list_users(db: Annotated[Session, Depends(get_db)]) -> UserListResponse:
    users = get_users(db)
    return UserListResponse(users=[UserOut.model_validate(user) for user in users], count=len(users))

@router.patch("/{email}/toggle-block", responses=CreateAuthResponses(), dependencies=[Depends(require_admin)])
def toggle_user_block(
    email: Annotated[str, Path()],
    db: Annotated[Session, Depends(get_db)]
) -> BlockResponse:
    user = toggle_block(db, email)
    return BlockResponse(
        message=f"User {'blocked' if user.is_blocked else 'unblocked'} successfully",
        is_blocked=user.is_blocked
    )
