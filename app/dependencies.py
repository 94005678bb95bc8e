from typing import Annotated, Any, Literal, Optional
from fastapi import Request, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from pydantic import BaseModel
from app.exceptions import Unauthenticated
from app.internal.identity import IdentityProvider
from app.domain.user.models import User, Role
from app.domain.user.service import get_or_create_user
from app import permissions
import logging

logger = logging.getLogger(__name__)


class DefaultErrorModel(BaseModel):
    """Used for creating examples"""
    success: bool = False
    message: str

class Example(BaseModel):
    """
    Used for making example response in CreateExampleResponse function
    """
    name: str
    summary: str | None = None
    description: str | None = None
    value: dict | BaseModel

def CreateExampleResponse(
    *,
    code: int,
    description: str = '',
    content_type: Literal['application/json', 'text/plain'] = 'application/json',
    examples: list[Example]
) -> dict[int, dict[str, Any]]:
    """
    Allows for quick docs building

    Pydantic models can be used as value for example

    Raises `AttributeError` when amount of examples is `<1`
    """

    if len(examples) < 1:
        raise AttributeError("You need to provide atleast one example")

    return {
        code: {
            "description": description,
            "content": {
                content_type: {
                    "examples": {
                        example.name: {
                            "summary": example.summary,
                            "description": example.description,
                            "value": example.value
                        }
                        for example in examples
                    }
                }
            }
        }
    }

def Responses(
    *ExampleResponses: dict[int, dict[str, Any]]
) -> dict[int, dict[str, Any]]:
    """
    Merges the example responses for fastapi endpoint

    **Usage**:
    ```python
    @router.post(
        "/",
        status_code=200,
        responses=Responses(
            CreateExampleResponse(...),
            ...
        )
    )
    ```
    """

    output = {}

    for example in ExampleResponses:
        for code, response in example.items():
            if code not in output:
                output[code] = response
                continue

            for content_type, content in response["content"].items():
                if content_type in output[code]["content"]:
                    output[code]["content"][content_type]["examples"].update(content["examples"])
                else:
                    output[code]["content"][content_type] = content

    return output

def CreateAuthResponses():
    return Responses(
        CreateExampleResponse(
            code=401,
            description='Unauthorized',
            examples=[
                Example(name="Missing token", summary="Missing token", description="No bearer token was sent", value=DefaultErrorModel(message="Unauthorized (no token)")),
                Example(name="Expired token", summary="Expired token", description="The bearer token has expired", value=DefaultErrorModel(message="Unauthorized (token expired)")),
            ]
        ),
        CreateExampleResponse(
            code=403,
            description='Forbidden',
            examples=[
                Example(name="Wrong role", summary="Wrong role", description="The requester's role does not allow this action", value=DefaultErrorModel(message="Admin access required")),
            ]
        )
    )


def get_db(request: Request):
    """
    Function responsible for giving access to database
    """

    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()

def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity_provider


bearer_scheme = HTTPBearer(auto_error=False)

def authenticate(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    identity_provider: Annotated[IdentityProvider, Depends(get_identity_provider)]
) -> str:
    """
    Verifies the bearer token and returns the lower-cased email it was issued for.
    """

    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Unauthorized (no token)")

    try:
        email = identity_provider.verify_token(credentials.credentials)
    except Unauthenticated as e:
        logger.info("Rejected bearer token: %s", e.message)
        raise

    return permissions.normalize_email(email)

def get_requester(
    email: Annotated[str, Depends(authenticate)],
    db: Annotated[Session, Depends(get_db)]
) -> User:
    return get_or_create_user(db, email)

def require_role(*roles: Role):
    rule = permissions.has_role(*roles)

    def dependency(requester: Annotated[User, Depends(get_requester)]) -> User:
        return permissions.check(requester, rule)

    return dependency

require_admin = require_role(Role.ADMIN)
require_staff = require_role(Role.STAFF)
