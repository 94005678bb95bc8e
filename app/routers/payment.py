from typing import Annotated
from fastapi import APIRouter, Depends, Body, status
from sqlalchemy.orm import Session
from app.dependencies import get_db, get_requester, CreateAuthResponses
from app.domain.user.models import User
from app.domain.user.schemas import UserOut
from app.domain.payment import schemas, service

router = APIRouter(
    prefix="/payments",
    tags=["Payments"],
    responses={**CreateAuthResponses(), 500: {'description': 'Internal Server Error'}},
)


@router.post("/subscribe", status_code=status.HTTP_201_CREATED)
def subscribe(
    requester: Annotated[User, Depends(get_requester)],
    db: Annotated[Session, Depends(get_db)],
    body: Annotated[schemas.SubscribeBody, Body()] = schemas.SubscribeBody()
) -> schemas.SubscribeResponse:
    payment, user = service.subscribe(db, requester, body.transaction_id, body.method)
    return schemas.SubscribeResponse(
        message="Premium subscription activated",
        payment=schemas.PaymentOut.model_validate(payment),
        user=UserOut.model_validate(user)
    )

@router.get("/my")
def list_my_payments(
    requester: Annotated[User, Depends(get_requester)],
    db: Annotated[Session, Depends(get_db)]
) -> schemas.PaymentListResponse:
    payments = service.get_payments(db, email=requester.email)
    return schemas.PaymentListResponse(payments=[schemas.PaymentOut.model_validate(p) for p in payments])
