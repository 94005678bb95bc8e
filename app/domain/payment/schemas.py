from datetime import datetime
from typing import Optional
from app.domain.schema_base import CamelModel
from app.domain.user.schemas import UserOut


class PaymentOut(CamelModel):
    id: int
    email: str
    amount: int
    method: str
    transaction_id: str
    month_key: str
    created_at: datetime

class SubscribeBody(CamelModel):
    transaction_id: Optional[str] = None
    method: Optional[str] = None

class SubscribeResponse(CamelModel):
    success: bool = True
    message: str
    payment: PaymentOut
    user: UserOut

class PaymentListResponse(CamelModel):
    success: bool = True
    payments: list[PaymentOut]
