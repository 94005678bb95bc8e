from sqladmin import ModelView
from .models import Payment

class PaymentView(ModelView, model=Payment):
    column_list = [
        Payment.id,
        Payment.email,
        Payment.amount,
        Payment.method,
        Payment.transaction_id,
        Payment.month_key,
        Payment.created_at,
    ]
    column_searchable_list = [Payment.email, Payment.transaction_id]
    can_create = False
    can_edit = False
    can_delete = False
