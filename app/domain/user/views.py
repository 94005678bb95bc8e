from sqladmin import ModelView
from .models import User

class UserView(ModelView, model=User):
    column_list = [
        'id', 'email', 'name', 'phone', 'role', 'is_premium', 'is_blocked', 'issue_count', 'created_at'
    ]
    column_searchable_list = ['email', 'name']
    can_create = False
