from sqladmin import ModelView
from .models import Issue, TimelineEntry

class IssueView(ModelView, model=Issue):
    column_list = [
        Issue.id,
        Issue.title,
        Issue.category,
        Issue.status,
        Issue.priority,
        Issue.reported_by,
        Issue.assigned_email,
        Issue.upvote_count,
        Issue.created_at,
    ]
    column_searchable_list = [Issue.title, Issue.reported_by]
    can_create = False
    can_edit = False

class TimelineEntryView(ModelView, model=TimelineEntry):
    column_list = [
        TimelineEntry.id,
        TimelineEntry.issue_id,
        TimelineEntry.status,
        TimelineEntry.message,
        TimelineEntry.updated_by,
        TimelineEntry.date,
    ]
    can_create = False
    can_edit = False
    can_delete = False
