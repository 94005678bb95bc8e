from app.tests.utils import create_test_user, create_test_issue, assign_test_issue
from app.domain.user.models import User, Role
from app.domain.issue.models import Issue, IssueStatus, Priority

from fastapi.testclient import TestClient
from fastapi import status

from sqlalchemy.orm import Session
import datetime
import pytest


@pytest.fixture
def staff_client(client: TestClient, staff_user: User, auth) -> TestClient:
    client.headers.update(auth(staff_user.email))
    return client

@pytest.fixture
def assigned_issue(session: Session, citizen: User, staff_user: User) -> Issue:
    return assign_test_issue(session, create_test_issue(session, citizen), staff_user)


def test_staff_lists_only_assigned(staff_client: TestClient, citizen: User, staff_user: User, session: Session):
    other_staff = create_test_user(session, 'other.staff@example.com', role=Role.STAFF)
    base = datetime.datetime(2026, 5, 1)
    assign_test_issue(session, create_test_issue(session, citizen, title='mine normal', created_at=base + datetime.timedelta(days=1)), staff_user)
    assign_test_issue(session, create_test_issue(session, citizen, title='mine high', priority=Priority.HIGH, created_at=base), staff_user)
    assign_test_issue(session, create_test_issue(session, citizen, title='theirs'), other_staff)
    create_test_issue(session, citizen, title='unassigned')

    body = staff_client.get('/staff/issues').json()

    assert body['limit'] == 10
    assert [issue['title'] for issue in body['issues']] == ['mine high', 'mine normal']

    body = staff_client.get('/staff/issues', params={'priority': 'normal'}).json()
    assert [issue['title'] for issue in body['issues']] == ['mine normal']

def test_staff_status_filter_accepts_synonyms(staff_client: TestClient, citizen: User, staff_user: User, session: Session):
    assign_test_issue(session, create_test_issue(session, citizen, title='working on it'), staff_user, IssueStatus.IN_PROGRESS)
    assign_test_issue(session, create_test_issue(session, citizen, title='waiting'), staff_user)

    body = staff_client.get('/staff/issues', params={'status': 'working'}).json()

    assert [issue['title'] for issue in body['issues']] == ['working on it']

def test_staff_issues_requires_staff(authorized_client: TestClient):
    res = authorized_client.get('/staff/issues')

    assert res.status_code == status.HTTP_403_FORBIDDEN
    assert res.json()['message'] == 'Staff access required'

def test_start_and_resolve(staff_client: TestClient, assigned_issue: Issue):
    res = staff_client.patch(f'/staff/issues/{assigned_issue.id}/status', json={'status': 'in-progress'})

    assert res.status_code == status.HTTP_200_OK
    body = res.json()
    assert body['normalizedStatus'] == 'in-progress'
    assert body['receivedStatus'] == 'in-progress'
    assert body['issue']['timeline'][-1]['message'] == 'Work started on the issue'
    assert body['issue']['timeline'][-1]['updatedBy'] == 'Staff'

    res = staff_client.patch(f'/staff/issues/{assigned_issue.id}/status', json={'status': 'resolved'})

    assert res.status_code == status.HTTP_200_OK
    timeline = res.json()['issue']['timeline']
    assert res.json()['issue']['status'] == 'resolved'
    assert [entry['status'] for entry in timeline] == ['pending', 'in-progress', 'resolved']
    assert timeline[-1]['message'] == 'Issue resolved by staff'

def test_legacy_synonyms_are_normalized(staff_client: TestClient, assigned_issue: Issue, session: Session):
    res = staff_client.patch(f'/staff/issues/{assigned_issue.id}/status', json={'status': 'Working'})

    assert res.json()['normalizedStatus'] == 'in-progress'
    assert res.json()['receivedStatus'] == 'Working'

    res = staff_client.patch(f'/staff/issues/{assigned_issue.id}/status', json={'status': 'closed'})

    assert res.json()['normalizedStatus'] == 'resolved'
    session.refresh(assigned_issue)
    assert assigned_issue.status == IssueStatus.RESOLVED

@pytest.mark.parametrize('value', ['rejected', 'pending', 'done'])
def test_invalid_status_value(staff_client: TestClient, assigned_issue: Issue, value: str):
    res = staff_client.patch(f'/staff/issues/{assigned_issue.id}/status', json={'status': value})

    assert res.status_code == status.HTTP_400_BAD_REQUEST
    assert res.json()['message'] == 'Invalid status'

def test_missing_status(staff_client: TestClient, assigned_issue: Issue):
    res = staff_client.patch(f'/staff/issues/{assigned_issue.id}/status', json={})

    assert res.status_code == status.HTTP_400_BAD_REQUEST
    assert res.json()['message'] == 'Status is required'

def test_cannot_resolve_pending(staff_client: TestClient, assigned_issue: Issue, session: Session):
    res = staff_client.patch(f'/staff/issues/{assigned_issue.id}/status', json={'status': 'resolved'})

    assert res.status_code == status.HTTP_400_BAD_REQUEST
    session.refresh(assigned_issue)
    assert assigned_issue.status == IssueStatus.PENDING
    assert len(assigned_issue.timeline) == 1

def test_cannot_touch_rejected(staff_client: TestClient, citizen: User, staff_user: User, session: Session):
    issue = assign_test_issue(session, create_test_issue(session, citizen), staff_user, IssueStatus.REJECTED)

    res = staff_client.patch(f'/staff/issues/{issue.id}/status', json={'status': 'in-progress'})

    assert res.status_code == status.HTTP_400_BAD_REQUEST

def test_non_assignee_is_forbidden(client: TestClient, auth, assigned_issue: Issue, session: Session):
    other_staff = create_test_user(session, 'other.staff@example.com', role=Role.STAFF)

    res = client.patch(f'/staff/issues/{assigned_issue.id}/status', json={'status': 'in-progress'}, headers=auth(other_staff.email))

    assert res.status_code == status.HTTP_403_FORBIDDEN
    assert res.json()['message'] == 'Issue is not assigned to you'

def test_unassigned_issue_is_forbidden(staff_client: TestClient, citizen: User, session: Session):
    issue = create_test_issue(session, citizen)

    res = staff_client.patch(f'/staff/issues/{issue.id}/status', json={'status': 'in-progress'})

    assert res.status_code == status.HTTP_403_FORBIDDEN
