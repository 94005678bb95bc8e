from app.tests.utils import create_test_user
from app.domain.user.models import User, Role
from app.internal.identity import LocalIdentityProvider

from fastapi.testclient import TestClient
from fastapi import status

from sqlalchemy.orm import Session
import datetime


def test_register_creates_citizen(client: TestClient, session: Session):
    res = client.post('/users', json={'email': 'New.User@Example.com', 'photoURL': 'https://img/1.png'})

    assert res.status_code == status.HTTP_201_CREATED
    body = res.json()
    assert body['success'] is True
    assert body['user']['email'] == 'new.user@example.com'
    assert body['user']['name'] == 'new.user'
    assert body['user']['role'] == 'citizen'
    assert body['user']['isPremium'] is False
    assert body['user']['issueCount'] == 0
    assert body['user']['photoURL'] == 'https://img/1.png'

def test_register_twice_merges_without_blanking(client: TestClient, session: Session):
    client.post('/users', json={'email': 'twice@example.com', 'name': 'First', 'photoURL': 'https://img/a.png'})

    res = client.post('/users', json={'email': 'twice@example.com', 'name': '', 'photoURL': 'https://img/b.png'})

    assert res.status_code == status.HTTP_200_OK
    user = res.json()['user']
    assert user['name'] == 'First'
    assert user['photoURL'] == 'https://img/b.png'
    assert session.query(User).filter(User.email == 'twice@example.com').count() == 1

def test_register_requires_email(client: TestClient):
    res = client.post('/users', json={'name': 'Nobody'})

    assert res.status_code == status.HTTP_400_BAD_REQUEST
    assert res.json()['success'] is False

def test_missing_token_is_unauthenticated(client: TestClient):
    res = client.get('/users/profile/citizen@example.com')

    assert res.status_code == status.HTTP_401_UNAUTHORIZED
    assert res.json() == {'success': False, 'message': 'Unauthorized (no token)'}

def test_invalid_token_is_unauthenticated(client: TestClient):
    res = client.get('/users/profile/citizen@example.com', headers={'Authorization': 'Bearer not-a-token'})

    assert res.status_code == status.HTTP_401_UNAUTHORIZED

def test_expired_token_is_unauthenticated(client: TestClient, citizen: User, identity_provider: LocalIdentityProvider):
    token = identity_provider.issue_token(citizen.email, expires_in=datetime.timedelta(seconds=-5))

    res = client.get(f'/users/profile/{citizen.email}', headers={'Authorization': f'Bearer {token}'})

    assert res.status_code == status.HTTP_401_UNAUTHORIZED
    assert res.json()['message'] == 'Unauthorized (token expired)'

def test_get_own_profile(authorized_client: TestClient, citizen: User):
    res = authorized_client.get(f'/users/profile/{citizen.email.upper()}')

    assert res.status_code == status.HTTP_200_OK
    assert res.json()['user']['email'] == citizen.email

def test_get_other_profile_is_forbidden(authorized_client: TestClient, other_citizen: User):
    res = authorized_client.get(f'/users/profile/{other_citizen.email}')

    assert res.status_code == status.HTTP_403_FORBIDDEN

def test_admin_reads_any_profile(admin_client: TestClient, other_citizen: User):
    res = admin_client.get(f'/users/profile/{other_citizen.email}')

    assert res.status_code == status.HTTP_200_OK
    assert res.json()['user']['name'] == 'Bob Citizen'

def test_admin_reads_unknown_profile(admin_client: TestClient):
    res = admin_client.get('/users/profile/ghost@example.com')

    assert res.status_code == status.HTTP_404_NOT_FOUND

def test_update_profile(authorized_client: TestClient, citizen: User, session: Session):
    res = authorized_client.patch('/users/profile', json={'name': 'Alice C.', 'phone': '+8801700000000'})

    assert res.status_code == status.HTTP_200_OK
    session.refresh(citizen)
    assert citizen.name == 'Alice C.'
    assert citizen.phone == '+8801700000000'
    assert citizen.photo_url == ''

def test_update_profile_rejects_long_phone(authorized_client: TestClient, citizen: User, session: Session):
    res = authorized_client.patch('/users/profile', json={'phone': '1' * 32})

    assert res.status_code == status.HTTP_400_BAD_REQUEST
    session.refresh(citizen)
    assert citizen.phone == ''

def test_first_contact_creates_requester(client: TestClient, auth, session: Session):
    res = client.patch('/users/profile', json={'name': 'Fresh'}, headers=auth('fresh@example.com'))

    assert res.status_code == status.HTTP_200_OK
    user = session.query(User).filter(User.email == 'fresh@example.com').one()
    assert user.name == 'Fresh'
    assert user.role == Role.CITIZEN

def test_list_users_requires_admin(authorized_client: TestClient):
    res = authorized_client.get('/users')

    assert res.status_code == status.HTTP_403_FORBIDDEN
    assert res.json()['message'] == 'Admin access required'

def test_list_users(admin_client: TestClient, citizen: User, other_citizen: User):
    res = admin_client.get('/users')

    assert res.status_code == status.HTTP_200_OK
    body = res.json()
    assert body['count'] == 3
    assert {user['email'] for user in body['users']} == {'admin@example.com', citizen.email, other_citizen.email}

def test_toggle_block(admin_client: TestClient, citizen: User, session: Session):
    res = admin_client.patch(f'/users/{citizen.email}/toggle-block')

    assert res.status_code == status.HTTP_200_OK
    assert res.json()['isBlocked'] is True

    res = admin_client.patch(f'/users/{citizen.email}/toggle-block')

    assert res.json()['isBlocked'] is False
    session.refresh(citizen)
    assert citizen.is_blocked is False

def test_toggle_block_rejects_admin_target(admin_client: TestClient, session: Session):
    other_admin = create_test_user(session, 'root@example.com', role=Role.ADMIN)

    res = admin_client.patch(f'/users/{other_admin.email}/toggle-block')

    assert res.status_code == status.HTTP_400_BAD_REQUEST
    assert res.json()['message'] == 'Cannot block admin users'

def test_toggle_block_unknown_user(admin_client: TestClient):
    res = admin_client.patch('/users/ghost@example.com/toggle-block')

    assert res.status_code == status.HTTP_404_NOT_FOUND
