import jwt

from backend.auth.dependencies import get_auth_service
from backend.main import app

REGISTRATION = {'name': 'Amit', 'email': 'a@x.com', 'password': 'pw123', 'role': 'user'}


def test_register_returns_201_without_sensitive_data(client) -> None:
    response = client.post('/api/auth/register', json=REGISTRATION)

    assert response.status_code == 201
    assert response.json() == {'message': 'User registered successfully'}


def test_register_duplicate_email_returns_400(client) -> None:
    client.post('/api/auth/register', json=REGISTRATION)

    response = client.post('/api/auth/register', json={**REGISTRATION, 'name': 'Amit2', 'role': 'admin'})

    assert response.status_code == 400
    assert response.json() == {'error': 'Email already exists'}


def test_register_missing_fields_returns_400(client) -> None:
    response = client.post('/api/auth/register', json={'email': 'a@x.com'})

    assert response.status_code == 400
    assert response.json() == {'error': 'Name, email, password, and role are required'}


def test_register_invalid_role_returns_400(client) -> None:
    response = client.post('/api/auth/register', json={**REGISTRATION, 'role': 'mayor'})

    assert response.status_code == 400
    assert response.json()['error'].startswith('Invalid role.')


def test_register_malformed_body_returns_400(client) -> None:
    response = client.post(
        '/api/auth/register',
        content='{not json',
        headers={'Content-Type': 'application/json'},
    )

    assert response.status_code == 400
    assert 'error' in response.json()


def test_login_returns_token_and_profile(client, token_settings) -> None:
    client.post('/api/auth/register', json={**REGISTRATION, 'role': 'emergency_responder'})

    response = client.post('/api/auth/login', json={'email': 'a@x.com', 'password': 'pw123'})
    body = response.json()
    payload = jwt.decode(body['token'], token_settings.secret_key, algorithms=[token_settings.algorithm])

    assert response.status_code == 200
    assert body['message'] == 'Login successful'
    assert body['email'] == 'a@x.com'
    assert body['name'] == 'Amit'
    assert body['role'] == 'emergency_responder'
    assert payload['id'] == body['id']


def test_login_with_bad_credentials_returns_401(client) -> None:
    client.post('/api/auth/register', json=REGISTRATION)

    wrong_password = client.post('/api/auth/login', json={'email': 'a@x.com', 'password': 'nope'})
    unknown_email = client.post('/api/auth/login', json={'email': 'b@x.com', 'password': 'pw123'})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {'error': 'Invalid email or password'}


def test_login_missing_fields_returns_400(client) -> None:
    response = client.post('/api/auth/login', json={'email': 'a@x.com'})

    assert response.status_code == 400
    assert response.json() == {'error': 'Email and password are required'}


def test_me_returns_claims_for_bearer_token(client) -> None:
    client.post('/api/auth/register', json=REGISTRATION)
    token = client.post('/api/auth/login', json={'email': 'a@x.com', 'password': 'pw123'}).json()['token']

    response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})

    assert response.status_code == 200
    assert response.json()['email'] == 'a@x.com'
    assert response.json()['role'] == 'user'


def test_me_without_token_returns_401(client) -> None:
    response = client.get('/api/auth/me')

    assert response.status_code == 401
    assert response.json() == {'error': 'Not authenticated'}


def test_me_with_invalid_token_returns_401(client) -> None:
    response = client.get('/api/auth/me', headers={'Authorization': 'Bearer garbage'})

    assert response.status_code == 401
    assert response.json() == {'error': 'Invalid or expired token'}


def test_unexpected_failure_returns_generic_500(client) -> None:
    class BrokenService:
        def register(self, *args):
            raise RuntimeError('connection string leaked here')

    app.dependency_overrides[get_auth_service] = lambda: BrokenService()

    response = client.post('/api/auth/register', json=REGISTRATION)

    assert response.status_code == 500
    assert response.json() == {'error': 'Server error'}


def test_root_reports_status(client) -> None:
    assert client.get('/').json() == {'status': 'Disaster Management API Running'}
