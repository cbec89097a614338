import pytest

from sitecms import create_app, db
from sitecms.models import Permission, Role, User
from sitecms.security import hash_password

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"


@pytest.fixture(scope="function")
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture(scope="function")
def app(upload_dir):
    """Create an application bound to a fresh in-memory database."""
    app = create_app({
        "DATABASE_URL": "sqlite://",
        "TESTING": True,
        "JWT_SECRET": "test-secret",
        "UPLOAD_FOLDER": str(upload_dir),
        "ADMIN_EMAIL": ADMIN_EMAIL,
        "ADMIN_PASSWORD": ADMIN_PASSWORD,
        "LOG_LEVEL": "WARNING",
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()


def login(client, email, password):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def admin_headers(client):
    response = login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    assert response.status_code == 200
    return bearer(response.get_json()["token"])


@pytest.fixture(scope="function")
def make_user(app):
    """Factory for users holding a role with exactly the given permissions."""

    def _make(email, password="secret123", role="user", permissions=None, is_active=True):
        with app.app_context():
            role_obj = Role.query.filter_by(name=role).first()
            if role_obj is None:
                role_obj = Role(name=role)
                role_obj.permissions = Permission.query.filter(Permission.name.in_(permissions or [])).all()
                db.session.add(role_obj)
                db.session.flush()
            user = User(
                email=email,
                username=email.split("@")[0],
                password_hash=hash_password(password),
                is_active=is_active,
                role_id=role_obj.id,
            )
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make


@pytest.fixture(scope="function")
def headers_for(client, make_user):
    """Log in a freshly created user and return its auth headers."""

    def _headers(email, role, permissions=None):
        make_user(email, role=role, permissions=permissions)
        response = login(client, email, "secret123")
        assert response.status_code == 200
        return bearer(response.get_json()["token"])

    return _headers
