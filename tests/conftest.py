import json
import os

# La configuración se cachea al importar la app: fijar el entorno antes
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["AUTH_API_KEY"] = "test-api-key"

from datetime import datetime

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.core.admin_session import build_admin_session, get_admin_session
from app.db.base import Base
from app.db.session import build_engine, get_db
from app.main import app
from app.models.enrollment import Enrollment
from app.models.gym import Gym
from app.models.user import EnrollmentStatus, UserProfile, UserRole
from app.services.identity import IdentityServiceClient, get_identity_client


@pytest.fixture(scope="function")
def db_engine():
    """Base de datos en memoria nueva para cada test."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def gym(db):
    gym = Gym(
        id="gym-1",
        name="Iron Temple",
        monthly_fee=1000.0,
        timezone="Asia/Kolkata",
        is_active=True,
        admin_id="admin-1",
        created_at=datetime(2024, 1, 1),
    )
    db.add(gym)
    db.commit()
    return gym


@pytest.fixture
def other_gym(db):
    gym = Gym(
        id="gym-2",
        name="Muscle Barn",
        monthly_fee=800.0,
        is_active=True,
        admin_id="admin-2",
        created_at=datetime(2024, 2, 1),
    )
    db.add(gym)
    db.commit()
    return gym


@pytest.fixture
def gym_admin(db, gym):
    admin = UserProfile(
        uid="admin-1",
        email="admin@irontemple.com",
        display_name="Admin Iron",
        role=UserRole.GYM_ADMIN,
        gym_id=gym.id,
        created_at=datetime(2024, 1, 1),
    )
    db.add(admin)
    db.commit()
    return admin


@pytest.fixture
def super_admin(db):
    admin = UserProfile(
        uid="root-1",
        email="root@platform.com",
        display_name="Root",
        role=UserRole.SUPER_ADMIN,
        created_at=datetime(2024, 1, 1),
    )
    db.add(admin)
    db.commit()
    return admin


@pytest.fixture
def admin_session(db, gym_admin):
    return build_admin_session(db, gym_admin.uid)


@pytest.fixture
def super_session(db, super_admin):
    return build_admin_session(db, super_admin.uid)


@pytest.fixture
def make_member(db):
    """Factory de perfiles de miembro."""
    def _make(uid, gym_id="gym-1", status=EnrollmentStatus.PENDING, **kwargs):
        values = {
            "email": f"{uid}@mail.com",
            "display_name": uid.title(),
            "created_at": datetime(2024, 3, 1),
        }
        values.update(kwargs)
        member = UserProfile(uid=uid, role=UserRole.MEMBER, gym_id=gym_id, enrollment_status=status, **values)
        db.add(member)
        db.commit()
        return member
    return _make


@pytest.fixture
def make_enrollment(db):
    """Factory de solicitudes de inscripción."""
    counter = {"n": 0}

    def _make(user_id, gym_id="gym-1", status=EnrollmentStatus.PENDING, **kwargs):
        counter["n"] += 1
        values = {
            "id": f"enr-{counter['n']:03d}",
            "user_name": user_id.title(),
            "user_email": f"{user_id}@mail.com",
            "gym_name": "Iron Temple",
            "payment_method": "online",
            "transaction_id": f"TX{counter['n']:04d}",
            "amount": 1000.0,
            "created_at": datetime(2024, 3, 1, 10, 0),
        }
        values.update(kwargs)
        enrollment = Enrollment(user_id=user_id, gym_id=gym_id, status=status, **values)
        db.add(enrollment)
        db.commit()
        return enrollment
    return _make


def identity_handler(request: httpx.Request) -> httpx.Response:
    """Servicio de identidad falso: acepta cualquier alta y login de emails conocidos."""
    action = request.url.path.rsplit(":", 1)[-1]
    body = json.loads(request.content or b"{}")
    if action == "signInWithPassword":
        if body.get("password") != "secret123":
            return httpx.Response(400, json={"error": {"message": "INVALID_LOGIN_CREDENTIALS"}})
        uid = {"admin@irontemple.com": "admin-1", "root@platform.com": "root-1"}.get(body["email"], "member-x")
        return httpx.Response(200, json={
            "localId": uid, "email": body["email"], "idToken": f"token-{uid}",
            "refreshToken": "refresh", "expiresIn": "3600",
        })
    if action == "signUp":
        return httpx.Response(200, json={
            "localId": "new-admin", "email": body["email"], "idToken": "token-new-admin",
        })
    return httpx.Response(200, json={})


@pytest.fixture
def identity_client():
    return IdentityServiceClient(
        api_key="test-api-key",
        base_url="https://identity.test/v1",
        transport=httpx.MockTransport(identity_handler),
    )


@pytest.fixture(scope="function")
def client(db, identity_client):
    """
    Cliente de prueba con la sesión de base de datos y el servicio de identidad de los tests.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_client] = lambda: identity_client
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def login_as(db):
    """Sustituye la verificación del token por la sesión del uid indicado."""
    def _login(uid):
        app.dependency_overrides[get_admin_session] = lambda: build_admin_session(db, uid)
    return _login
