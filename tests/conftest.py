"""
Pytest configuration and shared fixtures.

Tests run against an in-memory SQLite database (created and dropped per test)
and fake notification channels, so no satellite or Redis is needed.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

from datetime import date, timedelta  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import BackgroundTasks  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.auth import create_access_token, hash_password  # noqa: E402
from app.database import Base, SessionLocal, engine  # noqa: E402
from app.domain.notifications.channels import NotificationChannels  # noqa: E402
from app.domain.notifications.scheduler import NotificationScheduler  # noqa: E402
from app.domain.permissions.capabilities import (  # noqa: E402
    APPOINTMENTS_FORM,
    HOLIDAYS_FORM,
    PERMISSIONS_FORM,
    Capability,
)
from app.main import app  # noqa: E402
from app.models import (  # noqa: E402
    AppointmentType,
    Branch,
    Form,
    Rol,
    RolFormPermission,
    User,
    UserAssignment,
    UserRol,
)

# Fixed calendar used by service-level tests
TODAY = date(2025, 3, 1)  # Saturday
MONDAY = date(2025, 3, 3)
SUNDAY = date(2025, 3, 2)
TUESDAY = date(2025, 3, 4)


def next_weekday(start: date, weekday: int) -> date:
    """First date strictly after `start` falling on `weekday` (Monday=0)"""
    days = (weekday - start.weekday()) % 7 or 7
    return start + timedelta(days=days)


# ============================================================================
# FAKE CHANNELS
# ============================================================================


class FakeSatellite:
    """Records every send; `result` or `error` decides the outcome"""

    def __init__(self, result: bool = True, error: Exception = None):
        self.result = result
        self.error = error
        self.calls = []
        self.is_started = True

    async def _record(self, kind, recipient, data):
        self.calls.append((kind, recipient, data))
        if self.error:
            raise self.error
        return self.result

    async def send_appointment_confirmation(self, recipient, data):
        return await self._record("confirmation", recipient, data)

    async def send_appointment_reminder(self, recipient, data):
        return await self._record("reminder", recipient, data)

    async def send_appointment_cancellation(self, recipient, data):
        return await self._record("cancellation", recipient, data)

    async def send_appointment_completed(self, recipient, data):
        return await self._record("completed", recipient, data)

    async def is_ready(self):
        return self.result

    async def start(self):
        self.is_started = True

    async def close(self):
        self.is_started = False


class FakeRealtime:
    def __init__(self):
        self.published = []

    async def publish_to_user(self, user_id, event, payload):
        self.published.append((user_id, event, payload))
        return True

    async def start(self):
        pass

    async def close(self):
        pass


@pytest.fixture
def fake_channels():
    return NotificationChannels(gmail=FakeSatellite(), whatsapp=FakeSatellite(), realtime=FakeRealtime())


@pytest.fixture
def background_tasks():
    return BackgroundTasks()


@pytest.fixture
def notifier(background_tasks, fake_channels):
    return NotificationScheduler(background_tasks, fake_channels, SessionLocal)


# ============================================================================
# DATABASE
# ============================================================================


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def branch(db_session):
    branch = Branch(name="Sede Centro", code="NEI-01", address="Cra 5 # 10-20", city="Neiva", is_main=True)
    db_session.add(branch)
    db_session.commit()
    db_session.refresh(branch)
    return branch


@pytest.fixture
def other_branch(db_session):
    branch = Branch(name="Sede Pitalito", code="PIT-01", address="Calle 4 # 2-10", city="Pitalito")
    db_session.add(branch)
    db_session.commit()
    db_session.refresh(branch)
    return branch


@pytest.fixture
def appointment_type(db_session):
    appointment_type = AppointmentType(name="Meter review", description="On-site meter inspection")
    db_session.add(appointment_type)
    db_session.commit()
    db_session.refresh(appointment_type)
    return appointment_type


def create_user(db_session, username: str, password: str = "s3cret-pass", is_active: bool = True) -> User:
    user = User(
        username=username,
        email=f"{username}@electrohuila.test",
        full_name=username.title(),
        password_hash=hash_password(password),
        is_active=is_active,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def grant(db_session, user: User, rol_code: str, grants: dict) -> Rol:
    """Give `user` a role holding {form_code: Capability}"""
    rol = Rol(code=rol_code, name=rol_code.title())
    db_session.add(rol)
    db_session.flush()
    for form_code, capability in grants.items():
        form = db_session.query(Form).filter(Form.code == form_code).first()
        if form is None:
            form = Form(code=form_code, name=form_code.title())
            db_session.add(form)
            db_session.flush()
        db_session.add(RolFormPermission(rol_id=rol.id, form_id=form.id, capabilities=capability.value))
    db_session.add(UserRol(user_id=user.id, rol_id=rol.id))
    db_session.commit()
    return rol


@pytest.fixture
def staff_user(db_session, appointment_type):
    user = create_user(db_session, "agent")
    grant(
        db_session,
        user,
        "ADMIN",
        {
            APPOINTMENTS_FORM: Capability.all(),
            HOLIDAYS_FORM: Capability.all(),
            PERMISSIONS_FORM: Capability.all(),
        },
    )
    db_session.add(UserAssignment(user_id=user.id, appointment_type_id=appointment_type.id))
    db_session.commit()
    return user


@pytest.fixture
def auth_headers(staff_user):
    return {"Authorization": f"Bearer {create_access_token(staff_user)}"}


# ============================================================================
# HTTP CLIENT
# ============================================================================


@pytest_asyncio.fixture
async def client(db_session, fake_channels):
    """Async HTTP client bound to the app (lifespan is not run)"""
    app.state.channels = fake_channels
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.state.channels = None


def booking_payload(**overrides) -> dict:
    payload = {
        "documentType": "CC",
        "documentNumber": "1075234567",
        "fullName": "Laura Gómez",
        "mobile": "3001234567",
        "email": "laura@example.com",
        "address": "Calle 8 # 12-34",
        "branchId": 1,
        "appointmentTypeId": 1,
        "appointmentDate": MONDAY.isoformat(),
        "appointmentTime": "09:30",
        "observations": "Meter making noise",
    }
    payload.update(overrides)
    return payload
