import copy
import os
import tempfile

# Configure the app before anything under clinic/ reads the environment
_TMP_DIR = tempfile.mkdtemp(prefix="clinic-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP_DIR}/app.db")
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret")
os.environ.setdefault("NOTIFICATION_BACKEND", "inline")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

from collections.abc import Callable, Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from clinic.database import Base, build_engine, get_db  # noqa: E402
from clinic.main import app  # noqa: E402
from clinic.models import Appointment, AppointmentStatus, Doctor, User, UserRole  # noqa: E402
from clinic.security_utils import create_access_token, hash_password  # noqa: E402
from clinic.services.notification_service import AppointmentNotification, get_notifier  # noqa: E402

DEFAULT_CALENDAR = {"2025-01-10": {"morning": ["09:00", "09:30"]}}
PASSWORD = "s3cret-pass"


class FakeNotifier:
    """Records every dispatched notification; set ``error`` to make dispatch fail"""

    def __init__(self) -> None:
        self.sent: list[AppointmentNotification] = []
        self.error: Exception | None = None

    async def dispatch(self, notification: AppointmentNotification) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append(notification)


@pytest.fixture
def session_factory(tmp_path) -> Generator[sessionmaker]:
    engine = build_engine(f"sqlite:///{tmp_path}/clinic.db")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fake_notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def make_user(db: Session) -> Callable[..., User]:
    counter = {"n": 0}

    def _make(name: str = "Pat Patient", email: str | None = None, role: str = UserRole.USER.value) -> User:
        counter["n"] += 1
        user = User(
            name=name,
            email=email or f"patient{counter['n']}@example.com",
            password_hash=hash_password(PASSWORD),
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def patient(make_user) -> User:
    return make_user()


@pytest.fixture
def admin(make_user) -> User:
    return make_user(name="Sam Staff", email="staff@tothenew.com", role=UserRole.ADMIN.value)


@pytest.fixture
def make_doctor(db: Session) -> Callable[..., Doctor]:
    def _make(
        name: str = "Dr. Ada Grey",
        specialty: str = "Cardiology",
        experience: int = 8,
        gender: str = "female",
        rating: float = 0.0,
        available_times: dict | None = None,
        is_active: bool = True,
    ) -> Doctor:
        doctor = Doctor(
            name=name,
            specialty=specialty,
            experience=experience,
            degree="MD",
            location="Main Campus",
            gender=gender,
            rating=rating,
            available_times=available_times if available_times is not None else copy.deepcopy(DEFAULT_CALENDAR),
            is_active=is_active,
        )
        db.add(doctor)
        db.commit()
        db.refresh(doctor)
        return doctor

    return _make


@pytest.fixture
def doctor(make_doctor) -> Doctor:
    return make_doctor()


@pytest.fixture
def make_appointment(db: Session) -> Callable[..., Appointment]:
    def _make(
        doctor: Doctor,
        patient: User,
        appointment_time: str = "2025-01-10T09:00",
        status: str = AppointmentStatus.PENDING.value,
    ) -> Appointment:
        appointment = Appointment(
            doctor_id=doctor.id,
            patient_id=patient.id,
            appointment_time=appointment_time,
            location="Main Campus",
            consultation_type="in-person",
            status=status,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    def _headers(user: User) -> dict[str, str]:
        token = create_access_token(user.id, user.name, user.email, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def client(session_factory: sessionmaker, fake_notifier: FakeNotifier) -> Generator[TestClient]:
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_notifier] = lambda: fake_notifier
    yield TestClient(app)
    app.dependency_overrides.clear()
