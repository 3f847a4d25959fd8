# backend/tests/conftest.py
"""
Shared fixtures for the booking backend tests.

Every test gets its own in-memory SQLite database with the schema created
and roles/permissions seeded, so tests never see each other's rows.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
import os
from typing import Callable, Optional
from unittest.mock import Mock

# Must be set before service_booking is imported
os.environ.setdefault("IS_TESTING", "true")
os.environ.setdefault("ENVIRONMENT", "test")

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session, sessionmaker
import ulid

from service_booking.api.dependencies.database import get_db
from service_booking.api.dependencies.services import get_booking_service
from service_booking.core.enums import RoleName
from service_booking.database import Base, build_engine
from service_booking.init_db import seed_roles_and_permissions
from service_booking.main import app
from service_booking.models.booking import Booking
from service_booking.models.rbac import Role
from service_booking.models.service_catalog import ProviderService, Service
from service_booking.models.user import User
from service_booking.principal import ActorPrincipal
from service_booking.services.booking_authorization import BookingAuthorization
from service_booking.services.booking_service import BookingService
from service_booking.services.conflict_checker import ConflictChecker
from service_booking.services.permission_service import PermissionService

FIXED_NOW = datetime(2030, 1, 15, 9, 0, tzinfo=timezone.utc)
LEAD_TIME_HOURS = 24
CANCELLATION_WINDOW_HOURS = 12


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture
def engine():
    test_engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    """Fresh session on a freshly seeded database."""
    TestSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )
    session = TestSessionLocal()
    seed_roles_and_permissions(session, with_admin=False)

    yield session

    session.rollback()
    session.close()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def user_factory(db: Session) -> Callable[..., User]:
    def _create(*roles: RoleName, first_name: str = "Test", is_active: bool = True) -> User:
        user = User(
            email=f"{first_name.lower()}.{ulid.ULID()}@example.com",
            first_name=first_name,
            last_name="User",
            is_active=is_active,
        )
        db.add(user)
        db.flush()
        for role_name in roles:
            user.roles.append(db.query(Role).filter_by(name=role_name.value).one())
        db.commit()
        return user

    return _create


@pytest.fixture
def customer(user_factory) -> User:
    return user_factory(RoleName.CUSTOMER, first_name="Carla")


@pytest.fixture
def other_customer(user_factory) -> User:
    return user_factory(RoleName.CUSTOMER, first_name="Omar")


@pytest.fixture
def provider(user_factory) -> User:
    return user_factory(RoleName.PROVIDER, first_name="Paula")


@pytest.fixture
def other_provider(user_factory) -> User:
    return user_factory(RoleName.PROVIDER, first_name="Pedro")


@pytest.fixture
def administrator(user_factory) -> User:
    return user_factory(RoleName.ADMINISTRATOR, first_name="Ada")


@pytest.fixture
def service_factory(db: Session) -> Callable[..., Service]:
    def _create(
        price: str = "50.00",
        offered_by: Optional[User] = None,
        is_active: bool = True,
        name: str = "Haircut",
    ) -> Service:
        service = Service(name=name, price=Decimal(price), is_active=is_active)
        db.add(service)
        db.flush()
        if offered_by is not None:
            db.add(ProviderService(provider_id=offered_by.id, service_id=service.id))
        db.commit()
        return service

    return _create


@pytest.fixture
def offered_service(service_factory, provider) -> Service:
    """A 50.00 service offered by ``provider``."""
    return service_factory(price="50.00", offered_by=provider)


@pytest.fixture
def actor_for(db: Session) -> Callable[[User], ActorPrincipal]:
    permission_service = PermissionService(db)

    def _resolve(user: User) -> ActorPrincipal:
        actor = permission_service.get_actor(user.id)
        assert actor is not None
        return actor

    return _resolve


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(FIXED_NOW)


@pytest.fixture
def refund_gateway() -> Mock:
    return Mock(spec=["refund"])


@pytest.fixture
def booking_service(db: Session, clock: FrozenClock, refund_gateway: Mock) -> BookingService:
    return BookingService(
        db,
        conflict_checker=ConflictChecker(
            db,
            lead_time_hours=LEAD_TIME_HOURS,
            cancellation_window_hours=CANCELLATION_WINDOW_HOURS,
        ),
        authorization=BookingAuthorization(provider_global_override=True),
        refund_gateway=refund_gateway,
        clock=clock,
        refund_enabled=True,
    )


@pytest.fixture
def book(booking_service, customer, provider, offered_service) -> Callable[..., Booking]:
    """Book ``offered_service`` with ``provider`` for ``customer`` ``hours`` from now."""

    def _book(hours: float = 48, customer_user: Optional[User] = None) -> Booking:
        who = customer_user or customer
        return booking_service.book(
            who.id,
            provider.id,
            offered_service.id,
            FIXED_NOW + timedelta(hours=hours),
        )

    return _book


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
def client(db: Session, booking_service: BookingService):
    """Create a test client wired to the test database and booking service."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_booking_service] = lambda: booking_service

    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()
