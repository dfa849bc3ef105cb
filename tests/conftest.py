import os

# point the app at a throwaway in-memory database before it is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import date, datetime, time

import pytest
from fastapi.testclient import TestClient

from auth import create_access_token, hash_password
from bus_models import Bus
from database import Base, SessionLocal, engine, get_db
from driver_assignment import VehicleDriverAssignment
from main import app
from trip_models import FuelEntry, OdometerReading
from user_models import User

PASSWORD = "secret123"
_password_hash = None


def _hashed_password():
    # bcrypt is slow, hash the shared test password once
    global _password_hash
    if _password_hash is None:
        _password_hash = hash_password(PASSWORD)
    return _password_hash


@pytest.fixture(scope="function")
def db():
    """Fresh schema per test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def client(db):
    """Test client whose requests share the test session"""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_header(user: User) -> dict:
    token = create_access_token({"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_header


@pytest.fixture
def make_user(db):
    def _make_user(role="driver", email=None, name=None, **fields):
        user = User(
            name=name or f"Test {role.title()}",
            role=role,
            email=email or f"{role}{db.query(User).count() + 1}@fleetmadox.lk",
            password=_hashed_password(),
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_bus(db):
    def _make_bus(no_plate=None, **fields):
        fields.setdefault("brand", "Ashok Leyland")
        fields.setdefault("model", "Viking")
        bus = Bus(no_plate=no_plate or f"NB-{db.query(Bus).count() + 1000}", **fields)
        db.add(bus)
        db.commit()
        db.refresh(bus)
        return bus

    return _make_bus


@pytest.fixture
def make_assignment(db):
    def _make_assignment(bus, driver, start=None, end=None, route="Colombo - Kandy"):
        assignment = VehicleDriverAssignment(
            vehicle_id=bus.id,
            employee_id=driver.id,
            start_date=start or datetime.combine(date.today(), time.min),
            end_date=end,
            route=route,
        )
        db.add(assignment)
        db.commit()
        db.refresh(assignment)
        return assignment

    return _make_assignment


@pytest.fixture
def add_reading(db):
    def _add_reading(assignment, reading_type, km, reading_date=None):
        reading = OdometerReading(
            assignment_id=assignment.id,
            driver_id=assignment.employee_id,
            bus_id=assignment.vehicle_id,
            reading_type=reading_type,
            reading_km=km,
            reading_date=reading_date or date.today(),
        )
        db.add(reading)
        db.commit()
        return reading

    return _add_reading


@pytest.fixture
def add_fuel(db):
    def _add_fuel(assignment, odometer, liters, price=300.0, fuel_date=None):
        entry = FuelEntry(
            assignment_id=assignment.id,
            driver_id=assignment.employee_id,
            bus_id=assignment.vehicle_id,
            odometer_at_fueling=odometer,
            liters_filled=liters,
            price_per_liter=price,
            total_cost=liters * price,
            fuel_station="Ceypetco Maharagama",
            fuel_date=fuel_date or date.today(),
        )
        db.add(entry)
        db.commit()
        return entry

    return _add_fuel


@pytest.fixture
def admin(make_user):
    return make_user("admin", email="admin@fleetmadox.lk", name="Fleet Admin")


@pytest.fixture
def accountant(make_user):
    return make_user("accountant", email="accounts@fleetmadox.lk", name="Nimal Perera")


@pytest.fixture
def driver(make_user):
    return make_user("driver", email="driver@fleetmadox.lk", name="Kamal Silva", employe_number="EMP-DRV-001")


@pytest.fixture
def admin_headers(admin):
    return auth_header(admin)


@pytest.fixture
def accountant_headers(accountant):
    return auth_header(accountant)


@pytest.fixture
def driver_headers(driver):
    return auth_header(driver)
