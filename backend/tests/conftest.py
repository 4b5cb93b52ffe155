import os

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from routesync import models  # noqa: F401  registers tables on Base
from routesync.db.database import Base, get_db
from routesync.services.records import RawShipmentRecord, ReferenceRoute, RouteSide


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db):
    from routesync.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def lucknow_ambala_route():
    return ReferenceRoute(
        id="R1",
        name="LUCKNOW/AMBALA(AML11)",
        side=RouteSide.UP,
        source="LUCKNOW",
        destination="AMBALA(AML11)",
    )


@pytest.fixture()
def lucknow_shipment():
    return RawShipmentRecord(
        vehicle_number="UP32AB1234",
        consigner_name="LUCKNOW-11",
        consignee_name="SAFEXPRESS AMBALA(AML11)",
        delay_time="01:15:00",
        eta="NA;15/06/2024 09:00:00",
        dispatch_date="14/06/2024 18:00:00",
        last_location_date="2024-06-15 07:30:00",
        last_location="Near Ambala",
        rps_number="RPS-1001",
    )
