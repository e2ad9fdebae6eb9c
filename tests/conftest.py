import os
import tempfile

# Must be set before anything imports database.py / main.py
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "trader-ledger-test-logs"))

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
import models  # noqa: F401
from models.admins import Admin
from models.products import Product
from schemas.traders import TraderCreate
from services import traders as trader_service
from utils.auth_utils import require_super_admin


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
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def admin(db):
    db_admin = Admin(first_name="Asha", last_name="Rao", email="asha@example.com", role="super_admin")
    db.add(db_admin)
    db.commit()
    db.refresh(db_admin)
    return db_admin


@pytest.fixture()
def product(db):
    db_product = Product(product_name="Steel Widget")
    db.add(db_product)
    db.commit()
    db.refresh(db_product)
    return db_product


@pytest.fixture()
def trader(db):
    return trader_service.create_trader(
        db,
        TraderCreate(company_name="Acme", contact_person="Dana", phone="050-1234567", email="sales@acme.example.com"),
    )


@pytest.fixture()
def app(session_factory):
    from main import app as fastapi_app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def client(app, admin):
    admin_id = admin.id
    app.dependency_overrides[require_super_admin] = lambda: {"admin_id": admin_id, "role": "super_admin"}
    with TestClient(app) as test_client:
        yield test_client


def money(value) -> Decimal:
    """Normalise a stored money value for comparisons."""
    return Decimal(str(value)).quantize(Decimal("0.01"))
