"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from motorista_real.api.main import create_app
from motorista_real.api.dependencies import get_store
from motorista_real.domain.models import (
    FinancedProfile,
    OwnedProfile,
    RentalPeriod,
    RentedProfile,
    Transaction,
    TransactionCategory,
    TransactionOrigin,
    User,
    Vehicle,
    VehicleType,
)
from motorista_real.infrastructure.database.kv_store import InMemoryStore, SqlKeyValueStore
from motorista_real.infrastructure.database.session import build_engine, init_db
from motorista_real.services.accounts import AccountService


@pytest.fixture
def store() -> InMemoryStore:
    """Fresh in-memory key-value store"""
    return InMemoryStore()


@pytest.fixture
def sql_store(tmp_path) -> Generator[SqlKeyValueStore, None, None]:
    """Key-value store on a throwaway SQLite file"""
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(bind=engine)
    yield SqlKeyValueStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))
    engine.dispose()


@pytest.fixture
def user(store: InMemoryStore) -> User:
    """Logged-in driver with a R$ 200 daily goal"""
    return AccountService(store).login("joao@example.com")


@pytest.fixture
def client(store: InMemoryStore, user: User) -> TestClient:
    """Create FastAPI test client backed by the in-memory store"""
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    return TestClient(app)


def make_vehicle(profile=None, vehicle_type=VehicleType.CAR, **kwargs) -> Vehicle:
    """Vehicle with sensible defaults for projection tests"""
    fields = dict(
        vehicle_id="v1",
        user_id="u1",
        type=vehicle_type,
        brand="Fiat",
        model="Argo",
        plate="ABC1D23",
        profile=profile or OwnedProfile(),
        is_active=True,
    )
    fields.update(kwargs)
    return Vehicle(**fields)


def make_txn(
    category: TransactionCategory,
    amount: float,
    on_date: date,
    vehicle_id: str = "v1",
    txn_id: str | None = None,
    origin: TransactionOrigin = TransactionOrigin.MANUAL,
    km_input: float | None = None,
    timestamp: int = 0,
) -> Transaction:
    return Transaction(
        transaction_id=txn_id or f"t_{category.name}_{on_date.isoformat()}_{amount}_{timestamp}",
        user_id="u1",
        vehicle_id=vehicle_id,
        type=category.transaction_type,
        category=category,
        amount=amount,
        date=on_date,
        timestamp=timestamp,
        km_input=km_input,
        origin=origin,
    )


@pytest.fixture
def financed_profile() -> FinancedProfile:
    return FinancedProfile(installment_value=1500.0, total_installments=48, installments_paid=0, due_day=10)


@pytest.fixture
def weekly_rent_profile() -> RentedProfile:
    # Due on Mondays (0=Sunday)
    return RentedProfile(rental_value=700.0, period=RentalPeriod.WEEKLY, due_reference=1)


@pytest.fixture
def vehicle_factory():
    return make_vehicle


@pytest.fixture
def txn_factory():
    return make_txn
