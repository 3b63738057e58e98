"""Unit tests for the key-value stores and repositories on top of them"""

import threading

import pytest
from datetime import date
from motorista_real.domain.models import (
    FinancedProfile,
    Insurance,
    RentalPeriod,
    RentedProfile,
    TransactionCategory,
    User,
)
from motorista_real.infrastructure.database.kv_store import InMemoryStore
from motorista_real.infrastructure.database.repositories import (
    AppStateRepository,
    TransactionRepository,
    UserRepository,
    VehicleRepository,
)


@pytest.fixture(params=["memory", "sql"])
def any_store(request, store, sql_store):
    return store if request.param == "memory" else sql_store


def test_get_set_delete(any_store):
    assert any_store.get("k") is None

    any_store.set("k", "v1")
    any_store.set("k", "v2")
    assert any_store.get("k") == "v2"

    any_store.delete("k")
    any_store.delete("k")
    assert any_store.get("k") is None


def test_update_applies_function_to_current_blob(any_store):
    any_store.update("counter", lambda blob: str(int(blob or "0") + 1))
    any_store.update("counter", lambda blob: str(int(blob or "0") + 1))

    assert any_store.get("counter") == "2"


def test_transaction_rolls_back_on_error(any_store):
    any_store.set("a", "1")

    with pytest.raises(RuntimeError):
        with any_store.transaction():
            any_store.set("a", "2")
            any_store.set("b", "x")
            raise RuntimeError("boom")

    assert any_store.get("a") == "1"
    assert any_store.get("b") is None


def test_nested_transactions_commit_once(any_store):
    with any_store.transaction():
        any_store.set("a", "1")
        with any_store.transaction():
            any_store.set("b", "2")

    assert any_store.get("a") == "1"
    assert any_store.get("b") == "2"


def test_concurrent_updates_are_not_lost():
    store = InMemoryStore()

    def bump():
        for _ in range(200):
            store.update("n", lambda blob: str(int(blob or "0") + 1))

    threads = [threading.Thread(target=bump) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.get("n") == "800"


def test_repositories_round_trip(any_store, vehicle_factory, txn_factory):
    users = UserRepository(any_store)
    vehicles = VehicleRepository(any_store)
    transactions = TransactionRepository(any_store)

    user = User(uid="u1", email="joao@example.com", name="joao", daily_goal=250.0, is_pro=True)
    financed = vehicle_factory(
        profile=FinancedProfile(installment_value=1500.0, total_installments=48, installments_paid=3, due_day=15),
        insurance=Insurance(value=1200.0, installments=12, due_day=5, expiry_date=date(2025, 1, 1)),
        custom_daily_goal=300.0,
    )
    rented = vehicle_factory(
        vehicle_id="v2",
        plate="REN7T00",
        is_active=False,
        profile=RentedProfile(rental_value=700.0, period=RentalPeriod.WEEKLY, due_reference=0),
    )
    txn = txn_factory(TransactionCategory.UBER, 120.0, date(2024, 3, 5), km_input=1000.0)

    users.save(user)
    vehicles.add(financed)
    vehicles.add(rented)
    transactions.add_many([txn])

    assert users.get() == user
    assert vehicles.list_for_user("u1") == [financed, rented]
    assert transactions.list_all() == [txn]


def test_vehicle_repository_set_active(store, vehicle_factory):
    vehicles = VehicleRepository(store)
    vehicles.add(vehicle_factory())
    vehicles.add(vehicle_factory(vehicle_id="v2", plate="XYZ9K88", is_active=False))
    vehicles.add(vehicle_factory(vehicle_id="v3", user_id="u2", plate="OTH3R00"))

    vehicles.set_active("u1", "v2")

    assert vehicles.get_active("u1").vehicle_id == "v2"
    assert vehicles.get_active("u2").vehicle_id == "v3"


def test_transaction_repository_prepends_and_removes(store, txn_factory):
    transactions = TransactionRepository(store)
    older = txn_factory(TransactionCategory.UBER, 10.0, date(2024, 3, 1), txn_id="old")
    newer = txn_factory(TransactionCategory.UBER, 20.0, date(2024, 3, 2), txn_id="new")

    transactions.add_many([older])
    transactions.add_many([newer])
    assert [t.transaction_id for t in transactions.list_all()] == ["new", "old"]

    transactions.remove(["old"])
    assert [t.transaction_id for t in transactions.list_all()] == ["new"]


def test_app_state_last_seen_version(any_store):
    app_state = AppStateRepository(any_store)
    assert app_state.get_last_seen_version() is None

    app_state.set_last_seen_version("1.2.0")
    assert app_state.get_last_seen_version() == "1.2.0"
