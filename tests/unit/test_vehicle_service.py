"""Unit tests for vehicle registration, active switching and amortization"""

import pytest
from datetime import date
from motorista_real.domain.exceptions import InvariantViolationError, NotFoundError, ValidationError
from motorista_real.domain.models import (
    FinancedProfile,
    Insurance,
    OwnedProfile,
    TransactionCategory,
    VehicleType,
)
from motorista_real.infrastructure.database.repositories import TransactionRepository
from motorista_real.services.vehicles import VehicleService

AS_OF = date(2024, 3, 14)


def register(service: VehicleService, plate: str, profile=None, user_id: str = "u1", **kwargs):
    return service.register_vehicle(
        user_id,
        type=VehicleType.CAR,
        brand="Fiat",
        model="Argo",
        plate=plate,
        profile=profile or OwnedProfile(vehicle_value=50000.0),
        as_of=AS_OF,
        **kwargs,
    )


def test_first_vehicle_becomes_active(store):
    service = VehicleService(store)

    first = register(service, "ABC1D23")
    second = register(service, "XYZ9K88")

    assert first.is_active is True
    assert second.is_active is False
    assert service.active_vehicle("u1").vehicle_id == first.vehicle_id


def test_plate_is_normalized(store):
    vehicle = register(VehicleService(store), "abc-1d23")
    assert vehicle.plate == "ABC1D23"


def test_switch_keeps_exactly_one_active(store):
    service = VehicleService(store)
    register(service, "ABC1D23")
    second = register(service, "XYZ9K88")

    vehicles = service.switch_active_vehicle("u1", second.vehicle_id)

    assert [v.vehicle_id for v in vehicles if v.is_active] == [second.vehicle_id]


def test_switch_to_foreign_vehicle_fails(store):
    service = VehicleService(store)
    mine = register(service, "ABC1D23")
    theirs = register(service, "XYZ9K88", user_id="u2")

    with pytest.raises(InvariantViolationError):
        service.switch_active_vehicle("u1", theirs.vehicle_id)

    assert service.active_vehicle("u1").vehicle_id == mine.vehicle_id
    assert service.active_vehicle("u2").vehicle_id == theirs.vehicle_id


def test_same_plate_allowed_for_other_users(store):
    service = VehicleService(store)
    register(service, "ABC1D23")
    register(service, "ABC1D23", user_id="u2")

    assert len(service.list_vehicles("u2")) == 1


def test_registration_schedules_obligations(store, financed_profile):
    vehicle = register(
        VehicleService(store),
        "ABC1D23",
        profile=financed_profile,
        insurance=Insurance(value=1200.0, installments=12),
    )

    rows = TransactionRepository(store).list_for_user("u1", vehicle.vehicle_id)

    assert len(rows) == 48 + 12
    assert all(t.is_scheduled for t in rows)


def test_failed_registration_leaves_no_trace(store, financed_profile):
    service = VehicleService(store)
    register(service, "ABC1D23")

    with pytest.raises(ValidationError):
        register(service, "ABC-1D23", profile=financed_profile)

    assert len(service.list_vehicles("u1")) == 1
    assert TransactionRepository(store).list_all() == []


def test_amortize_trims_schedule(store, financed_profile):
    service = VehicleService(store)
    vehicle = register(service, "ABC1D23", profile=financed_profile)

    updated = service.amortize("u1", vehicle.vehicle_id, 10, as_of=AS_OF)

    rows = TransactionRepository(store).list_for_user("u1", vehicle.vehicle_id)
    assert updated.profile.remaining_installments == 38
    assert len(rows) == 38


def test_payoff_converts_to_owned_and_clears_schedule(store, financed_profile):
    service = VehicleService(store)
    vehicle = register(service, "ABC1D23", profile=financed_profile, insurance=Insurance(value=600.0, installments=6))

    updated = service.amortize("u1", vehicle.vehicle_id, 48, as_of=AS_OF)

    rows = TransactionRepository(store).list_for_user("u1", vehicle.vehicle_id)
    assert isinstance(updated.profile, OwnedProfile)
    assert updated.installment_value == 0
    assert [t.category for t in rows] == [TransactionCategory.INSURANCE] * 6
    assert isinstance(service.get("u1", vehicle.vehicle_id).profile, OwnedProfile)


def test_amortize_too_many_changes_nothing(store):
    service = VehicleService(store)
    profile = FinancedProfile(installment_value=1500.0, total_installments=48, installments_paid=40)
    vehicle = register(service, "ABC1D23", profile=profile)

    with pytest.raises(InvariantViolationError):
        service.amortize("u1", vehicle.vehicle_id, 9, as_of=AS_OF)

    stored = service.get("u1", vehicle.vehicle_id)
    assert stored.profile.installments_paid == 40
    assert len(TransactionRepository(store).list_all()) == 8


def test_amortize_unknown_vehicle(store):
    with pytest.raises(NotFoundError):
        VehicleService(store).amortize("u1", "missing", 1)


def test_update_goal_sets_and_clears_override(store):
    service = VehicleService(store)
    vehicle = register(service, "ABC1D23")

    assert service.update_goal("u1", vehicle.vehicle_id, 300.0).custom_daily_goal == 300.0
    assert service.update_goal("u1", vehicle.vehicle_id, None).custom_daily_goal is None

    with pytest.raises(ValidationError):
        service.update_goal("u1", vehicle.vehicle_id, -5.0)


def test_installment_payment_advances_counter(store, financed_profile):
    service = VehicleService(store)
    vehicle = register(service, "ABC1D23", profile=financed_profile)

    updated = service.register_installment_payment("u1", vehicle.vehicle_id, None, AS_OF)
    assert updated.profile.installments_paid == 1

    # Re-reporting an older installment does not move backwards
    again = service.register_installment_payment("u1", vehicle.vehicle_id, 1, AS_OF)
    assert again.profile.installments_paid == 1

    jumped = service.register_installment_payment("u1", vehicle.vehicle_id, 5, AS_OF)
    assert jumped.profile.installments_paid == 5
    assert len(TransactionRepository(store).list_for_user("u1", vehicle.vehicle_id)) == 43


def test_installment_index_past_total_pays_off(store, financed_profile):
    service = VehicleService(store)
    vehicle = register(service, "ABC1D23", profile=financed_profile)

    paid_off = service.register_installment_payment("u1", vehicle.vehicle_id, 60, AS_OF)

    assert isinstance(paid_off.profile, OwnedProfile)
    assert paid_off.profile.installments_paid_off == 48
    assert TransactionRepository(store).list_for_user("u1", vehicle.vehicle_id) == []
