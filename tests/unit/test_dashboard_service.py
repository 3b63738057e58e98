"""Unit tests for the dashboard read model"""

import pytest
from dataclasses import replace
from datetime import date, timedelta
from motorista_real.domain.models import OwnedProfile, TransactionCategory, VehicleType
from motorista_real.services.dashboard import DashboardService
from motorista_real.services.ledger import LedgerService
from motorista_real.services.vehicles import VehicleService

TODAY = date(2024, 3, 14)


@pytest.fixture
def owned_vehicle(store, user):
    profile = OwnedProfile(vehicle_value=50000.0, purchase_value=60000.0, purchase_date=TODAY - timedelta(days=300))
    return VehicleService(store).register_vehicle(
        user.uid,
        type=VehicleType.CAR,
        brand="Fiat",
        model="Argo",
        plate="ABC1D23",
        profile=profile,
        as_of=TODAY,
    )


def test_no_vehicle_no_dashboard(store, user):
    assert DashboardService(store).daily_dashboard(user, TODAY) is None


def test_dashboard_for_active_vehicle(store, user, owned_vehicle):
    LedgerService(store).record_transaction(user.uid, TransactionCategory.UBER, 100.0, TODAY)

    dashboard = DashboardService(store).daily_dashboard(user, TODAY)

    assert dashboard.vehicle.vehicle_id == owned_vehicle.vehicle_id
    assert dashboard.snapshot.earnings == 100.0
    assert dashboard.snapshot.profit == pytest.approx(73.0)
    assert dashboard.goal.base_goal == user.daily_goal
    assert dashboard.progress.raw_percent == pytest.approx(73.0 / dashboard.goal.dynamic_goal * 100)


def test_depreciation_is_a_pro_feature(store, user, owned_vehicle):
    service = DashboardService(store)

    free = service.daily_dashboard(user, TODAY)
    pro = service.daily_dashboard(replace(user, is_pro=True), TODAY)

    assert free.snapshot.daily_depreciation == 0
    assert pro.snapshot.daily_depreciation == pytest.approx(30.0)


def test_dashboard_is_recomputed_on_every_read(store, user, owned_vehicle):
    service = DashboardService(store)
    before = service.daily_dashboard(user, TODAY)

    LedgerService(store).record_transaction(user.uid, TransactionCategory.UBER, 50.0, TODAY)

    assert service.daily_dashboard(user, TODAY).snapshot.earnings == before.snapshot.earnings + 50.0


def test_weekly_report_and_upcoming(store, user, owned_vehicle):
    LedgerService(store).record_transaction(user.uid, TransactionCategory.UBER, 100.0, TODAY)
    service = DashboardService(store)

    days = service.weekly_report(user, TODAY)

    assert len(days) == 7
    assert days[-1].earnings == 100.0
    assert service.upcoming(user, TODAY) == []
