"""Vehicle lifecycle: registration, active-vehicle switching, amortization"""

import logging
import uuid
from collections import Counter
from dataclasses import replace
from datetime import date
from typing import List, Optional

from motorista_real.domain.exceptions import InvariantViolationError, NotFoundError, ValidationError
from motorista_real.domain.models import FinancedProfile, FinancialProfile, Insurance, OwnedProfile, Vehicle, VehicleType
from motorista_real.domain.obligations import (
    amortize_or_payoff,
    reconcile_financing_schedule,
    schedule_obligations,
)
from motorista_real.domain.validation import normalize_plate, validate_vehicle
from motorista_real.infrastructure.database.kv_store import KeyValueStore
from motorista_real.infrastructure.database.repositories import TransactionRepository, VehicleRepository
from motorista_real.infrastructure.observability.metrics import (
    amortization_counter,
    obligations_scheduled_counter,
    vehicle_registration_counter,
)

logger = logging.getLogger(__name__)


class VehicleService:
    def __init__(self, store: KeyValueStore):
        self.store = store
        self.vehicles = VehicleRepository(store)
        self.transactions = TransactionRepository(store)

    def list_vehicles(self, user_id: str) -> List[Vehicle]:
        return self.vehicles.list_for_user(user_id)

    def active_vehicle(self, user_id: str) -> Optional[Vehicle]:
        return self.vehicles.get_active(user_id)

    def register_vehicle(
        self,
        user_id: str,
        type: VehicleType,
        brand: str,
        model: str,
        plate: str,
        profile: FinancialProfile,
        insurance: Optional[Insurance] = None,
        custom_daily_goal: Optional[float] = None,
        custom_maint_rate: Optional[float] = None,
        year: Optional[str] = None,
        model_year: Optional[str] = None,
        current_km: Optional[float] = None,
        as_of: Optional[date] = None,
    ) -> Vehicle:
        """
        Register a vehicle and materialize its future obligations.

        Flow:
        1. Normalize plate and validate against the user's other vehicles
        2. First vehicle of the user becomes the active one
        3. Persist vehicle + scheduled installments/rent/insurance together
        """
        as_of = as_of or date.today()

        with self.store.transaction():
            existing = self.vehicles.list_for_user(user_id)
            vehicle = Vehicle(
                vehicle_id=uuid.uuid4().hex,
                user_id=user_id,
                type=type,
                brand=brand,
                model=model,
                plate=normalize_plate(plate),
                profile=profile,
                is_active=not existing,
                insurance=insurance,
                custom_daily_goal=custom_daily_goal,
                custom_maint_rate=custom_maint_rate,
                year=year,
                model_year=model_year,
                current_km=current_km,
            )
            validate_vehicle(vehicle, [v.plate for v in existing])

            scheduled = schedule_obligations(vehicle, as_of)
            self.transactions.add_many(scheduled)
            self.vehicles.add(vehicle)

        vehicle_registration_counter.labels(ownership=vehicle.ownership_status.value).inc()
        for category, count in Counter(t.category.value for t in scheduled).items():
            obligations_scheduled_counter.labels(category=category).inc(count)

        logger.info(
            "Vehicle registered",
            extra={
                "user_id": user_id,
                "vehicle_id": vehicle.vehicle_id,
                "ownership": vehicle.ownership_status.value,
                "scheduled_obligations": len(scheduled),
            },
        )
        return vehicle

    def switch_active_vehicle(self, user_id: str, vehicle_id: str) -> List[Vehicle]:
        """Make vehicle_id the user's only active vehicle"""
        with self.store.transaction():
            if not any(v.vehicle_id == vehicle_id for v in self.vehicles.list_for_user(user_id)):
                raise InvariantViolationError(f"Vehicle {vehicle_id} does not belong to user {user_id}")
            vehicles = self.vehicles.set_active(user_id, vehicle_id)

        logger.info("Active vehicle switched", extra={"user_id": user_id, "vehicle_id": vehicle_id})
        return vehicles

    def update_goal(
        self,
        user_id: str,
        vehicle_id: str,
        custom_daily_goal: Optional[float],
        custom_maint_rate: Optional[float] = None,
    ) -> Vehicle:
        """Set or clear (None) the vehicle's goal and maintenance-rate overrides"""
        if custom_daily_goal is not None and custom_daily_goal < 0:
            raise ValidationError("Daily goal cannot be negative")
        if custom_maint_rate is not None and custom_maint_rate < 0:
            raise ValidationError("Maintenance rate cannot be negative")

        with self.store.transaction():
            vehicle = self.vehicles.get(user_id, vehicle_id)
            vehicle = replace(vehicle, custom_daily_goal=custom_daily_goal, custom_maint_rate=custom_maint_rate)
            return self.vehicles.replace(vehicle)

    def amortize(
        self,
        user_id: str,
        vehicle_id: str,
        paid_installments: int,
        new_installment_value: Optional[float] = None,
        as_of: Optional[date] = None,
    ) -> Vehicle:
        """Apply an early payment and bring future scheduled installments in line"""
        as_of = as_of or date.today()

        with self.store.transaction():
            vehicle = amortize_or_payoff(self.vehicles.get(user_id, vehicle_id), paid_installments, new_installment_value)
            self.vehicles.replace(vehicle)
            self._reconcile(vehicle, as_of)

        outcome = "amortized" if isinstance(vehicle.profile, FinancedProfile) else "paid_off"
        amortization_counter.labels(outcome=outcome).inc()
        logger.info(
            "Financing amortized",
            extra={"user_id": user_id, "vehicle_id": vehicle_id, "paid": paid_installments, "outcome": outcome},
        )
        return vehicle

    def register_installment_payment(
        self,
        user_id: str,
        vehicle_id: str,
        installment_index: Optional[int],
        as_of: date,
    ) -> Vehicle:
        """
        Advance installments_paid after the driver paid an installment by hand.

        installment_index is the installment number the driver says was paid;
        without it the next one is assumed. Never moves backwards and never
        goes past the total. Paying the last installment pays the vehicle off.
        """
        with self.store.transaction():
            vehicle = self.vehicles.get(user_id, vehicle_id)
            profile = vehicle.profile
            if not isinstance(profile, FinancedProfile):
                return vehicle

            paid_index = installment_index or profile.installments_paid + 1
            if paid_index <= profile.installments_paid:
                return vehicle

            paid = min(paid_index, profile.total_installments)
            if paid == profile.total_installments:
                vehicle = replace(vehicle, profile=OwnedProfile(installments_paid_off=paid))
            else:
                vehicle = replace(vehicle, profile=replace(profile, installments_paid=paid))
            self.vehicles.replace(vehicle)
            self._reconcile(vehicle, as_of, paid_on=as_of)

        if isinstance(vehicle.profile, OwnedProfile):
            amortization_counter.labels(outcome="paid_off").inc()
            logger.info("Financing paid off", extra={"user_id": user_id, "vehicle_id": vehicle_id})
        return vehicle

    def _reconcile(self, vehicle: Vehicle, as_of: date, paid_on: Optional[date] = None) -> None:
        updated, removed = reconcile_financing_schedule(
            vehicle, self.transactions.list_for_user(vehicle.user_id, vehicle.vehicle_id), as_of, paid_on
        )
        self.transactions.replace_many(updated)
        self.transactions.remove(removed)

    def get(self, user_id: str, vehicle_id: str) -> Vehicle:
        try:
            return self.vehicles.get(user_id, vehicle_id)
        except NotFoundError:
            logger.warning("Vehicle lookup failed", extra={"user_id": user_id, "vehicle_id": vehicle_id})
            raise
