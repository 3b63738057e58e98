"""Input validation applied before anything reaches the store"""

import re
from typing import Iterable

from motorista_real.domain.exceptions import ValidationError
from motorista_real.domain.models import (
    FinancedProfile,
    OwnedProfile,
    RentalPeriod,
    RentedProfile,
    Transaction,
    Vehicle,
)

PLATE_LENGTH = 7
MIN_MODEL_LENGTH = 2

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def normalize_plate(raw: str) -> str:
    """Strip separators and uppercase: 'abc-1d23' -> 'ABC1D23'"""
    return _NON_ALNUM.sub("", raw or "").upper()


def _check_day_of_month(value: int, field: str) -> None:
    if not 1 <= value <= 31:
        raise ValidationError(f"{field} must be a day of month (1-31), got {value}")


def validate_vehicle(vehicle: Vehicle, existing_plates: Iterable[str]) -> None:
    """
    Raise ValidationError unless the vehicle may be registered.

    existing_plates are the normalized plates of the user's other vehicles.
    """
    if len(vehicle.plate) != PLATE_LENGTH or normalize_plate(vehicle.plate) != vehicle.plate:
        raise ValidationError(f"Plate must be {PLATE_LENGTH} uppercase letters/digits, got '{vehicle.plate}'")
    if vehicle.plate in set(existing_plates):
        raise ValidationError(f"Plate {vehicle.plate} is already registered")
    if len((vehicle.model or "").strip()) < MIN_MODEL_LENGTH:
        raise ValidationError("Model must have at least 2 characters")

    profile = vehicle.profile
    if isinstance(profile, FinancedProfile):
        if profile.total_installments < 0:
            raise ValidationError("Total installments cannot be negative")
        if not 0 <= profile.installments_paid <= profile.total_installments:
            raise ValidationError(
                f"Installments paid must be between 0 and {profile.total_installments}"
            )
        if profile.installment_value < 0:
            raise ValidationError("Installment value cannot be negative")
        _check_day_of_month(profile.due_day, "Installment due day")
    elif isinstance(profile, RentedProfile):
        if profile.rental_value < 0:
            raise ValidationError("Rental value cannot be negative")
        if profile.period is RentalPeriod.WEEKLY and not 0 <= profile.due_reference <= 6:
            raise ValidationError("Weekly rent due day must be a weekday (0=Sunday..6=Saturday)")
        if profile.period is RentalPeriod.MONTHLY:
            _check_day_of_month(profile.due_reference, "Rent due day")
    elif isinstance(profile, OwnedProfile):
        if profile.vehicle_value < 0 or (profile.purchase_value or 0) < 0:
            raise ValidationError("Vehicle values cannot be negative")

    if vehicle.insurance is not None:
        if vehicle.insurance.value < 0 or vehicle.insurance.installments < 0:
            raise ValidationError("Insurance value and installments cannot be negative")
        _check_day_of_month(vehicle.insurance.due_day, "Insurance due day")

    if vehicle.custom_daily_goal is not None and vehicle.custom_daily_goal < 0:
        raise ValidationError("Daily goal cannot be negative")
    if vehicle.custom_maint_rate is not None and vehicle.custom_maint_rate < 0:
        raise ValidationError("Maintenance rate cannot be negative")


def validate_transaction(txn: Transaction) -> None:
    if not txn.amount or txn.amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    if txn.category.transaction_type is not txn.type:
        raise ValidationError(f"Category {txn.category.value} is not valid for {txn.type.value}")
    if txn.km_input is not None and txn.km_input < 0:
        raise ValidationError("Odometer reading cannot be negative")
