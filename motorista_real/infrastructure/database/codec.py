"""JSON codec between domain dataclasses and the persisted camelCase blobs"""

import json
import re
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

from motorista_real.domain.models import (
    DEFAULT_DUE_DAY,
    FinancedProfile,
    FuelType,
    GoalType,
    Insurance,
    OwnedProfile,
    OwnershipStatus,
    RentalPeriod,
    RentedProfile,
    Transaction,
    TransactionCategory,
    TransactionOrigin,
    TransactionType,
    User,
    Vehicle,
    VehicleType,
)

E = TypeVar("E", bound=Enum)

# IDs the scheduler tags; used to recover origin from blobs written without it
_SCHEDULED_ID = re.compile(r"_(parc|aluguel|seguro)_\d+$")


def _number(value: Any) -> Optional[float]:
    """Lenient numeric parse: malformed values are treated as absent"""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number == number else None  # NaN


def _int(value: Any) -> Optional[int]:
    number = _number(value)
    return int(number) if number is not None else None


def _date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _enum(enum_cls: Type[E], value: Any, default: Optional[E] = None) -> Optional[E]:
    try:
        return enum_cls(value)
    except ValueError:
        return default


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# ---------------------------------------------------------------- users


def encode_user(user: User) -> Dict[str, Any]:
    return _compact(
        {
            "uid": user.uid,
            "email": user.email,
            "name": user.name,
            "dailyGoal": user.daily_goal,
            "isPro": user.is_pro,
            "goalType": user.goal_type.value if user.goal_type else None,
        }
    )


def decode_user(raw: Dict[str, Any]) -> User:
    return User(
        uid=str(raw["uid"]),
        email=raw.get("email", ""),
        name=raw.get("name", ""),
        daily_goal=_number(raw.get("dailyGoal")) or 0.0,
        is_pro=bool(raw.get("isPro", False)),
        goal_type=_enum(GoalType, raw.get("goalType")),
    )


# ------------------------------------------------------------- vehicles


def encode_vehicle(vehicle: Vehicle) -> Dict[str, Any]:
    """Flatten the profile onto the vehicle, tagged by ownershipStatus"""
    data: Dict[str, Any] = {
        "vehicleId": vehicle.vehicle_id,
        "userId": vehicle.user_id,
        "type": vehicle.type.value,
        "brand": vehicle.brand,
        "model": vehicle.model,
        "plate": vehicle.plate,
        "isActive": vehicle.is_active,
        "ownershipStatus": vehicle.ownership_status.value,
        "customDailyGoal": vehicle.custom_daily_goal,
        "customMaintRate": vehicle.custom_maint_rate,
        "year": vehicle.year,
        "modelYear": vehicle.model_year,
        "currentKm": vehicle.current_km,
    }

    profile = vehicle.profile
    if isinstance(profile, OwnedProfile):
        data.update(
            vehicleValue=profile.vehicle_value,
            purchaseValue=profile.purchase_value,
            purchaseDate=_iso(profile.purchase_date),
            installmentsPaidOff=profile.installments_paid_off or None,
            installmentValue=0 if profile.installments_paid_off else None,
        )
    elif isinstance(profile, FinancedProfile):
        data.update(
            installmentValue=profile.installment_value,
            totalInstallments=profile.total_installments,
            installmentsPaid=profile.installments_paid,
            rentalDueDate=profile.due_day,
        )
    elif isinstance(profile, RentedProfile):
        data.update(
            rentalValue=profile.rental_value,
            rentalPeriod=profile.period.value,
            rentalDueDate=profile.due_reference,
        )

    insurance = vehicle.insurance
    data["hasInsurance"] = insurance is not None
    if insurance is not None:
        data.update(
            insuranceValue=insurance.value,
            insuranceInstallments=insurance.installments,
            insuranceDueDay=insurance.due_day,
            insuranceExpiryDate=_iso(insurance.expiry_date),
        )

    return _compact(data)


def _decode_profile(raw: Dict[str, Any]):
    status = _enum(OwnershipStatus, raw.get("ownershipStatus"), OwnershipStatus.OWNED)

    if status is OwnershipStatus.FINANCED:
        return FinancedProfile(
            installment_value=_number(raw.get("installmentValue")) or 0.0,
            total_installments=_int(raw.get("totalInstallments")) or 0,
            installments_paid=_int(raw.get("installmentsPaid")) or 0,
            due_day=_int(raw.get("rentalDueDate")) or DEFAULT_DUE_DAY,
        )

    if status is OwnershipStatus.RENTED:
        period = _enum(RentalPeriod, raw.get("rentalPeriod"), RentalPeriod.WEEKLY)
        default_due = 0 if period is RentalPeriod.WEEKLY else 1
        due = _int(raw.get("rentalDueDate"))
        return RentedProfile(
            rental_value=_number(raw.get("rentalValue")) or 0.0,
            period=period,
            due_reference=due if due is not None else default_due,
        )

    return OwnedProfile(
        vehicle_value=_number(raw.get("vehicleValue")) or 0.0,
        purchase_value=_number(raw.get("purchaseValue")),
        purchase_date=_date(raw.get("purchaseDate")),
        installments_paid_off=_int(raw.get("installmentsPaidOff")) or 0,
    )


def decode_vehicle(raw: Dict[str, Any]) -> Vehicle:
    insurance = None
    if raw.get("hasInsurance"):
        insurance = Insurance(
            value=_number(raw.get("insuranceValue")) or 0.0,
            installments=_int(raw.get("insuranceInstallments")) or 0,
            due_day=_int(raw.get("insuranceDueDay")) or DEFAULT_DUE_DAY,
            expiry_date=_date(raw.get("insuranceExpiryDate")),
        )

    return Vehicle(
        vehicle_id=str(raw["vehicleId"]),
        user_id=str(raw["userId"]),
        type=_enum(VehicleType, raw.get("type"), VehicleType.CAR),
        brand=raw.get("brand", ""),
        model=raw.get("model", ""),
        plate=raw.get("plate", ""),
        profile=_decode_profile(raw),
        is_active=bool(raw.get("isActive", False)),
        insurance=insurance,
        custom_daily_goal=_number(raw.get("customDailyGoal")),
        custom_maint_rate=_number(raw.get("customMaintRate")),
        year=raw.get("year"),
        model_year=raw.get("modelYear"),
        current_km=_number(raw.get("currentKm")),
    )


# --------------------------------------------------------- transactions


def encode_transaction(txn: Transaction) -> Dict[str, Any]:
    return _compact(
        {
            "transactionId": txn.transaction_id,
            "userId": txn.user_id,
            "vehicleId": txn.vehicle_id,
            "type": txn.type.value,
            "category": txn.category.value,
            "amount": txn.amount,
            "date": txn.date.isoformat(),
            "timestamp": txn.timestamp,
            "kmInput": txn.km_input,
            "fuelType": txn.fuel_type.value if txn.fuel_type else None,
            "pricePerUnit": txn.price_per_unit,
            "fuelQuantity": txn.fuel_quantity,
            "installmentIndex": txn.installment_index,
            "origin": txn.origin.value,
        }
    )


def decode_transaction(raw: Dict[str, Any]) -> Transaction:
    txn_id = str(raw["transactionId"])
    origin = _enum(TransactionOrigin, raw.get("origin"))
    if origin is None:
        origin = TransactionOrigin.SCHEDULED if _SCHEDULED_ID.search(txn_id) else TransactionOrigin.MANUAL

    txn_date = _date(raw.get("date"))
    if txn_date is None:
        raise ValueError(f"Transaction {txn_id} has no valid date")

    return Transaction(
        transaction_id=txn_id,
        user_id=str(raw["userId"]),
        vehicle_id=str(raw.get("vehicleId", "")),
        type=TransactionType(raw["type"]),
        category=TransactionCategory(raw["category"]),
        amount=_number(raw.get("amount")) or 0.0,
        date=txn_date,
        timestamp=_int(raw.get("timestamp")) or 0,
        km_input=_number(raw.get("kmInput")),
        fuel_type=_enum(FuelType, raw.get("fuelType")),
        price_per_unit=_number(raw.get("pricePerUnit")),
        fuel_quantity=_number(raw.get("fuelQuantity")),
        installment_index=_int(raw.get("installmentIndex")),
        origin=origin,
    )


# ---------------------------------------------------------------- blobs


def dumps(records: List[Dict[str, Any]] | Dict[str, Any]) -> str:
    return json.dumps(records, ensure_ascii=False)


def loads_list(blob: Optional[str]) -> List[Dict[str, Any]]:
    """Decode a collection blob; absent key means empty collection"""
    if not blob:
        return []
    data = json.loads(blob)
    if not isinstance(data, list):
        raise ValueError("Expected a JSON list")
    return data
