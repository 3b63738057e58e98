"""Obligation scheduling and debt amortization for registered vehicles"""

import uuid
from dataclasses import replace
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple

from motorista_real.domain.exceptions import InvariantViolationError, ValidationError
from motorista_real.domain.models import (
    FinancedProfile,
    OwnedProfile,
    RentalPeriod,
    RentedProfile,
    Transaction,
    TransactionCategory,
    TransactionOrigin,
    TransactionType,
    Vehicle,
)
from motorista_real.utils.date_utils import add_months, next_monthly_due_date, next_weekday, same_month

WEEKLY_RENT_OCCURRENCES = 12
MONTHLY_RENT_OCCURRENCES = 6


def date_to_timestamp(value: date) -> int:
    """Epoch milliseconds at midnight UTC"""
    return int(datetime.combine(value, time.min, tzinfo=timezone.utc).timestamp() * 1000)


def _scheduled(vehicle: Vehicle, category: TransactionCategory, amount: float, due: date, tag: str) -> Transaction:
    return Transaction(
        transaction_id=f"{uuid.uuid4().hex}_{tag}",
        user_id=vehicle.user_id,
        vehicle_id=vehicle.vehicle_id,
        type=TransactionType.EXPENSE,
        category=category,
        amount=amount,
        date=due,
        timestamp=date_to_timestamp(due),
        origin=TransactionOrigin.SCHEDULED,
    )


def schedule_financing(vehicle: Vehicle, as_of: date) -> List[Transaction]:
    """One installment per month for the remaining installments, first one month out"""
    profile = vehicle.profile
    if not isinstance(profile, FinancedProfile) or profile.installment_value <= 0:
        return []

    return [
        _scheduled(
            vehicle,
            TransactionCategory.FINANCING,
            profile.installment_value,
            add_months(as_of, i),
            f"parc_{i}",
        )
        for i in range(1, profile.remaining_installments + 1)
    ]


def schedule_rent(vehicle: Vehicle, as_of: date) -> List[Transaction]:
    """
    Future rent payments.

    - Weekly: 12 payments, first on the next occurrence of the due weekday
      (0=Sunday..6=Saturday, today included), then every 7 days
    - Monthly: 6 payments on the due day, starting this month unless the day
      has already passed
    """
    profile = vehicle.profile
    if not isinstance(profile, RentedProfile) or profile.rental_value <= 0:
        return []

    if profile.period is RentalPeriod.WEEKLY:
        first = next_weekday(as_of, profile.due_reference)
        due_dates = [first + timedelta(days=7 * i) for i in range(WEEKLY_RENT_OCCURRENCES)]
    else:
        first = next_monthly_due_date(as_of, profile.due_reference)
        due_dates = [add_months(first, i, day=profile.due_reference) for i in range(MONTHLY_RENT_OCCURRENCES)]

    return [
        _scheduled(vehicle, TransactionCategory.RENT, profile.rental_value, due, f"aluguel_{i}")
        for i, due in enumerate(due_dates)
    ]


def schedule_insurance(vehicle: Vehicle, as_of: date) -> List[Transaction]:
    """Premium split in equal monthly installments on the insurance due day"""
    insurance = vehicle.insurance
    if insurance is None or insurance.value <= 0 or insurance.installments <= 0:
        return []

    first = next_monthly_due_date(as_of, insurance.due_day)
    return [
        _scheduled(
            vehicle,
            TransactionCategory.INSURANCE,
            insurance.installment_value,
            add_months(first, i, day=insurance.due_day),
            f"seguro_{i}",
        )
        for i in range(insurance.installments)
    ]


def schedule_obligations(vehicle: Vehicle, as_of: date) -> List[Transaction]:
    """
    Materialize the vehicle's future payment schedule as dated transactions.

    Every row is tagged ``origin=scheduled`` so the projection engine treats
    it as a pending obligation rather than money already spent.
    """
    return schedule_financing(vehicle, as_of) + schedule_rent(vehicle, as_of) + schedule_insurance(vehicle, as_of)


def amortize_or_payoff(
    vehicle: Vehicle,
    paid_installments: int,
    new_installment_value: Optional[float] = None,
) -> Vehicle:
    """
    Apply an early payment of installments to a financed vehicle.

    Requirements:
    - Paying exactly the remaining installments settles the debt: the vehicle
      becomes owned and its installment value drops to 0
    - Paying fewer advances installments_paid; an optional new installment
      value replaces the old one (renegotiated payment)
    - Paying more than remains is rejected without changes

    Returns a new Vehicle; the input is not modified.
    """
    profile = vehicle.profile
    if not isinstance(profile, FinancedProfile):
        raise InvariantViolationError(f"Vehicle {vehicle.vehicle_id} is not financed")
    if paid_installments < 1:
        raise ValidationError("At least one installment must be paid")

    remaining = profile.remaining_installments
    if paid_installments > remaining:
        raise InvariantViolationError(
            f"Cannot pay {paid_installments} installments, only {remaining} remain"
        )

    if paid_installments == remaining:
        return replace(vehicle, profile=OwnedProfile(installments_paid_off=profile.total_installments))

    if new_installment_value is not None and new_installment_value <= 0:
        raise ValidationError("Installment value must be positive")

    return replace(
        vehicle,
        profile=replace(
            profile,
            installments_paid=profile.installments_paid + paid_installments,
            installment_value=new_installment_value or profile.installment_value,
        ),
    )


def reconcile_financing_schedule(
    vehicle: Vehicle,
    transactions: List[Transaction],
    as_of: date,
    paid_on: Optional[date] = None,
) -> Tuple[List[Transaction], List[str]]:
    """
    Align future scheduled installments with the vehicle's current financing.

    Keeps the earliest ``remaining_installments`` future rows, re-priced to the
    current installment value, and drops the rest (all of them once paid off).
    Rows dated before ``as_of`` and manual rows are left alone.

    paid_on is the date of a manual installment payment: a surplus row falling
    in that same month is the one dropped, so the paid month stops showing as due.

    Returns: (updated_rows, removed_transaction_ids)
    """
    pending = sorted(
        (
            t
            for t in transactions
            if t.vehicle_id == vehicle.vehicle_id
            and t.is_scheduled
            and t.category is TransactionCategory.FINANCING
            and t.date > as_of
        ),
        key=lambda t: t.date,
    )
    if paid_on is not None:
        # Stable sort: rows in the paid month move behind the others
        pending.sort(key=lambda t: same_month(t.date, paid_on))

    profile = vehicle.profile
    keep = profile.remaining_installments if isinstance(profile, FinancedProfile) else 0

    updated = [
        replace(t, amount=profile.installment_value)
        for t in pending[:keep]
        if t.amount != profile.installment_value
    ]
    removed = [t.transaction_id for t in pending[keep:]]
    return updated, removed
