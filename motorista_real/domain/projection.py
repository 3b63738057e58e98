"""Daily financial projection engine - core business logic for real net profit"""

from datetime import date, timedelta
from typing import Iterable, List, Optional

from motorista_real.domain.models import (
    DailyFinancialSnapshot,
    DynamicGoal,
    FinancedProfile,
    GoalProgress,
    GoalType,
    OwnedProfile,
    RentalPeriod,
    RentedProfile,
    Transaction,
    TransactionCategory,
    TransactionType,
    User,
    Vehicle,
)
from motorista_real.utils.date_utils import days_in_month, next_monthly_due_date, same_month

# Empirical R$ -> km proxy used when the driver logs no odometer readings
KM_PER_REAL_ESTIMATE = 1.8

# Insurance premium is amortized monthly
INSURANCE_AMORTIZATION_DAYS = 30

MONTHLY_DEPRECIATION_RATE = 0.015
MAX_DEPRECIATION = 0.70

# Deficits at or below this are float noise, not a diluted goal
DILUTION_EPSILON = 5.0


def cash_flow(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Rows that represent money actually moved (scheduled rows are projections)"""
    return [t for t in transactions if not t.is_scheduled]


def _for_vehicle(transactions: Iterable[Transaction], vehicle_id: str) -> List[Transaction]:
    return [t for t in transactions if t.vehicle_id == vehicle_id]


def _sum_by_type(transactions: Iterable[Transaction], txn_type: TransactionType) -> float:
    return sum(t.amount for t in transactions if t.type is txn_type)


def _has_payment(
    transactions: Iterable[Transaction],
    category: TransactionCategory,
    start: date,
    end: date,
) -> bool:
    return any(
        t.category is category and t.type is TransactionType.EXPENSE and start <= t.date <= end
        for t in transactions
    )


def days_until_due(today: date, due_day: int) -> int:
    """
    Days left to pay the next installment (minimum 1).

    Due day still ahead this month: today and the due day both count.
    Already passed: rest of this month plus the due day of the next one.
    """
    due = next_monthly_due_date(today, due_day)
    if same_month(due, today):
        return max(1, (due - today).days + 1)
    return max(1, days_in_month(today.year, today.month) - today.day + due_day)


def theoretical_daily_fixed(vehicle: Vehicle, transactions: List[Transaction], today: date) -> float:
    """
    Per-day share of recurring obligations not yet paid this period.

    Requirements:
    - Financed: installment spread over the days left until the due date,
      0 if a financing payment was already recorded this calendar month
    - Rented: rent / 7 (weekly) or rent / days in month (monthly), 0 if the
      rent for the current period was already paid
    - Insurance: premium / 30, regardless of ownership
    """
    payments = cash_flow(_for_vehicle(transactions, vehicle.vehicle_id))
    month_start = today.replace(day=1)
    month_end = today.replace(day=days_in_month(today.year, today.month))
    profile = vehicle.profile
    fixed = 0.0

    if isinstance(profile, FinancedProfile) and profile.installment_value > 0:
        if not _has_payment(payments, TransactionCategory.FINANCING, month_start, month_end):
            fixed += profile.installment_value / days_until_due(today, profile.due_day)

    elif isinstance(profile, RentedProfile) and profile.rental_value > 0:
        if profile.period is RentalPeriod.WEEKLY:
            period_start, period_end, period_days = today - timedelta(days=6), today, 7
        else:
            period_start, period_end, period_days = month_start, month_end, month_end.day
        if not _has_payment(payments, TransactionCategory.RENT, period_start, period_end):
            fixed += profile.rental_value / period_days

    if vehicle.insurance is not None and vehicle.insurance.value > 0:
        fixed += vehicle.insurance.value / INSURANCE_AMORTIZATION_DAYS

    return fixed


def estimate_distance(day_transactions: List[Transaction], earnings: float) -> tuple[float, bool]:
    """
    Distance driven on a day.

    Returns: (distance_km, is_estimate)

    Two or more odometer readings give max - min. Otherwise earnings are
    converted with KM_PER_REAL_ESTIMATE so the maintenance reserve is not
    silently zero for drivers who skip the odometer.
    """
    readings = sorted(t.km_input for t in day_transactions if t.km_input is not None and t.km_input > 0)
    if len(readings) >= 2:
        return readings[-1] - readings[0], False
    if earnings > 0:
        return earnings * KM_PER_REAL_ESTIMATE, True
    return 0.0, False


def depreciation(profile: OwnedProfile, today: date) -> tuple[float, Optional[float]]:
    """
    Straight-line depreciation estimate for owned vehicles with purchase data.

    Returns: (daily_depreciation, current_estimated_value)

    1.5% of the purchase value per month, capped at 70% in total. The cap only
    floors the estimated value; the daily term keeps the full monthly rate.
    """
    if not profile.has_purchase_data:
        return 0.0, None

    purchase_value = profile.purchase_value
    days_owned = max(0, (today - profile.purchase_date).days)
    months_owned = max(1.0, days_owned / 30)

    depreciated_share = min(MAX_DEPRECIATION, months_owned * MONTHLY_DEPRECIATION_RATE)
    current_value = purchase_value * (1 - depreciated_share)

    return (purchase_value * MONTHLY_DEPRECIATION_RATE) / 30, current_value


def compute_daily_snapshot(
    vehicle: Vehicle,
    transactions: List[Transaction],
    today: date,
    maint_rate: Optional[float] = None,
    include_depreciation: bool = True,
) -> DailyFinancialSnapshot:
    """
    Main entry point: project today's real net profit for one vehicle.

    Pure function - same inputs, same snapshot. Missing optional data
    (odometer, purchase data, insurance) contributes 0 instead of failing.
    """
    vehicle_txns = cash_flow(_for_vehicle(transactions, vehicle.vehicle_id))
    today_txns = [t for t in vehicle_txns if t.date == today]

    earnings = _sum_by_type(today_txns, TransactionType.EARNING)
    expenses = _sum_by_type(today_txns, TransactionType.EXPENSE)

    fixed = theoretical_daily_fixed(vehicle, transactions, today)

    distance, is_estimate = estimate_distance(today_txns, earnings)
    rate = vehicle.maint_rate if maint_rate is None else maint_rate
    maint_reserve = distance * rate

    daily_depreciation, estimated_value = 0.0, None
    if include_depreciation and isinstance(vehicle.profile, OwnedProfile):
        daily_depreciation, estimated_value = depreciation(vehicle.profile, today)

    profit = earnings - expenses - fixed - maint_reserve - daily_depreciation

    return DailyFinancialSnapshot(
        date=today,
        earnings=earnings,
        expenses=expenses,
        amortized_cost=fixed,
        maint_reserve=maint_reserve,
        daily_depreciation=daily_depreciation,
        profit=profit,
        distance=distance,
        distance_is_estimate=is_estimate,
        estimated_vehicle_value=estimated_value,
    )


def resolve_base_goal(user: User, vehicle: Optional[Vehicle]) -> float:
    """Vehicle override wins unless the driver chose one global goal"""
    if user.goal_type is not GoalType.GLOBAL and vehicle is not None and vehicle.custom_daily_goal:
        return vehicle.custom_daily_goal
    return user.daily_goal or 0.0


def compute_dynamic_goal(
    base_goal: float,
    transactions: List[Transaction],
    today: date,
    vehicle_id: Optional[str] = None,
) -> DynamicGoal:
    """
    Redistribute this month's missed-goal deficit over the remaining days.

    Requirements:
    - Every day before today in the current month whose cash profit
      (earnings - expenses) fell short of base_goal adds the shortfall
    - remaining_days counts today
    - No stored deficit state: always re-derived from transactions

    Historical days use raw cash profit only; fixed costs and maintenance
    reserve are not reapplied.
    """
    history = cash_flow(transactions)
    if vehicle_id is not None:
        history = _for_vehicle(history, vehicle_id)

    month_days = days_in_month(today.year, today.month)
    remaining_days = (month_days - today.day) + 1

    # Daily cash profit for the elapsed part of the month
    profit_by_day = {day: 0.0 for day in range(1, today.day)}
    for txn in history:
        if same_month(txn.date, today) and txn.date.day < today.day:
            signed = txn.amount if txn.type is TransactionType.EARNING else -txn.amount
            profit_by_day[txn.date.day] += signed

    accumulated_deficit = sum(base_goal - p for p in profit_by_day.values() if p < base_goal)

    if base_goal > 0:
        dynamic_goal = base_goal + accumulated_deficit / remaining_days
    else:
        dynamic_goal = 0.0

    return DynamicGoal(
        base_goal=base_goal,
        dynamic_goal=dynamic_goal,
        accumulated_deficit=accumulated_deficit,
        remaining_days=remaining_days,
        is_diluted=accumulated_deficit > DILUTION_EPSILON and base_goal > 0,
    )


def goal_progress(profit: float, dynamic_goal: float) -> GoalProgress:
    """Percent of today's goal reached; goal of 0 short-circuits to 0%"""
    raw = (profit / dynamic_goal) * 100 if dynamic_goal > 0 else 0.0
    display = max(0.0, raw)
    return GoalProgress(
        raw_percent=raw,
        display_percent=display,
        progress_percent=min(100.0, display),
    )
