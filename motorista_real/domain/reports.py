"""Read-only views over the transaction history"""

from datetime import date, timedelta
from typing import Iterable, List, Optional

from motorista_real.domain.models import DaySummary, Transaction, TransactionType
from motorista_real.domain.projection import cash_flow


def weekly_summary(transactions: Iterable[Transaction], today: date, days: int = 7) -> List[DaySummary]:
    """Earnings vs expenses per day for the last ``days`` days, oldest first"""
    history = cash_flow(transactions)
    start = today - timedelta(days=days - 1)
    summaries = {start + timedelta(days=i): DaySummary(start + timedelta(days=i), 0.0, 0.0) for i in range(days)}

    for txn in history:
        summary = summaries.get(txn.date)
        if summary is None:
            continue
        if txn.type is TransactionType.EARNING:
            summary.earnings += txn.amount
        else:
            summary.expenses += txn.amount

    return list(summaries.values())


def filter_transactions(
    transactions: Iterable[Transaction],
    txn_type: Optional[TransactionType] = None,
    on_date: Optional[date] = None,
    vehicle_id: Optional[str] = None,
) -> List[Transaction]:
    """Transactions matching the filters, most recently created first"""
    filtered = [
        t
        for t in transactions
        if (txn_type is None or t.type is txn_type)
        and (on_date is None or t.date == on_date)
        and (vehicle_id is None or t.vehicle_id == vehicle_id)
    ]
    return sorted(filtered, key=lambda t: t.timestamp, reverse=True)


def upcoming_obligations(
    transactions: Iterable[Transaction],
    today: date,
    limit: Optional[int] = None,
) -> List[Transaction]:
    """Scheduled installments, rent and insurance falling due today or later"""
    upcoming = sorted(
        (t for t in transactions if t.is_scheduled and t.date >= today),
        key=lambda t: (t.date, t.timestamp),
    )
    return upcoming[:limit] if limit is not None else upcoming


def fuel_quantity(amount: float, price_per_unit: Optional[float]) -> Optional[float]:
    """Litres (or m³/kWh) bought, derived from amount paid and pump price"""
    if not price_per_unit or price_per_unit <= 0:
        return None
    return round(amount / price_per_unit, 3)
