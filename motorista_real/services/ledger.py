"""Recording and editing driver transactions"""

import logging
import threading
import time
import uuid
from dataclasses import replace
from datetime import date
from typing import List, Optional

from motorista_real.domain.exceptions import NotFoundError, ValidationError
from motorista_real.domain.models import (
    FuelType,
    Transaction,
    TransactionCategory,
    TransactionOrigin,
    TransactionType,
)
from motorista_real.domain.reports import filter_transactions, fuel_quantity
from motorista_real.domain.validation import validate_transaction
from motorista_real.infrastructure.database.kv_store import KeyValueStore
from motorista_real.infrastructure.database.repositories import TransactionRepository, VehicleRepository
from motorista_real.infrastructure.observability.metrics import transaction_counter
from motorista_real.services.vehicles import VehicleService

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {"type", "category", "amount", "date", "km_input", "fuel_type", "price_per_unit", "fuel_quantity", "installment_index"}
)
# Optional details a PATCH may clear with an explicit null
CLEARABLE_FIELDS = frozenset({"km_input", "fuel_type", "price_per_unit", "fuel_quantity", "installment_index"})


class MonotonicClock:
    """Epoch-millisecond timestamps that strictly increase, even within one millisecond"""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last = 0

    def now_ms(self) -> int:
        with self._lock:
            self._last = max(int(time.time() * 1000), self._last + 1)
            return self._last


clock = MonotonicClock()


class LedgerService:
    def __init__(self, store: KeyValueStore):
        self.store = store
        self.transactions = TransactionRepository(store)
        self.vehicles = VehicleRepository(store)

    def list_transactions(
        self,
        user_id: str,
        txn_type: Optional[TransactionType] = None,
        on_date: Optional[date] = None,
        vehicle_id: Optional[str] = None,
    ) -> List[Transaction]:
        return filter_transactions(self.transactions.list_for_user(user_id), txn_type, on_date, vehicle_id)

    def record_transaction(
        self,
        user_id: str,
        category: TransactionCategory,
        amount: float,
        on_date: date,
        type: Optional[TransactionType] = None,
        vehicle_id: Optional[str] = None,
        km_input: Optional[float] = None,
        fuel_type: Optional[FuelType] = None,
        price_per_unit: Optional[float] = None,
        fuel_quantity: Optional[float] = None,
        installment_index: Optional[int] = None,
    ) -> Transaction:
        """
        Validate and append a driver-entered transaction.

        - Defaults to the user's active vehicle
        - Fuel quantity is derived from amount / pump price when not given
        - A financing payment on a financed vehicle advances its paid
          installment counter and trims the scheduled installments
        """
        with self.store.transaction():
            if vehicle_id is None:
                active = self.vehicles.get_active(user_id)
                if active is None:
                    raise ValidationError("Register a vehicle before recording transactions")
                vehicle_id = active.vehicle_id
            else:
                self.vehicles.get(user_id, vehicle_id)

            is_fuel = category is TransactionCategory.FUEL
            txn = Transaction(
                transaction_id=uuid.uuid4().hex,
                user_id=user_id,
                vehicle_id=vehicle_id,
                type=type or category.transaction_type,
                category=category,
                amount=amount,
                date=on_date,
                timestamp=clock.now_ms(),
                km_input=km_input,
                fuel_type=(fuel_type or FuelType.GASOLINE) if is_fuel else None,
                price_per_unit=price_per_unit if is_fuel else None,
                fuel_quantity=(fuel_quantity or _fuel_quantity(amount, price_per_unit)) if is_fuel else None,
                installment_index=installment_index if category is TransactionCategory.FINANCING else None,
            )
            validate_transaction(txn)
            self.transactions.add_many([txn])

            if category is TransactionCategory.FINANCING:
                VehicleService(self.store).register_installment_payment(user_id, vehicle_id, installment_index, on_date)

        transaction_counter.labels(type=txn.type.value, category=txn.category.value).inc()
        logger.info(
            "Transaction recorded",
            extra={"user_id": user_id, "vehicle_id": vehicle_id, "transaction_id": txn.transaction_id},
        )
        return txn

    def update_transaction(
        self,
        user_id: str,
        transaction_id: str,
        mark_paid: bool = False,
        **changes,
    ) -> Transaction:
        """
        Partially edit a transaction.

        Editing a scheduled obligation keeps it scheduled; ``mark_paid``
        turns it into a manual payment so it counts as money spent.
        None clears the optional details in CLEARABLE_FIELDS and is ignored
        for the rest. A row that becomes a manual financing payment advances
        the vehicle's installment counter, same as recording one.
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields not editable: {', '.join(sorted(unknown))}")

        with self.store.transaction():
            try:
                txn = self.transactions.get(user_id, transaction_id)
            except NotFoundError:
                logger.warning("Transaction edit failed", extra={"user_id": user_id, "transaction_id": transaction_id})
                raise

            updates = {k: v for k, v in changes.items() if v is not None or k in CLEARABLE_FIELDS}
            if "category" in updates and "type" not in updates:
                updates["type"] = updates["category"].transaction_type
            if mark_paid:
                updates["origin"] = TransactionOrigin.MANUAL

            updated = replace(txn, **updates)
            if updated.category is TransactionCategory.FUEL and "fuel_quantity" not in updates:
                updated = replace(updated, fuel_quantity=_fuel_quantity(updated.amount, updated.price_per_unit) or updated.fuel_quantity)

            validate_transaction(updated)
            self.transactions.replace_many([updated])

            became_payment = (
                updated.category is TransactionCategory.FINANCING
                and not updated.is_scheduled
                and (txn.is_scheduled or txn.category is not TransactionCategory.FINANCING)
            )
            if became_payment:
                VehicleService(self.store).register_installment_payment(
                    user_id, updated.vehicle_id, updated.installment_index, updated.date
                )

        logger.info("Transaction updated", extra={"user_id": user_id, "transaction_id": transaction_id})
        return updated


def _fuel_quantity(amount: float, price_per_unit: Optional[float]) -> Optional[float]:
    # amount may still be invalid here; validation runs afterwards
    if not amount or amount <= 0:
        return None
    return fuel_quantity(amount, price_per_unit)
