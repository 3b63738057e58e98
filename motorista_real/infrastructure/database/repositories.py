"""Data access layer for users, vehicles and transactions"""

import json
from typing import Callable, Iterable, List, Optional

from motorista_real.domain.exceptions import NotFoundError
from motorista_real.domain.models import Transaction, User, Vehicle
from motorista_real.infrastructure.database import codec
from motorista_real.infrastructure.database.kv_store import KeyValueStore

USER_KEY = "user"
VEHICLES_KEY = "vehicles"
TRANSACTIONS_KEY = "transactions"
LAST_SEEN_VERSION_KEY = "last_seen_version"


class UserRepository:
    """Repository for the logged-in user (single object)"""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get(self) -> Optional[User]:
        blob = self.store.get(USER_KEY)
        return codec.decode_user(json.loads(blob)) if blob else None

    def save(self, user: User) -> User:
        self.store.set(USER_KEY, codec.dumps(codec.encode_user(user)))
        return user

    def clear(self) -> None:
        self.store.delete(USER_KEY)


class VehicleRepository:
    """Repository for vehicles; one flat list across all users"""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _load(self, blob: Optional[str]) -> List[Vehicle]:
        return [codec.decode_vehicle(raw) for raw in codec.loads_list(blob)]

    def _mutate(self, fn: Callable[[List[Vehicle]], List[Vehicle]]) -> None:
        self.store.update(
            VEHICLES_KEY,
            lambda blob: codec.dumps([codec.encode_vehicle(v) for v in fn(self._load(blob))]),
        )

    def list_all(self) -> List[Vehicle]:
        return self._load(self.store.get(VEHICLES_KEY))

    def list_for_user(self, user_id: str) -> List[Vehicle]:
        return [v for v in self.list_all() if v.user_id == user_id]

    def get(self, user_id: str, vehicle_id: str) -> Vehicle:
        """Fetch a vehicle owned by user_id"""
        for vehicle in self.list_for_user(user_id):
            if vehicle.vehicle_id == vehicle_id:
                return vehicle
        raise NotFoundError(f"Vehicle {vehicle_id} not found")

    def get_active(self, user_id: str) -> Optional[Vehicle]:
        return next((v for v in self.list_for_user(user_id) if v.is_active), None)

    def add(self, vehicle: Vehicle) -> Vehicle:
        self._mutate(lambda vehicles: vehicles + [vehicle])
        return vehicle

    def replace(self, vehicle: Vehicle) -> Vehicle:
        self._mutate(lambda vehicles: [vehicle if v.vehicle_id == vehicle.vehicle_id else v for v in vehicles])
        return vehicle

    def set_active(self, user_id: str, vehicle_id: str) -> List[Vehicle]:
        """Flag vehicle_id active and every other vehicle of user_id inactive"""

        def activate(vehicles: List[Vehicle]) -> List[Vehicle]:
            for v in vehicles:
                if v.user_id == user_id:
                    v.is_active = v.vehicle_id == vehicle_id
            return vehicles

        self._mutate(activate)
        return self.list_for_user(user_id)


class TransactionRepository:
    """Repository for transactions; one flat list across all users"""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _load(self, blob: Optional[str]) -> List[Transaction]:
        return [codec.decode_transaction(raw) for raw in codec.loads_list(blob)]

    def _mutate(self, fn: Callable[[List[Transaction]], List[Transaction]]) -> None:
        self.store.update(
            TRANSACTIONS_KEY,
            lambda blob: codec.dumps([codec.encode_transaction(t) for t in fn(self._load(blob))]),
        )

    def list_all(self) -> List[Transaction]:
        return self._load(self.store.get(TRANSACTIONS_KEY))

    def list_for_user(self, user_id: str, vehicle_id: Optional[str] = None) -> List[Transaction]:
        return [
            t
            for t in self.list_all()
            if t.user_id == user_id and (vehicle_id is None or t.vehicle_id == vehicle_id)
        ]

    def get(self, user_id: str, transaction_id: str) -> Transaction:
        for txn in self.list_for_user(user_id):
            if txn.transaction_id == transaction_id:
                return txn
        raise NotFoundError(f"Transaction {transaction_id} not found")

    def add_many(self, transactions: Iterable[Transaction]) -> None:
        """Newest entries go first, matching the stored list order"""
        new_rows = list(transactions)
        if new_rows:
            self._mutate(lambda existing: new_rows + existing)

    def replace_many(self, transactions: Iterable[Transaction]) -> None:
        by_id = {t.transaction_id: t for t in transactions}
        if by_id:
            self._mutate(lambda existing: [by_id.get(t.transaction_id, t) for t in existing])

    def remove(self, transaction_ids: Iterable[str]) -> None:
        """Drop rows; only used to prune stale scheduled obligations"""
        doomed = set(transaction_ids)
        if doomed:
            self._mutate(lambda existing: [t for t in existing if t.transaction_id not in doomed])


class AppStateRepository:
    """Repository for small app-level values (release notes bookkeeping)"""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get_last_seen_version(self) -> Optional[str]:
        return self.store.get(LAST_SEEN_VERSION_KEY)

    def set_last_seen_version(self, version: str) -> None:
        self.store.set(LAST_SEEN_VERSION_KEY, version)
