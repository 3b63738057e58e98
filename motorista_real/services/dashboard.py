"""Read-side composition of the projection engine for one driver"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from motorista_real.domain.models import (
    DailyFinancialSnapshot,
    DaySummary,
    DynamicGoal,
    GoalProgress,
    Transaction,
    User,
    Vehicle,
)
from motorista_real.domain.projection import (
    compute_daily_snapshot,
    compute_dynamic_goal,
    goal_progress,
    resolve_base_goal,
)
from motorista_real.domain.reports import upcoming_obligations, weekly_summary
from motorista_real.infrastructure.database.kv_store import KeyValueStore
from motorista_real.infrastructure.database.repositories import TransactionRepository, VehicleRepository
from motorista_real.infrastructure.observability.metrics import record_goal_completion


@dataclass
class Dashboard:
    vehicle: Vehicle
    snapshot: DailyFinancialSnapshot
    goal: DynamicGoal
    progress: GoalProgress


class DashboardService:
    """Recomputes everything from persisted transactions on every read"""

    def __init__(self, store: KeyValueStore):
        self.vehicles = VehicleRepository(store)
        self.transactions = TransactionRepository(store)

    def _vehicle(self, user: User, vehicle_id: Optional[str]) -> Optional[Vehicle]:
        if vehicle_id is not None:
            return self.vehicles.get(user.uid, vehicle_id)
        return self.vehicles.get_active(user.uid)

    def daily_dashboard(self, user: User, today: date, vehicle_id: Optional[str] = None) -> Optional[Dashboard]:
        """Snapshot + dynamic goal for the active (or given) vehicle; None without vehicles"""
        vehicle = self._vehicle(user, vehicle_id)
        if vehicle is None:
            return None

        history = self.transactions.list_for_user(user.uid, vehicle.vehicle_id)
        snapshot = compute_daily_snapshot(vehicle, history, today, include_depreciation=user.is_pro)
        goal = compute_dynamic_goal(resolve_base_goal(user, vehicle), history, today, vehicle.vehicle_id)
        progress = goal_progress(snapshot.profit, goal.dynamic_goal)

        record_goal_completion(goal.dynamic_goal, progress.raw_percent)
        return Dashboard(vehicle=vehicle, snapshot=snapshot, goal=goal, progress=progress)

    def weekly_report(self, user: User, today: date, vehicle_id: Optional[str] = None, days: int = 7) -> List[DaySummary]:
        return weekly_summary(self.transactions.list_for_user(user.uid, vehicle_id), today, days)

    def upcoming(self, user: User, today: date, vehicle_id: Optional[str] = None, limit: Optional[int] = None) -> List[Transaction]:
        return upcoming_obligations(self.transactions.list_for_user(user.uid, vehicle_id), today, limit)
