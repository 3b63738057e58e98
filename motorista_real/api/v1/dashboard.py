"""GET /v1/dashboard and reports - real net profit and goal progress"""

import time
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from motorista_real.api.dependencies import get_current_user, get_request_id, get_store
from motorista_real.api.v1.schemas import (
    DashboardResponse,
    DaySummarySchema,
    TransactionResponse,
    WeeklyReportResponse,
)
from motorista_real.domain.exceptions import NotFoundError
from motorista_real.domain.models import User
from motorista_real.infrastructure.database.kv_store import KeyValueStore
from motorista_real.infrastructure.observability.logging import log_snapshot
from motorista_real.services.dashboard import DashboardService

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    request: Request,
    on_date: Optional[date] = Query(None, alias="date", description="Day to project (defaults to today)"),
    vehicle_id: Optional[str] = Query(None, description="Defaults to the active vehicle"),
    user: User = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    """
    Project the day's real net profit.

    Earnings minus expenses, amortized fixed costs, maintenance reserve and
    (pro accounts) depreciation, against the deficit-adjusted daily goal.
    """
    start_time = time.time()
    today = on_date or date.today()

    try:
        dashboard = DashboardService(store).daily_dashboard(user, today, vehicle_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if dashboard is None:
        raise HTTPException(status_code=404, detail="Register a vehicle to get started")

    snapshot, goal, progress = dashboard.snapshot, dashboard.goal, dashboard.progress
    duration_ms = (time.time() - start_time) * 1000
    log_snapshot(get_request_id(request), user.uid, dashboard.vehicle.vehicle_id, snapshot, goal, duration_ms)

    return DashboardResponse(
        vehicle_id=dashboard.vehicle.vehicle_id,
        date=snapshot.date,
        earnings=snapshot.earnings,
        expenses=snapshot.expenses,
        amortized_cost=snapshot.amortized_cost,
        maint_reserve=snapshot.maint_reserve,
        daily_depreciation=snapshot.daily_depreciation,
        profit=snapshot.profit,
        distance=snapshot.distance,
        distance_is_estimate=snapshot.distance_is_estimate,
        estimated_vehicle_value=snapshot.estimated_vehicle_value,
        base_goal=goal.base_goal,
        dynamic_goal=goal.dynamic_goal,
        accumulated_deficit=goal.accumulated_deficit,
        remaining_days=goal.remaining_days,
        is_diluted=goal.is_diluted,
        raw_percent=progress.raw_percent,
        display_percent=progress.display_percent,
        progress_percent=progress.progress_percent,
    )


@router.get("/reports/weekly", response_model=WeeklyReportResponse)
def weekly_report(
    on_date: Optional[date] = Query(None, alias="date"),
    vehicle_id: Optional[str] = Query(None),
    user: User = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    """Earnings vs expenses for the 7 days ending on the given date"""
    days = DashboardService(store).weekly_report(user, on_date or date.today(), vehicle_id)
    return WeeklyReportResponse(
        days=[DaySummarySchema(date=d.date, earnings=d.earnings, expenses=d.expenses) for d in days]
    )


@router.get("/obligations/upcoming", response_model=List[TransactionResponse])
def upcoming_obligations(
    on_date: Optional[date] = Query(None, alias="date"),
    vehicle_id: Optional[str] = Query(None),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    """Scheduled installments, rent and insurance not yet due"""
    txns = DashboardService(store).upcoming(user, on_date or date.today(), vehicle_id, limit)
    return [TransactionResponse.from_domain(t) for t in txns]
