"""/v1/vehicles - registration, active switch, amortization and goals"""

import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from motorista_real.api.dependencies import get_current_user, get_request_id, get_store
from motorista_real.api.v1.schemas import AmortizeRequest, VehicleCreate, VehicleGoalUpdate, VehicleResponse
from motorista_real.domain.exceptions import InvariantViolationError, NotFoundError, ValidationError
from motorista_real.domain.models import User
from motorista_real.infrastructure.database.kv_store import KeyValueStore
from motorista_real.services.vehicles import VehicleService

router = APIRouter()


def _raise_http(e: Exception, request_id: str) -> None:
    if isinstance(e, NotFoundError):
        raise HTTPException(status_code=404, detail=str(e))
    if isinstance(e, InvariantViolationError):
        logging.warning(f"Invariant violation: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))
    logging.info(f"Rejected input: {e}", extra={"request_id": request_id})
    raise HTTPException(status_code=422, detail=str(e))


@router.get("/vehicles", response_model=List[VehicleResponse])
def list_vehicles(user: User = Depends(get_current_user), store: KeyValueStore = Depends(get_store)):
    return [VehicleResponse.from_domain(v) for v in VehicleService(store).list_vehicles(user.uid)]


@router.post("/vehicles", response_model=VehicleResponse, status_code=201)
def register_vehicle(
    body: VehicleCreate,
    request: Request,
    as_of: date | None = Query(None, description="Registration date (defaults to today)"),
    user: User = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    """
    Register a vehicle.

    Future installments, rent and insurance payments are created as
    scheduled transactions in the same operation.
    """
    try:
        vehicle = VehicleService(store).register_vehicle(
            user.uid,
            type=body.type,
            brand=body.brand,
            model=body.model,
            plate=body.plate,
            profile=body.to_profile(),
            insurance=body.to_insurance(),
            custom_daily_goal=body.custom_daily_goal,
            custom_maint_rate=body.custom_maint_rate,
            year=body.year,
            model_year=body.model_year,
            current_km=body.current_km,
            as_of=as_of,
        )
    except ValidationError as e:
        _raise_http(e, get_request_id(request))
    return VehicleResponse.from_domain(vehicle)


@router.post("/vehicles/{vehicle_id}/activate", response_model=List[VehicleResponse])
def activate_vehicle(
    vehicle_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    try:
        vehicles = VehicleService(store).switch_active_vehicle(user.uid, vehicle_id)
    except InvariantViolationError as e:
        _raise_http(e, get_request_id(request))
    return [VehicleResponse.from_domain(v) for v in vehicles]


@router.post("/vehicles/{vehicle_id}/amortize", response_model=VehicleResponse)
def amortize_vehicle(
    vehicle_id: str,
    body: AmortizeRequest,
    request: Request,
    as_of: date | None = Query(None),
    user: User = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    """Pay installments early; paying all remaining ones settles the financing"""
    try:
        vehicle = VehicleService(store).amortize(
            user.uid,
            vehicle_id,
            body.paid_installments,
            body.new_installment_value,
            as_of=as_of,
        )
    except (NotFoundError, InvariantViolationError, ValidationError) as e:
        _raise_http(e, get_request_id(request))
    return VehicleResponse.from_domain(vehicle)


@router.patch("/vehicles/{vehicle_id}/goal", response_model=VehicleResponse)
def update_vehicle_goal(
    vehicle_id: str,
    body: VehicleGoalUpdate,
    request: Request,
    user: User = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    try:
        vehicle = VehicleService(store).update_goal(
            user.uid, vehicle_id, body.custom_daily_goal, body.custom_maint_rate
        )
    except (NotFoundError, ValidationError) as e:
        _raise_http(e, get_request_id(request))
    return VehicleResponse.from_domain(vehicle)
