"""/v1/transactions - earnings and expenses entered by the driver"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from motorista_real.api.dependencies import get_current_user, get_request_id, get_store
from motorista_real.api.v1.schemas import TransactionCreate, TransactionResponse, TransactionUpdate
from motorista_real.domain.exceptions import NotFoundError, ValidationError
from motorista_real.domain.models import TransactionType, User
from motorista_real.infrastructure.database.kv_store import KeyValueStore
from motorista_real.services.ledger import LedgerService

router = APIRouter()


@router.get("/transactions", response_model=List[TransactionResponse])
def list_transactions(
    type: Optional[TransactionType] = Query(None),
    on_date: Optional[date] = Query(None, alias="date"),
    vehicle_id: Optional[str] = Query(None),
    user: User = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    """Transactions newest first, optionally filtered by type, day and vehicle"""
    txns = LedgerService(store).list_transactions(user.uid, type, on_date, vehicle_id)
    return [TransactionResponse.from_domain(t) for t in txns]


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
def record_transaction(
    body: TransactionCreate,
    request: Request,
    user: User = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    try:
        txn = LedgerService(store).record_transaction(
            user.uid,
            category=body.category,
            amount=body.amount,
            on_date=body.date or date.today(),
            type=body.type,
            vehicle_id=body.vehicle_id,
            km_input=body.km_input,
            fuel_type=body.fuel_type,
            price_per_unit=body.price_per_unit,
            fuel_quantity=body.fuel_quantity,
            installment_index=body.installment_index,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        logging.info(f"Rejected transaction: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))
    return TransactionResponse.from_domain(txn)


@router.patch("/transactions/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: str,
    body: TransactionUpdate,
    request: Request,
    user: User = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    changes = body.model_dump(exclude={"mark_paid"}, exclude_unset=True)
    try:
        txn = LedgerService(store).update_transaction(
            user.uid, transaction_id, mark_paid=body.mark_paid, **changes
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        logging.info(f"Rejected transaction edit: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))
    return TransactionResponse.from_domain(txn)
