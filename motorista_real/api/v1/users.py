"""GET/PATCH /v1/users/me - profile and goal preferences"""

from fastapi import APIRouter, Depends, HTTPException

from motorista_real.api.dependencies import get_current_user, get_store
from motorista_real.api.v1.schemas import UserResponse, UserUpdate
from motorista_real.domain.exceptions import ValidationError
from motorista_real.domain.models import User
from motorista_real.infrastructure.database.kv_store import KeyValueStore
from motorista_real.services.accounts import AccountService

router = APIRouter()


@router.get("/users/me", response_model=UserResponse)
def get_me(user: User = Depends(get_current_user)):
    return UserResponse.from_domain(user)


@router.patch("/users/me", response_model=UserResponse)
def update_me(
    body: UserUpdate,
    user: User = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    """Partial update of goal, pro flag, goal scope or name"""
    try:
        updated = AccountService(store).update_user(
            daily_goal=body.daily_goal,
            is_pro=body.is_pro,
            goal_type=body.goal_type,
            name=body.name,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return UserResponse.from_domain(updated)
