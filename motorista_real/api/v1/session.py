"""POST /v1/session/* - mock login, provider login and logout"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from motorista_real.api.dependencies import get_identity_client, get_request_id, get_store
from motorista_real.api.v1.schemas import LoginRequest, ProviderLoginRequest, UserResponse
from motorista_real.domain.exceptions import AuthProviderError, ValidationError
from motorista_real.infrastructure.clients.identity import IdentityProviderClient
from motorista_real.infrastructure.database.kv_store import KeyValueStore
from motorista_real.infrastructure.observability.metrics import auth_provider_failures_counter
from motorista_real.services.accounts import AccountService

router = APIRouter()


@router.post("/session/login", response_model=UserResponse)
def login(body: LoginRequest, store: KeyValueStore = Depends(get_store)):
    """Mock email login; the account is created on first use"""
    try:
        user = AccountService(store).login(body.email)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return UserResponse.from_domain(user)


@router.post("/session/provider-login", response_model=UserResponse)
async def provider_login(
    body: ProviderLoginRequest,
    request: Request,
    store: KeyValueStore = Depends(get_store),
    identity_client: IdentityProviderClient = Depends(get_identity_client),
):
    """
    Sign in with the external identity provider.

    Flow:
    1. Exchange the provider token for the account profile
    2. Store it as the session user (no daily goal configured yet)
    """
    request_id = get_request_id(request)
    try:
        profile = await identity_client.fetch_profile(body.id_token)
    except AuthProviderError as e:
        auth_provider_failures_counter.inc()
        logging.error(f"Identity provider error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Identity provider unavailable")

    return UserResponse.from_domain(AccountService(store).login_with_provider(profile))


@router.post("/session/logout", status_code=204)
def logout(store: KeyValueStore = Depends(get_store)):
    AccountService(store).logout()
