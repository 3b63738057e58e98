"""Dependency injection for FastAPI endpoints"""

from functools import lru_cache

from fastapi import Depends, HTTPException, Request

from motorista_real.domain.exceptions import NotAuthenticatedError
from motorista_real.domain.models import User
from motorista_real.infrastructure.clients.identity import IdentityProviderClient
from motorista_real.infrastructure.database.kv_store import KeyValueStore, SqlKeyValueStore
from motorista_real.infrastructure.database.session import SessionLocal, init_db
from motorista_real.services.accounts import AccountService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


@lru_cache()
def get_store() -> KeyValueStore:
    """Process-wide store; the lock inside it must be shared by every request"""
    init_db()
    return SqlKeyValueStore(SessionLocal)


def get_identity_client() -> IdentityProviderClient:
    """Provide identity provider client instance"""
    return IdentityProviderClient()


def get_current_user(store: KeyValueStore = Depends(get_store)) -> User:
    """Logged-in user or 401"""
    try:
        return AccountService(store).current_user()
    except NotAuthenticatedError as e:
        raise HTTPException(status_code=401, detail=str(e))
