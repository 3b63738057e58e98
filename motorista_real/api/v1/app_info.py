"""/v1/app/version - release notes and their dismissal"""

from fastapi import APIRouter, Depends

from motorista_real.api.dependencies import get_store
from motorista_real.api.v1.schemas import AppVersionResponse, DismissVersionRequest
from motorista_real.infrastructure.database.kv_store import KeyValueStore
from motorista_real.services.accounts import AccountService

router = APIRouter()


@router.get("/app/version", response_model=AppVersionResponse)
def get_app_version(store: KeyValueStore = Depends(get_store)):
    accounts = AccountService(store)
    info = accounts.get_app_version()
    return AppVersionResponse(
        current_version=info.current_version,
        latest_version=info.latest_version,
        release_notes=info.release_notes,
        is_mandatory=info.is_mandatory,
        has_unseen_notes=accounts.check_update_status(info.current_version),
    )


@router.post("/app/version/dismiss", status_code=204)
def dismiss_release_notes(body: DismissVersionRequest, store: KeyValueStore = Depends(get_store)):
    AccountService(store).dismiss_version_notes(body.version)
