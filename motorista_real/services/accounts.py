"""Mock login, profile edits and release-notes bookkeeping"""

import base64
import logging
from dataclasses import replace
from typing import Optional

from motorista_real.config import settings
from motorista_real.domain.exceptions import NotAuthenticatedError, ValidationError
from motorista_real.domain.models import AppVersionInfo, GoalType, ProviderProfile, User
from motorista_real.infrastructure.database.kv_store import KeyValueStore
from motorista_real.infrastructure.database.repositories import AppStateRepository, UserRepository

logger = logging.getLogger(__name__)

UID_LENGTH = 12


def uid_for_email(email: str) -> str:
    """Stable mock uid: first 12 chars of the email's base64"""
    return base64.urlsafe_b64encode(email.encode("utf-8")).decode("ascii")[:UID_LENGTH]


class AccountService:
    def __init__(self, store: KeyValueStore):
        self.users = UserRepository(store)
        self.app_state = AppStateRepository(store)

    def login(self, email: str) -> User:
        """Mock login: any well-formed email gets an account"""
        email = (email or "").strip()
        if "@" not in email:
            raise ValidationError("A valid email is required")

        user = User(
            uid=uid_for_email(email),
            email=email,
            name=email.split("@")[0],
            daily_goal=settings.default_daily_goal,
            is_pro=False,
        )
        self.users.save(user)
        logger.info("User logged in", extra={"user_id": user.uid, "step": "login"})
        return user

    def login_with_provider(self, profile: ProviderProfile) -> User:
        """Create the session user from an identity provider profile; no goal set yet"""
        user = User(
            uid=profile.external_id,
            email=profile.email,
            name=profile.display_name or "Motorista",
            daily_goal=0.0,
            is_pro=False,
        )
        self.users.save(user)
        logger.info("User logged in via provider", extra={"user_id": user.uid, "step": "provider_login"})
        return user

    def logout(self) -> None:
        self.users.clear()

    def current_user(self) -> User:
        user = self.users.get()
        if user is None:
            raise NotAuthenticatedError("No user logged in")
        return user

    def update_user(
        self,
        daily_goal: Optional[float] = None,
        is_pro: Optional[bool] = None,
        goal_type: Optional[GoalType] = None,
        name: Optional[str] = None,
    ) -> User:
        """Partial update; None leaves a field untouched"""
        if daily_goal is not None and daily_goal < 0:
            raise ValidationError("Daily goal cannot be negative")

        with self.users.store.transaction():
            user = self.current_user()
            changes = {
                "daily_goal": daily_goal,
                "is_pro": is_pro,
                "goal_type": goal_type,
                "name": name,
            }
            user = replace(user, **{k: v for k, v in changes.items() if v is not None})
            return self.users.save(user)

    # Release notes

    def get_app_version(self) -> AppVersionInfo:
        return AppVersionInfo(
            current_version=settings.app_version,
            latest_version=settings.latest_version,
            release_notes=list(settings.release_notes),
            is_mandatory=settings.update_is_mandatory,
        )

    def check_update_status(self, current_version: str) -> bool:
        """True when release notes for current_version were not dismissed yet"""
        return self.app_state.get_last_seen_version() != current_version

    def dismiss_version_notes(self, version: str) -> None:
        self.app_state.set_last_seen_version(version)
