"""Unit tests for mock login, profile edits and release notes"""

import pytest
from motorista_real.config import settings
from motorista_real.domain.exceptions import NotAuthenticatedError, ValidationError
from motorista_real.domain.models import GoalType, ProviderProfile
from motorista_real.services.accounts import AccountService, uid_for_email


def test_uid_is_stable_and_short():
    assert uid_for_email("joao@example.com") == uid_for_email("joao@example.com")
    assert len(uid_for_email("joao@example.com")) == 12
    assert uid_for_email("joao@example.com") != uid_for_email("maria@example.com")


def test_login_creates_user_with_default_goal(store):
    user = AccountService(store).login("joao@example.com")

    assert user.name == "joao"
    assert user.daily_goal == settings.default_daily_goal
    assert user.is_pro is False
    assert AccountService(store).current_user() == user


@pytest.mark.parametrize("email", ["", "   ", "joao.example.com"])
def test_login_rejects_invalid_email(store, email):
    with pytest.raises(ValidationError):
        AccountService(store).login(email)


def test_provider_login_has_no_goal(store):
    profile = ProviderProfile(external_id="g-123", email="ana@gmail.com", display_name="Ana")

    user = AccountService(store).login_with_provider(profile)

    assert user.uid == "g-123"
    assert user.name == "Ana"
    assert user.daily_goal == 0


def test_logout_clears_session(store):
    accounts = AccountService(store)
    accounts.login("joao@example.com")
    accounts.logout()

    with pytest.raises(NotAuthenticatedError):
        accounts.current_user()


def test_update_user_is_partial(store):
    accounts = AccountService(store)
    accounts.login("joao@example.com")

    updated = accounts.update_user(daily_goal=350.0, goal_type=GoalType.GLOBAL)

    assert updated.daily_goal == 350.0
    assert updated.goal_type is GoalType.GLOBAL
    assert updated.name == "joao"
    assert accounts.current_user().daily_goal == 350.0


def test_update_user_rejects_negative_goal(store):
    accounts = AccountService(store)
    accounts.login("joao@example.com")

    with pytest.raises(ValidationError):
        accounts.update_user(daily_goal=-1.0)


def test_update_without_session_fails(store):
    with pytest.raises(NotAuthenticatedError):
        AccountService(store).update_user(is_pro=True)


def test_release_notes_until_dismissed(store):
    accounts = AccountService(store)
    version = accounts.get_app_version().current_version

    assert accounts.check_update_status(version) is True

    accounts.dismiss_version_notes(version)

    assert accounts.check_update_status(version) is False
    assert accounts.check_update_status("9.9.9") is True
