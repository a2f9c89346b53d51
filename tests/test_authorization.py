"""Decision table tests for the directory RBAC rules."""

import pytest

from app.core.exceptions import AuthorizationDenied
from app.models.user import Role
from app.services.authorization import (
    ADMIN_SELF_DELETE,
    MODERATOR_DELETE_SCOPE,
    ONLY_ADMIN_CREATES,
    USER_CANNOT_DELETE,
    Decision,
    Operation,
    Principal,
    assignable_roles,
    decide,
    ensure_allowed,
)

ADMIN = Principal(id=1, role=Role.ADMIN)
OTHER_ADMIN = Principal(id=2, role=Role.ADMIN)
MODERATOR = Principal(id=3, role=Role.MODERATOR)
USER = Principal(id=4, role=Role.USER)
OTHER_MODERATOR = Principal(id=5, role=Role.MODERATOR)
OTHER_USER = Principal(id=6, role=Role.USER)

ALLOW = Decision(allowed=True)


def _deny(reason: str) -> Decision:
    return Decision(allowed=False, reason=reason)


@pytest.mark.parametrize(
    ("actor", "target", "expected"),
    [
        (ADMIN, ADMIN, _deny(ADMIN_SELF_DELETE)),
        (ADMIN, OTHER_ADMIN, ALLOW),
        (ADMIN, MODERATOR, ALLOW),
        (ADMIN, USER, ALLOW),
        (MODERATOR, ADMIN, _deny(MODERATOR_DELETE_SCOPE)),
        (MODERATOR, MODERATOR, _deny(MODERATOR_DELETE_SCOPE)),
        (MODERATOR, OTHER_MODERATOR, _deny(MODERATOR_DELETE_SCOPE)),
        (MODERATOR, USER, ALLOW),
        (USER, ADMIN, _deny(USER_CANNOT_DELETE)),
        (USER, MODERATOR, _deny(USER_CANNOT_DELETE)),
        (USER, USER, _deny(USER_CANNOT_DELETE)),
        (USER, OTHER_USER, _deny(USER_CANNOT_DELETE)),
    ],
)
def test_delete_decision_table(actor: Principal, target: Principal, expected: Decision) -> None:
    assert decide(actor, Operation.DELETE, target) == expected


def test_delete_examples_by_id() -> None:
    assert decide(Principal(1, Role.ADMIN), Operation.DELETE, Principal(1, Role.ADMIN)).allowed is False
    assert decide(Principal(1, Role.ADMIN), Operation.DELETE, Principal(2, Role.ADMIN)).allowed is True
    assert decide(Principal(3, Role.MODERATOR), Operation.DELETE, Principal(4, Role.USER)).allowed is True
    assert decide(Principal(3, Role.MODERATOR), Operation.DELETE, Principal(5, Role.MODERATOR)).allowed is False


@pytest.mark.parametrize("target", [ADMIN, OTHER_ADMIN, MODERATOR, OTHER_MODERATOR, USER, OTHER_USER])
def test_view_one_for_privileged_roles_is_allowed_for_any_target(target: Principal) -> None:
    assert decide(ADMIN, Operation.VIEW_ONE, target) == ALLOW
    assert decide(MODERATOR, Operation.VIEW_ONE, target) == ALLOW


@pytest.mark.parametrize("target", [ADMIN, MODERATOR, OTHER_USER])
def test_view_one_for_basic_user_is_limited_to_self(target: Principal) -> None:
    assert decide(USER, Operation.VIEW_ONE, target) == _deny("access denied")
    assert decide(USER, Operation.VIEW_ONE, USER) == ALLOW


@pytest.mark.parametrize("actor", [ADMIN, MODERATOR, USER])
def test_everyone_can_list_the_directory(actor: Principal) -> None:
    assert decide(actor, Operation.VIEW_LIST) == ALLOW


def test_only_admin_creates_accounts_with_any_role() -> None:
    for role in Role:
        assert decide(ADMIN, Operation.CREATE, None, role) == ALLOW
    assert decide(MODERATOR, Operation.CREATE, None, Role.USER) == _deny(ONLY_ADMIN_CREATES)
    assert decide(USER, Operation.CREATE) == _deny(ONLY_ADMIN_CREATES)


@pytest.mark.parametrize(
    ("actor", "target", "allowed"),
    [
        (ADMIN, ADMIN, True),
        (ADMIN, MODERATOR, True),
        (ADMIN, USER, True),
        (MODERATOR, MODERATOR, True),
        (MODERATOR, USER, True),
        (MODERATOR, OTHER_MODERATOR, False),
        (MODERATOR, ADMIN, False),
        (USER, USER, True),
        (USER, OTHER_USER, False),
        (USER, MODERATOR, False),
    ],
)
def test_update_without_role_change(actor: Principal, target: Principal, allowed: bool) -> None:
    decision = decide(actor, Operation.UPDATE, target)
    assert decision.allowed is allowed
    if not allowed:
        assert decision.reason == "access denied"


def test_admin_may_assign_any_role() -> None:
    for role in Role:
        assert decide(ADMIN, Operation.UPDATE, MODERATOR, role) == ALLOW


def test_moderator_cannot_escalate_a_basic_user() -> None:
    assert decide(MODERATOR, Operation.UPDATE, USER, Role.USER) == ALLOW
    assert decide(MODERATOR, Operation.UPDATE, USER, Role.MODERATOR) == _deny("access denied")
    assert decide(MODERATOR, Operation.UPDATE, USER, Role.ADMIN) == _deny("access denied")


def test_denied_role_change_denies_whole_update_even_on_self() -> None:
    # Field edits on self are allowed, but a role request turns it into a denial.
    assert decide(MODERATOR, Operation.UPDATE, MODERATOR) == ALLOW
    assert decide(MODERATOR, Operation.UPDATE, MODERATOR, Role.ADMIN) == _deny("access denied")
    assert decide(USER, Operation.UPDATE, USER) == ALLOW
    assert decide(USER, Operation.UPDATE, USER, Role.MODERATOR) == _deny("access denied")


@pytest.mark.parametrize("operation", [Operation.VIEW_ONE, Operation.UPDATE, Operation.DELETE])
def test_missing_target_is_denied(operation: Operation) -> None:
    assert decide(ADMIN, operation, None) == _deny("access denied")


def test_decide_is_idempotent() -> None:
    first = decide(MODERATOR, Operation.UPDATE, USER, Role.ADMIN)
    second = decide(MODERATOR, Operation.UPDATE, USER, Role.ADMIN)
    assert first == second
    assert decide(ADMIN, Operation.DELETE, OTHER_ADMIN) == decide(ADMIN, Operation.DELETE, OTHER_ADMIN)


def test_assignable_roles_follow_role_change_rules() -> None:
    assert assignable_roles(ADMIN) == (Role.ADMIN, Role.MODERATOR, Role.USER)
    assert assignable_roles(MODERATOR) == ()
    assert assignable_roles(MODERATOR, USER) == (Role.USER,)
    assert assignable_roles(MODERATOR, OTHER_MODERATOR) == ()
    assert assignable_roles(USER, USER) == ()


def test_ensure_allowed_raises_with_reason() -> None:
    ensure_allowed(ADMIN, Operation.DELETE, USER)
    with pytest.raises(AuthorizationDenied) as exc_info:
        ensure_allowed(ADMIN, Operation.DELETE, ADMIN)
    assert exc_info.value.reason == ADMIN_SELF_DELETE
