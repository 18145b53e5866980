import asyncio

import pytest

from notehub.core.errors import AccessDenied
from notehub.domains.access.entities import (
    DENY_ALL, NotebookAccessFacts, Permission, Role, Visibility
)
from notehub.domains.access.services import AuthorizationEngine, decide, role_label
from notehub.domains.identity.entities import ANONYMOUS

from tests.conftest import EDITOR, OWNER, STRANGER, VIEWER


def _facts(visibility=Visibility.PRIVATE, roles=()):
    return NotebookAccessFacts(notebook_id=7, owner_id=OWNER.user_id, visibility=visibility, roles=frozenset(roles))


def test_owner_has_every_permission():
    decision = decide(OWNER, _facts())
    assert (decision.can_view, decision.can_edit, decision.is_owner) == (True, True, True)
    assert decision.role == "Owner"


def test_viewer_can_only_view():
    decision = decide(VIEWER, _facts(roles=[Role.VIEWER]))
    assert (decision.can_view, decision.can_edit, decision.is_owner) == (True, False, False)
    assert decision.role == "Viewer"


def test_editor_can_view_and_edit():
    decision = decide(EDITOR, _facts(roles=[Role.EDITOR]))
    assert (decision.can_view, decision.can_edit, decision.is_owner) == (True, True, False)
    assert decision.role == "Editor"


def test_public_notebook_viewable_by_anyone_but_never_editable():
    for identity in (ANONYMOUS, STRANGER):
        decision = decide(identity, _facts(visibility=Visibility.PUBLIC))
        assert decision.can_view
        assert not decision.can_edit
        assert not decision.is_owner
        assert decision.role is None


def test_private_notebook_hidden_from_guests_and_strangers():
    assert decide(ANONYMOUS, _facts()) == DENY_ALL
    assert not decide(STRANGER, _facts()).can_view


def test_guest_never_matches_a_grant():
    # grants only ever belong to a user id, so a guest cannot pick them up
    decision = decide(ANONYMOUS, _facts(roles=[Role.EDITOR]))
    assert not decision.can_view
    assert not decision.can_edit


def test_duplicate_grants_do_not_change_decision():
    single = decide(VIEWER, _facts(roles=[Role.VIEWER]))
    repeated = decide(VIEWER, NotebookAccessFacts(7, OWNER.user_id, Visibility.PRIVATE, frozenset([Role.VIEWER, Role.VIEWER])))
    assert single == repeated


def test_strongest_grant_wins():
    decision = decide(VIEWER, _facts(roles=[Role.VIEWER, Role.EDITOR]))
    assert decision.can_edit
    assert decision.role == "Editor"


def test_role_label():
    assert role_label(True, {Role.VIEWER}) == "Owner"
    assert role_label(False, {Role.VIEWER, Role.EDITOR}) == "Editor"
    assert role_label(False, {Role.VIEWER}) == "Viewer"
    assert role_label(False, set()) is None


def test_engine_answers_from_store(store):
    engine = AuthorizationEngine(store)

    assert asyncio.run(engine.can_view(VIEWER, 7))
    assert not asyncio.run(engine.can_edit(VIEWER, 7))
    assert asyncio.run(engine.can_edit(EDITOR, 7))
    assert asyncio.run(engine.is_owner(OWNER, 7))
    assert not asyncio.run(engine.can_view(STRANGER, 7))
    assert not asyncio.run(engine.can_view(ANONYMOUS, 7))


def test_visibility_change_applies_to_next_check(store):
    engine = AuthorizationEngine(store)
    assert not asyncio.run(engine.can_view(ANONYMOUS, 7))

    store.set_visibility(7, Visibility.PUBLIC)
    assert asyncio.run(engine.can_view(ANONYMOUS, 7))
    assert not asyncio.run(engine.can_edit(STRANGER, 7))


def test_revocation_applies_to_next_check(store):
    engine = AuthorizationEngine(store)
    assert asyncio.run(engine.can_view(VIEWER, 7))

    store.revoke(7, VIEWER.user_id)
    assert not asyncio.run(engine.can_view(VIEWER, 7))


def test_missing_notebook_denies_everyone(store):
    engine = AuthorizationEngine(store)
    assert asyncio.run(engine.evaluate(OWNER, 999)) == DENY_ALL


def test_failed_lookup_denies_instead_of_raising(store):
    store.failing.add("get_access_facts")
    engine = AuthorizationEngine(store)

    assert asyncio.run(engine.evaluate(OWNER, 7)) == DENY_ALL
    with pytest.raises(AccessDenied):
        asyncio.run(engine.check(OWNER, 7, Permission.VIEW))


def test_check_returns_decision_when_allowed(store):
    decision = asyncio.run(AuthorizationEngine(store).check(EDITOR, 7, Permission.EDIT))
    assert decision.can_edit
    assert decision.role == "Editor"


@pytest.mark.parametrize(
    "identity, permission, message",
    [
        (VIEWER, Permission.EDIT, "Edit permission required"),
        (EDITOR, Permission.OWNER, "Only owners can manage this notebook"),
        (STRANGER, Permission.VIEW, "Access denied"),
    ],
)
def test_check_raises_with_default_messages(store, identity, permission, message):
    with pytest.raises(AccessDenied) as excinfo:
        asyncio.run(AuthorizationEngine(store).check(identity, 7, permission))
    assert excinfo.value.message == message


def test_check_uses_custom_message(store):
    with pytest.raises(AccessDenied) as excinfo:
        asyncio.run(AuthorizationEngine(store).check(VIEWER, 7, Permission.OWNER, message="Only owners can share"))
    assert excinfo.value.message == "Only owners can share"
    assert excinfo.value.status_code == 403


def test_check_refuses_non_notebook_permission(store):
    with pytest.raises(ValueError):
        asyncio.run(AuthorizationEngine(store).check(OWNER, 7, Permission.AUTHENTICATED))
