import asyncio

import pytest

from notehub.core.errors import (
    AccessDenied, AuthExpired, AuthInvalid, AuthMissing, MalformedReference, ResourceNotFound
)
from notehub.domains.access.context import RequestAuthorizer, RequestContext
from notehub.domains.access.entities import ResourceKind, Visibility
from notehub.domains.access.resolver import ResourcePathResolver
from notehub.domains.identity.entities import ANONYMOUS, Anonymous

from tests.conftest import EDITOR, OWNER, STRANGER, VIEWER, bearer


@pytest.fixture
def authorizer(tokens):
    return RequestAuthorizer(tokens, ResourcePathResolver(), allow_guest_read=True)


def _authorize(authorizer, store, method, path, header=None):
    return asyncio.run(authorizer.authorize(method, path, header, store))


def test_public_endpoints_skip_everything(authorizer, store):
    ctx = _authorize(authorizer, store, "POST", "/api/auth/login", "Bearer rubbish")

    assert ctx.identity is ANONYMOUS
    assert store.calls == []


def test_viewer_reads_pages(authorizer, store, tokens):
    ctx = _authorize(authorizer, store, "GET", "/api/notebooks/7/pages", bearer(tokens, VIEWER))

    assert ctx.user_id == VIEWER.user_id
    assert ctx.notebook_id == 7
    assert ctx.decision.role == "Viewer"


def test_both_forms_give_same_context(authorizer, store, tokens):
    header = bearer(tokens, EDITOR)
    flat = _authorize(authorizer, store, "POST", "/api/notebooks/pages/7", header)
    nested = _authorize(authorizer, store, "POST", "/api/notebooks/7/pages", header)

    assert (flat.notebook_id, flat.resource, flat.decision) == (nested.notebook_id, nested.resource, nested.decision)


def test_nested_resources_check_the_owning_notebook(authorizer, store, tokens):
    header = bearer(tokens, VIEWER)

    for path in ("/api/pages/70", "/api/pages/70/questions", "/api/questions/700/answers", "/api/answers/7000"):
        ctx = _authorize(authorizer, store, "GET", path, header)
        assert ctx.notebook_id == 7


def test_viewer_cannot_write_pages(authorizer, store, tokens):
    with pytest.raises(AccessDenied) as excinfo:
        _authorize(authorizer, store, "PUT", "/api/pages/70", bearer(tokens, VIEWER))
    assert excinfo.value.message == "Edit permission required"


def test_only_owner_manages_collaborators(authorizer, store, tokens):
    ctx = _authorize(authorizer, store, "DELETE", "/api/notebooks/7/collaborators/2", bearer(tokens, OWNER))
    assert ctx.param("user_id") == 2

    with pytest.raises(AccessDenied) as excinfo:
        _authorize(authorizer, store, "POST", "/api/notebooks/7/collaborators", bearer(tokens, EDITOR))
    assert excinfo.value.message == "Only owners can share"


def test_missing_token_rejected_before_any_lookup(authorizer, store):
    with pytest.raises(AuthMissing):
        _authorize(authorizer, store, "POST", "/api/notebooks/7/pages")
    assert store.calls == []


def test_authentication_comes_before_id_parsing(authorizer, store):
    with pytest.raises(AuthMissing):
        _authorize(authorizer, store, "PUT", "/api/pages/abc")
    with pytest.raises(AuthInvalid):
        _authorize(authorizer, store, "PUT", "/api/pages/abc", "Bearer forged")


def test_malformed_id_rejected_before_any_lookup(authorizer, store, tokens):
    with pytest.raises(MalformedReference):
        _authorize(authorizer, store, "GET", "/api/notebooks/abc", bearer(tokens, OWNER))
    assert store.calls == []


def test_expired_token(authorizer, store, tokens, clock):
    header = bearer(tokens, OWNER)
    clock.advance(hours=25)

    with pytest.raises(AuthExpired):
        _authorize(authorizer, store, "GET", "/api/notebooks/7", header)


def test_guest_reads_public_notebook(authorizer, store):
    store.set_visibility(7, Visibility.PUBLIC)

    ctx = _authorize(authorizer, store, "GET", "/api/notebooks/messages/7")
    assert isinstance(ctx.identity, Anonymous)
    assert ctx.decision.can_view
    assert not ctx.decision.can_edit
    assert ctx.optional_user_id is None


def test_guest_denied_private_notebook(authorizer, store):
    with pytest.raises(AccessDenied):
        _authorize(authorizer, store, "GET", "/api/notebooks/7")


def test_guest_cannot_write_even_when_public(authorizer, store):
    store.set_visibility(7, Visibility.PUBLIC)

    with pytest.raises(AuthMissing):
        _authorize(authorizer, store, "POST", "/api/notebooks/7/messages")


def test_malformed_header_is_never_a_guest(authorizer, store):
    store.set_visibility(7, Visibility.PUBLIC)

    with pytest.raises(AuthMissing):
        _authorize(authorizer, store, "GET", "/api/notebooks/7", "Token abc")


def test_guest_reads_can_be_switched_off(tokens, store):
    authorizer = RequestAuthorizer(tokens, ResourcePathResolver(), allow_guest_read=False)
    store.set_visibility(7, Visibility.PUBLIC)

    with pytest.raises(AuthMissing):
        _authorize(authorizer, store, "GET", "/api/notebooks/7")


def test_stranger_sees_public_notebook(authorizer, store, tokens):
    store.set_visibility(7, Visibility.PUBLIC)

    ctx = _authorize(authorizer, store, "GET", "/api/notebooks/7", bearer(tokens, STRANGER))
    assert ctx.decision.can_view
    assert ctx.decision.role is None


def test_missing_nested_resource_is_not_found(authorizer, store, tokens):
    with pytest.raises(ResourceNotFound) as excinfo:
        _authorize(authorizer, store, "GET", "/api/pages/71", bearer(tokens, OWNER))
    assert excinfo.value.message == "Page not found"


def test_missing_notebook_is_denied(authorizer, store, tokens):
    with pytest.raises(AccessDenied):
        _authorize(authorizer, store, "GET", "/api/notebooks/999", bearer(tokens, OWNER))


def test_unknown_route(authorizer, store, tokens):
    with pytest.raises(AuthMissing):
        _authorize(authorizer, store, "GET", "/api/unknown")
    with pytest.raises(ResourceNotFound):
        _authorize(authorizer, store, "GET", "/api/unknown", bearer(tokens, OWNER))


def test_account_routes_need_no_notebook(authorizer, store, tokens):
    ctx = _authorize(authorizer, store, "GET", "/api/notebooks", bearer(tokens, STRANGER))

    assert ctx.notebook_id is None
    assert ctx.resource.kind is ResourceKind.NONE
    assert store.calls == []


def test_user_id_requires_authentication():
    with pytest.raises(AuthMissing):
        RequestContext(identity=ANONYMOUS).user_id


def test_early_auth_error(authorizer, tokens):
    assert isinstance(authorizer.early_auth_error("GET", "/api/nowhere", None), AuthMissing)
    assert isinstance(authorizer.early_auth_error("POST", "/api/notebooks", None), AuthMissing)
    assert isinstance(authorizer.early_auth_error("POST", "/api/notebooks", "Bearer forged"), AuthInvalid)
    assert authorizer.early_auth_error("GET", "/api/nowhere", bearer(tokens, OWNER)) is None
    assert authorizer.early_auth_error("POST", "/api/auth/login", None) is None
    assert authorizer.early_auth_error("GET", "/favicon.ico", None) is None


def test_early_auth_error_lets_guests_through_on_read_routes(authorizer):
    assert authorizer.early_auth_error("GET", "/api/notebooks/7", None) is None
    assert isinstance(authorizer.early_auth_error("PATCH", "/api/notebooks/7", None), AuthMissing)
