"""Unit tests for the PolicyGate authorization matrix."""

import pytest

from docgate.core.exceptions import AuthError, NotFoundError
from docgate.domain.entities import ANONYMOUS, CollectionOptions, Requester
from docgate.domain.services import Operation, PolicyGate
from docgate.domain.services.policy_gate import PUBLIC_READS

USER = Requester(uid="u1")
OTHER = Requester(uid="u2")
ADMIN = Requester(uid="root", admin=True)

PRIVATE = CollectionOptions()
PUBLIC_GET = CollectionOptions(is_public_get=True)
ADMIN_ONLY = CollectionOptions(is_admin_only=True, is_public_get=True)

OWNED = {"id": "d1", "createdBy": "u1"}


def allowed(operation, requester, options, existing=None) -> bool:
    try:
        PolicyGate.authorize(operation, requester, options, existing)
    except AuthError:
        return False
    return True


class TestCreate:
    def test_requires_authentication(self):
        assert allowed(Operation.CREATE, USER, PRIVATE)
        assert not allowed(Operation.CREATE, ANONYMOUS, PRIVATE)
        assert not allowed(Operation.CREATE, None, PRIVATE)

    def test_public_post_needs_no_meta_data(self):
        assert allowed(Operation.CREATE, ANONYMOUS, CollectionOptions(is_public_post=True, no_meta_data=True))
        assert not allowed(Operation.CREATE, ANONYMOUS, CollectionOptions(is_public_post=True))

    def test_refusal_message(self):
        with pytest.raises(AuthError, match="User is not authenticated"):
            PolicyGate.authorize(Operation.CREATE, ANONYMOUS, PRIVATE)


class TestReads:
    @pytest.mark.parametrize("operation", sorted(PUBLIC_READS, key=lambda op: op.value))
    def test_public_reads(self, operation):
        assert allowed(operation, ANONYMOUS, PUBLIC_GET)
        assert allowed(operation, USER, PRIVATE)
        assert not allowed(operation, ANONYMOUS, PRIVATE)

    @pytest.mark.parametrize("operation", sorted(PUBLIC_READS, key=lambda op: op.value))
    def test_admin_only_overrides_public_get(self, operation):
        assert allowed(operation, ADMIN, ADMIN_ONLY)
        assert not allowed(operation, USER, ADMIN_ONLY)
        assert not allowed(operation, ANONYMOUS, ADMIN_ONLY)

    def test_login_required_message(self):
        with pytest.raises(AuthError, match="You must be logged in to see this"):
            PolicyGate.authorize(Operation.READ_ONE, ANONYMOUS, PRIVATE)

    @pytest.mark.parametrize("operation", [Operation.READ_ALL, Operation.READ_OWNER])
    def test_admin_reads_ignore_public_flags(self, operation):
        assert allowed(operation, ADMIN, PRIVATE)
        assert not allowed(operation, USER, PUBLIC_GET)
        assert not allowed(operation, ANONYMOUS, PUBLIC_GET)

    def test_read_mine(self):
        assert allowed(Operation.READ_MINE, USER, PRIVATE)
        assert not allowed(Operation.READ_MINE, ANONYMOUS, PUBLIC_GET)
        assert not allowed(Operation.READ_MINE, USER, ADMIN_ONLY)
        assert allowed(Operation.READ_MINE, ADMIN, ADMIN_ONLY)


class TestOwnership:
    @pytest.mark.parametrize("operation", [Operation.UPDATE, Operation.ARCHIVE])
    def test_owner_or_admin(self, operation):
        assert allowed(operation, USER, PRIVATE, OWNED)
        assert allowed(operation, ADMIN, PRIVATE, OWNED)
        assert not allowed(operation, OTHER, PRIVATE, OWNED)
        assert not allowed(operation, ANONYMOUS, PUBLIC_GET, OWNED)

    def test_existence_checked_before_ownership(self):
        with pytest.raises(NotFoundError):
            PolicyGate.authorize(Operation.UPDATE, OTHER, PRIVATE, None)

    def test_dearchive_admin_only(self):
        assert allowed(Operation.DEARCHIVE, ADMIN, PRIVATE, OWNED)
        assert not allowed(Operation.DEARCHIVE, USER, PRIVATE, OWNED)
        assert not allowed(Operation.DEARCHIVE, USER, CollectionOptions(no_meta_data=True), OWNED)

    def test_delete_by_owner_needs_allow_user_delete(self):
        assert allowed(Operation.DELETE, ADMIN, PRIVATE, OWNED)
        assert not allowed(Operation.DELETE, USER, PRIVATE, OWNED)
        assert allowed(Operation.DELETE, USER, CollectionOptions(allow_user_delete=True), OWNED)
        assert not allowed(Operation.DELETE, OTHER, CollectionOptions(allow_user_delete=True), OWNED)
