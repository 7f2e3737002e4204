"""Unit tests for LifecycleController."""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from docgate.application.services import LifecycleController
from docgate.core.exceptions import AuthError, NotFoundError, ValidationError
from docgate.domain.entities import ANONYMOUS, CollectionOptions, CollectionSchema, string_rule


@pytest.fixture
def controller(accounts_schema, context):
    return LifecycleController(accounts_schema, context)


@pytest_asyncio.fixture
async def user_id(context, owner):
    """ID of an existing document in the referenced users collection."""
    users = LifecycleController(
        CollectionSchema(name="users", fields={"displayName": string_rule(1, 50)}), context
    )
    return (await users.create_document({"displayName": "U"}, owner))["id"]


@pytest_asyncio.fixture
async def account(controller, owner, user_id):
    return await controller.create_document(
        {"name": "A", "email": "a@x.com", "ownerId": user_id}, owner
    )


@pytest.mark.asyncio
class TestCreate:
    async def test_stamps_metadata_and_defaults(self, controller, owner, user_id):
        document = await controller.create_document(
            {"name": "A", "email": "a@x.com", "ownerId": user_id}, owner
        )

        assert document["id"]
        assert document["isActive"] is True
        assert document["createdBy"] == "u1"
        assert document["modifiedBy"] == "u1"
        assert document["created"] == document["modified"]
        assert document["balance"] == 0

    async def test_drops_fields_outside_allow_list(self, controller, owner):
        document = await controller.create_document(
            {"name": "A", "createdBy": "someone-else", "isAdmin": True}, owner
        )

        assert document["createdBy"] == "u1"
        assert "isAdmin" not in document

    async def test_duplicate_unique_value_rejected(self, controller, owner, account, user_id):
        with pytest.raises(ValidationError, match="email must be unique"):
            await controller.create_document(
                {"name": "A", "email": "a@x.com", "ownerId": user_id}, owner
            )

    async def test_anonymous_rejected_before_validation(self, controller):
        with pytest.raises(AuthError):
            await controller.create_document({}, ANONYMOUS)

    async def test_no_data(self, controller, owner):
        with pytest.raises(ValidationError, match="No data"):
            await controller.create_document(None, owner)

    async def test_public_post_without_metadata(self, public_schema, context):
        controller = LifecycleController(public_schema, context)

        document = await controller.create_document({"message": "hello"}, None)

        assert document["isActive"] is True
        assert "createdBy" not in document
        assert "created" not in document

    async def test_audit_message(self, controller, owner, account, audit_logger):
        message = audit_logger.info.call_args_list[-1].args[0]

        assert message.startswith(f"New item added to accounts with ID {account['id']}:")
        assert message.endswith("by u1")


@pytest.mark.asyncio
class TestRead:
    async def test_get_by_id(self, controller, owner, account):
        assert (await controller.get_document_by_id(account["id"], owner))["name"] == "A"

    async def test_get_missing_raises_not_found(self, controller, owner):
        with pytest.raises(NotFoundError):
            await controller.get_document_by_id("missing", owner)

    async def test_archived_document_hidden_from_active_reads(self, controller, owner, account):
        await controller.archive_document(account["id"], owner)

        assert await controller.get_active_documents(owner) == []
        with pytest.raises(NotFoundError):
            await controller.get_document_by_id(account["id"], owner)

    async def test_read_all_and_owner_admin_only(self, controller, owner, admin, account):
        await controller.archive_document(account["id"], owner)

        assert len(await controller.get_all_documents(admin)) == 1
        assert len(await controller.get_user_documents(admin, "u1")) == 1
        with pytest.raises(AuthError):
            await controller.get_all_documents(owner)
        with pytest.raises(AuthError):
            await controller.get_user_documents(owner, "u1")

    async def test_mine(self, controller, owner, other_user, account):
        assert [d["id"] for d in await controller.get_my_documents(owner)] == [account["id"]]
        assert await controller.get_my_documents(other_user) == []

    async def test_by_prop_and_props(self, controller, owner, account):
        assert len(await controller.get_documents_by_prop("email", "a@x.com", owner)) == 1
        assert await controller.get_documents_by_props({"name": "A", "email": "b@x.com"}, owner) == []

    async def test_recent_and_search(self, controller, owner, account):
        second = await controller.create_document({"name": "Another"}, owner)

        recent = await controller.get_recent_documents(owner)
        assert [d["id"] for d in recent] == [second["id"], account["id"]]

        found = await controller.search_documents_by_prop("name", "ano", owner)
        assert [d["id"] for d in found] == [second["id"]]

    async def test_anonymous_read_of_private_collection(self, controller):
        with pytest.raises(AuthError, match="You must be logged in to see this"):
            await controller.get_active_documents(ANONYMOUS)


@pytest.mark.asyncio
class TestUpdate:
    async def test_only_creator_may_update(self, context, owner, other_user):
        schema = CollectionSchema(name="notes", fields={"text": string_rule(1, 100, required=True)})
        controller = LifecycleController(schema, context)
        created = await controller.create_document({"text": "v1"}, other_user)

        with pytest.raises(AuthError):
            await controller.update_document(created["id"], {"text": "v2"}, owner)

        updated = await controller.update_document(created["id"], {"text": "v2"}, other_user)
        assert updated["text"] == "v2"
        assert updated["createdBy"] == "u2"

    async def test_merges_and_restamps(self, controller, owner, admin, account):
        updated = await controller.update_document(account["id"], {"name": "B"}, admin)

        assert updated["name"] == "B"
        assert updated["email"] == "a@x.com"
        assert updated["createdBy"] == "u1"
        assert updated["created"] == account["created"]
        assert updated["modifiedBy"] == "admin-1"

    async def test_resubmitting_own_unique_value(self, controller, owner, account):
        updated = await controller.update_document(
            account["id"], {"name": "A2", "email": "a@x.com"}, owner
        )

        assert updated["name"] == "A2"

    async def test_payload_validated_alone(self, controller, owner, account):
        with pytest.raises(ValidationError, match="Prop name is required"):
            await controller.update_document(account["id"], {"email": "new@x.com"}, owner)

    async def test_missing_document(self, controller, owner):
        with pytest.raises(NotFoundError):
            await controller.update_document("missing", {"name": "B"}, owner)

    async def test_audit_contains_diff(self, controller, owner, account, audit_logger):
        await controller.update_document(account["id"], {"name": "B"}, owner)

        message = audit_logger.info.call_args.args[0]
        assert f"accounts: {account['id']} updated by user u1:" in message
        assert "\n  name: A --> B" in message


@pytest.mark.asyncio
class TestArchiveLifecycle:
    async def test_archive_then_dearchive(self, controller, owner, admin, account):
        archived = await controller.archive_document(account["id"], owner)
        assert archived["isActive"] is False

        again = await controller.archive_document(account["id"], owner)
        assert again["isActive"] is False

        restored = await controller.dearchive_document(account["id"], admin)
        assert restored["isActive"] is True

    async def test_dearchive_refused_for_owner(self, controller, owner, account):
        await controller.archive_document(account["id"], owner)

        with pytest.raises(AuthError):
            await controller.dearchive_document(account["id"], owner)

    async def test_archive_by_other_user(self, controller, other_user, account):
        with pytest.raises(AuthError):
            await controller.archive_document(account["id"], other_user)

    async def test_archive_missing(self, controller, owner):
        with pytest.raises(NotFoundError):
            await controller.archive_document("missing", owner)

    async def test_dearchive_audited_as_warning(self, controller, owner, admin, account, audit_logger):
        await controller.archive_document(account["id"], owner)
        await controller.dearchive_document(account["id"], admin)

        audit_logger.warn.assert_called_once_with(
            f"accounts: {account['id']} - DE-ARCHIVED by user admin-1"
        )


@pytest.mark.asyncio
class TestDelete:
    async def test_admin_delete(self, controller, admin, account):
        assert await controller.delete_document(account["id"], admin) == {"id": account["id"]}

        assert await controller.get_all_documents(admin) == []

    async def test_delete_missing_raises_not_found(self, controller, admin):
        with pytest.raises(NotFoundError):
            await controller.delete_document("missing", admin)

    async def test_owner_delete_needs_option(self, controller, context, owner, account):
        with pytest.raises(AuthError):
            await controller.delete_document(account["id"], owner)

        schema = CollectionSchema(
            name="accounts",
            fields=controller.schema.fields,
            options=CollectionOptions(allow_user_delete=True),
        )
        permissive = LifecycleController(schema, context)
        assert await permissive.delete_document(account["id"], owner) == {"id": account["id"]}

    async def test_archived_document_can_be_deleted(self, controller, owner, admin, account):
        await controller.archive_document(account["id"], owner)

        assert await controller.delete_document(account["id"], admin) == {"id": account["id"]}


@pytest.mark.asyncio
class TestAuditFailures:
    async def test_audit_failure_does_not_change_result(self, controller, owner, user_id, audit_logger):
        audit_logger.info.side_effect = RuntimeError("log sink down")

        document = await controller.create_document({"name": "A", "ownerId": user_id}, owner)

        assert document["name"] == "A"

    async def test_data_service_errors_propagate(self, accounts_schema, context, owner):
        context.data_service.create_document = AsyncMock(side_effect=RuntimeError("db down"))
        controller = LifecycleController(accounts_schema, context)

        with pytest.raises(RuntimeError, match="db down"):
            await controller.create_document({"name": "A"}, owner)
