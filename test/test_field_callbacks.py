"""
Tests for the default field callbacks against a real (in-memory) database:
read, write with authorization / validation / sanitization, and the
request-level permission gate.
"""

import pytest

from restmeta.exceptions import (
    FieldPermissionError,
    FieldUpdateError,
    FieldValidationError,
    InvalidPostIdError,
)
from restmeta.fields.callbacks import edit_post_permission_callback, get_meta_callback, update_meta_callback
from restmeta.fields.registry import FieldRegistry
from restmeta.fields.schema import FieldSchema, ValueType
from restmeta.services.meta_store import MetaStore
from utils.mock_utils import failing_update_meta, make_request


@pytest.fixture
def custom_meta(registry: FieldRegistry):
    return registry.get("post", "custom_meta")


class TestReadCallback:
    async def test_unset_value_reads_empty(self, test_db, test_post, custom_meta):
        assert await get_meta_callback(test_post, custom_meta, test_db) == ""

    async def test_unset_non_string_reads_none(self, test_db, test_post):
        reg = FieldRegistry()
        reg.register("post", "views", FieldSchema(description="d", value_type=ValueType.INTEGER))
        assert await get_meta_callback(test_post, reg.get("post", "views"), test_db) is None

    async def test_reads_storage_key_not_public_name(self, test_db, test_post, custom_meta):
        store = MetaStore(test_db)
        await store.update_meta(test_post.id, "_custom_meta", "stored")
        await store.update_meta(test_post.id, "custom_meta", "wrong key")
        assert await get_meta_callback(test_post, custom_meta, test_db) == "stored"

    async def test_read_has_no_side_effects(self, test_db, test_post, custom_meta):
        await get_meta_callback(test_post, custom_meta, test_db)
        assert await MetaStore(test_db).get_meta(test_post.id, "_custom_meta", default="absent") == "absent"


class TestWriteCallback:
    async def test_author_write_round_trips_sanitized(self, test_db, test_post, test_author, custom_meta):
        assert await update_meta_callback("Hello <script>", test_post, custom_meta, test_author, test_db) is True
        assert await get_meta_callback(test_post, custom_meta, test_db) == "Hello"

    async def test_editor_may_write_others_post(self, test_db, test_post, test_editor, custom_meta):
        assert await update_meta_callback("<b>ok</b>", test_post, custom_meta, test_editor, test_db) is True
        assert await get_meta_callback(test_post, custom_meta, test_db) == "ok"

    @pytest.mark.parametrize("intruder_name", ["other_author", "subscriber"])
    async def test_unauthorized_write_leaves_value(
        self, test_db, test_post, test_author, other_author, test_subscriber, custom_meta, intruder_name
    ):
        await update_meta_callback("Hello", test_post, custom_meta, test_author, test_db)
        intruder = {"other_author": other_author, "subscriber": test_subscriber}[intruder_name]

        with pytest.raises(FieldPermissionError) as exc_info:
            await update_meta_callback("x", test_post, custom_meta, intruder, test_db)

        assert exc_info.value.status_code == 403
        assert exc_info.value.error_code == "forbidden"
        assert await get_meta_callback(test_post, custom_meta, test_db) == "Hello"

    async def test_anonymous_write_denied(self, test_db, test_post, custom_meta):
        with pytest.raises(FieldPermissionError):
            await update_meta_callback("x", test_post, custom_meta, None, test_db)
        assert await get_meta_callback(test_post, custom_meta, test_db) == ""

    async def test_same_value_twice_succeeds(self, test_db, test_post, test_author, custom_meta):
        assert await update_meta_callback("same", test_post, custom_meta, test_author, test_db) is True
        assert await update_meta_callback("same", test_post, custom_meta, test_author, test_db) is True
        assert await get_meta_callback(test_post, custom_meta, test_db) == "same"

    async def test_malformed_value_rejected(self, test_db, test_post, test_author, custom_meta):
        with pytest.raises(FieldValidationError):
            await update_meta_callback({"nested": "object"}, test_post, custom_meta, test_author, test_db)
        assert await get_meta_callback(test_post, custom_meta, test_db) == ""

    async def test_permission_checked_before_validation(self, test_db, test_post, other_author, custom_meta):
        with pytest.raises(FieldPermissionError):
            await update_meta_callback(["bad"], test_post, custom_meta, other_author, test_db)

    async def test_typed_field_stores_coerced_value(self, test_db, test_post, test_author):
        reg = FieldRegistry()
        reg.register("post", "views", FieldSchema(description="d", value_type=ValueType.INTEGER), storage_key="_views")
        views = reg.get("post", "views")

        await update_meta_callback("17", test_post, views, test_author, test_db)

        assert await get_meta_callback(test_post, views, test_db) == 17

    async def test_store_failure_raises_update_failed(self, monkeypatch, test_db, test_post, test_author, custom_meta):
        monkeypatch.setattr(MetaStore, "update_meta", failing_update_meta)

        with pytest.raises(FieldUpdateError) as exc_info:
            await update_meta_callback("value", test_post, custom_meta, test_author, test_db)

        assert exc_info.value.status_code == 500
        assert exc_info.value.error_code == "update_failed"


class TestPermissionCallback:
    async def test_allows_author(self, test_db, test_post, test_author):
        request = make_request({"post_id": "42"})
        assert await edit_post_permission_callback(request, test_author, test_db) is True

    async def test_reads_id_path_param(self, test_db, test_post, test_author):
        assert await edit_post_permission_callback(make_request({"id": "42"}), test_author, test_db) is True

    async def test_reads_id_query_param(self, test_db, test_post, test_author):
        request = make_request(query_string=b"id=42")
        assert await edit_post_permission_callback(request, test_author, test_db) is True

    async def test_denies_other_author(self, test_db, test_post, other_author):
        with pytest.raises(FieldPermissionError) as exc_info:
            await edit_post_permission_callback(make_request({"post_id": "42"}), other_author, test_db)
        assert exc_info.value.details["post_id"] == 42

    async def test_denies_missing_post(self, test_db, test_admin):
        with pytest.raises(FieldPermissionError):
            await edit_post_permission_callback(make_request({"post_id": "999"}), test_admin, test_db)

    @pytest.mark.parametrize("path_params", [{}, {"post_id": "abc"}, {"post_id": "0"}, {"post_id": "-3"}, {"post_id": ""}])
    @pytest.mark.parametrize("caller", [None, "author", "admin"])
    async def test_invalid_id_for_any_caller(self, test_db, test_post, test_author, test_admin, path_params, caller):
        user = {None: None, "author": test_author, "admin": test_admin}[caller]

        with pytest.raises(InvalidPostIdError) as exc_info:
            await edit_post_permission_callback(make_request(path_params), user, test_db)

        assert exc_info.value.status_code == 400
        assert exc_info.value.error_code == "invalid_post_id"
