from unittest.mock import MagicMock

import pytest

from hypervision.core.exceptions import PersistenceError
from hypervision.modules.access_links.models import BOARD_SCOPE, BUSINESS_UNIT_SCOPE
from hypervision.modules.access_links.repository import AccessLinkRepository
from hypervision.modules.access_links.resources import GatedResourceReader

BOARD_ROW = {
    "id": "link-1",
    "board_id": "board-1",
    "role": "editor",
    "password_hash": "$2b$10$abcdefghijklmnopqrstuuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ012",
    "expires_at": "2026-10-19T09:00:00+00:00",
    "created_at": "2026-10-18T09:00:00.123456+00:00",
}


def _supabase_returning(data):
    supabase = MagicMock()
    query = supabase.table.return_value
    for method in ("select", "insert", "delete", "eq", "in_", "limit", "order"):
        getattr(query, method).return_value = query
    query.execute.return_value = MagicMock(data=data)
    return supabase, query


class TestAccessLinkRepository:
    def test_insert_maps_resource_column(self):
        supabase, query = _supabase_returning([BOARD_ROW])
        repo = AccessLinkRepository(supabase, BOARD_SCOPE)

        link = repo.insert("board-1", BOARD_ROW["password_hash"], role="editor", expires_at=BOARD_ROW["expires_at"])

        supabase.table.assert_called_with("board_access_links")
        inserted = query.insert.call_args[0][0]
        assert inserted == {
            "board_id": "board-1",
            "password_hash": BOARD_ROW["password_hash"],
            "role": "editor",
            "expires_at": BOARD_ROW["expires_at"],
        }
        assert link.id == "link-1"
        assert link.resource_id == "board-1"
        assert link.expires_at.tzinfo is not None

    def test_business_unit_insert_has_no_role(self):
        row = {"id": "link-2", "business_unit_id": "bu-1", "password_hash": "h", "created_by": "u1"}
        supabase, query = _supabase_returning([row])
        repo = AccessLinkRepository(supabase, BUSINESS_UNIT_SCOPE)

        link = repo.insert("bu-1", "h", role="editor", created_by="u1")

        inserted = query.insert.call_args[0][0]
        assert "role" not in inserted
        assert inserted["created_by"] == "u1"
        assert link.role is None

    def test_insert_without_returned_row(self):
        supabase, _ = _supabase_returning([])
        with pytest.raises(PersistenceError):
            AccessLinkRepository(supabase, BOARD_SCOPE).insert("board-1", "h", role="viewer")

    def test_insert_store_error(self):
        supabase, query = _supabase_returning([])
        query.execute.side_effect = RuntimeError("connection reset")
        with pytest.raises(PersistenceError) as exc_info:
            AccessLinkRepository(supabase, BOARD_SCOPE).insert("board-1", "h", role="viewer")
        assert "connection reset" not in exc_info.value.message

    def test_list_selects_public_columns_and_skips_bad_rows(self):
        good = {k: v for k, v in BOARD_ROW.items() if k != "password_hash"}
        supabase, query = _supabase_returning([good, {"board_id": "board-1"}])

        links = AccessLinkRepository(supabase, BOARD_SCOPE).list_for_resource("board-1")

        query.select.assert_called_with("id, board_id, role, expires_at, created_at")
        assert [link.id for link in links] == ["link-1"]

    def test_list_nothing(self):
        supabase, _ = _supabase_returning(None)
        assert AccessLinkRepository(supabase, BUSINESS_UNIT_SCOPE).list_for_resource("bu-1") == []

    def test_get_missing(self):
        supabase, _ = _supabase_returning([])
        assert AccessLinkRepository(supabase, BOARD_SCOPE).get("nope") is None

    def test_get_row_with_empty_hash_is_rejected(self):
        supabase, _ = _supabase_returning([dict(BOARD_ROW, password_hash="")])
        with pytest.raises(PersistenceError):
            AccessLinkRepository(supabase, BOARD_SCOPE).get("link-1")

    def test_delete_filters_on_id_and_resource(self):
        supabase, query = _supabase_returning([])
        AccessLinkRepository(supabase, BUSINESS_UNIT_SCOPE).delete("link-9", "bu-1")

        query.delete.assert_called_once()
        query.eq.assert_any_call("id", "link-9")
        query.eq.assert_any_call("business_unit_id", "bu-1")


class TestGatedResourceReader:
    def test_snapshot_data_stored_as_text_is_decoded(self):
        supabase, query = _supabase_returning([{"board_id": "board-1", "data": '{"nodes": []}'}])

        snapshot = GatedResourceReader(supabase).get_latest_snapshot("board-1")

        query.order.assert_called_with("updated_at", desc=True)
        assert snapshot.data == {"nodes": []}

    def test_undecodable_json_kept_verbatim(self):
        supabase, _ = _supabase_returning([{"id": "wf-1", "flow_data": "{not json"}])
        assert GatedResourceReader(supabase).list_workflows("bu-1")[0].flow_data == "{not json"

    def test_workflow_environments_skip_query_without_environments(self):
        supabase, _ = _supabase_returning([])
        assert GatedResourceReader(supabase).list_workflow_environments([]) == []
        supabase.table.assert_not_called()

    def test_store_error(self):
        supabase, query = _supabase_returning([])
        query.execute.side_effect = RuntimeError("timeout")
        with pytest.raises(PersistenceError):
            GatedResourceReader(supabase).get_board("board-1")
