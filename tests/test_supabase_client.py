# =============================================================================
# tests/test_supabase_client.py - Supabase Wrapper Tests
# =============================================================================
# The supabase client is replaced by a MagicMock whose query builder
# methods return itself, so any chain ends in the same execute() mock.
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest

from lib.supabase_client import SupabaseClient, SupabaseClientError


@pytest.fixture
def query():
    """Chainable query builder mock."""
    builder = MagicMock()
    for method in ("select", "eq", "single", "insert", "update", "delete", "order", "range", "limit"):
        getattr(builder, method).return_value = builder
    return builder


@pytest.fixture
def db(query):
    client = MagicMock()
    client.table.return_value = query
    with patch.object(SupabaseClient, "get_client", return_value=client):
        yield client


def _response(data=None, count=None):
    response = MagicMock()
    response.data = data
    response.count = count
    return response


class TestFetch:
    """Test single-row lookups."""

    def test_fetch_record(self, db, query):
        query.execute.return_value = _response({"id": "abc"})

        assert SupabaseClient.fetch_record("issuers", "abc") == {"id": "abc"}
        db.table.assert_called_with("issuers")
        query.eq.assert_called_with("id", "abc")

    def test_not_found_returns_none(self, db, query):
        query.execute.side_effect = Exception("{'code': 'PGRST116', 'message': 'no rows'}")

        assert SupabaseClient.fetch_by_field("users", "email", "x@example.com") is None

    def test_other_errors_raise(self, db, query):
        query.execute.side_effect = Exception("connection refused")

        with pytest.raises(SupabaseClientError) as exc_info:
            SupabaseClient.fetch_by_field("users", "email", "x@example.com")

        assert exc_info.value.code == "FETCH_FAILED"
        assert "Suggestion" in str(exc_info.value)

    def test_records_query_metric(self, db, query, metrics):
        query.execute.return_value = _response({"id": "abc"})

        SupabaseClient.fetch_record("issuers", "abc")

        count = metrics.registry.get_sample_value(
            "db_query_duration_seconds_count", {"query_type": "select"}
        )
        assert count == 1.0


class TestListRecords:

    def test_pagination_and_filters(self, db, query):
        query.execute.return_value = _response([{"id": "a"}, {"id": "b"}], count=42)

        rows, total = SupabaseClient.list_records(
            "certificates",
            page=3,
            page_size=10,
            filters={"issuer_id": "i-1", "is_revoked": None},
        )

        assert rows == [{"id": "a"}, {"id": "b"}]
        assert total == 42
        query.select.assert_called_with("*", count="exact")
        query.eq.assert_called_once_with("issuer_id", "i-1")
        query.order.assert_called_with("created_at", desc=True)
        query.range.assert_called_with(20, 29)

    def test_missing_count_falls_back_to_rows(self, db, query):
        query.execute.return_value = _response([{"id": "a"}], count=None)

        _, total = SupabaseClient.list_records("issuers")

        assert total == 1


class TestWrites:

    def test_insert_returns_row(self, db, query):
        query.execute.return_value = _response([{"id": "new"}])

        assert SupabaseClient.insert_record("issuers", {"name": "x"}) == {"id": "new"}

    def test_insert_without_data(self, db, query):
        query.execute.return_value = _response([])

        with pytest.raises(SupabaseClientError) as exc_info:
            SupabaseClient.insert_record("issuers", {"name": "x"})

        assert exc_info.value.code == "INSERT_NO_DATA"

    def test_update_no_match(self, db, query):
        query.execute.return_value = _response([])

        assert SupabaseClient.update_record("issuers", "missing", {"name": "x"}) is None

    def test_delete(self, db, query):
        query.execute.return_value = _response([{"id": "gone"}])
        assert SupabaseClient.delete_record("issuers", "gone") is True

        query.execute.return_value = _response([])
        assert SupabaseClient.delete_record("issuers", "gone") is False

    def test_ping_failure(self, db, query):
        query.execute.side_effect = Exception("timeout")

        with pytest.raises(SupabaseClientError) as exc_info:
            SupabaseClient.ping()

        assert exc_info.value.code == "PING_FAILED"
