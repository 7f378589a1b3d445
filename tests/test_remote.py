import pytest
import requests

from session.remote import SupabaseAdapter, RemoteStoreError, get_adapter, is_configured
from utils.geolocation import get_ip_address
from tests.conftest import FakeHTTP, FakeResponse


def test_placeholder_credentials_mean_local_only():
    assert not is_configured("", "key")
    assert not is_configured("your_supabase_project_url", "your_supabase_anon_key")
    adapter = SupabaseAdapter("", "")
    assert not adapter.is_ready()
    assert adapter.get_stats() is None
    assert not adapter.test_connection()
    with pytest.raises(RemoteStoreError):
        adapter.insert("sessions", [{"id": "x"}])


def test_insert_sends_postgrest_request(adapter, fake_http):
    adapter.insert_session({
        "id": "s1", "created_at": "2026-01-01T00:00:00+00:00",
        "team_name": "", "device_type": "desktop",
    })
    call = fake_http.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://example.supabase.co/rest/v1/sessions"
    assert call["headers"]["apikey"] == "anon-key"
    assert call["headers"]["Authorization"] == "Bearer anon-key"
    assert call["headers"]["Prefer"] == "return=minimal"
    assert call["timeout"] == adapter.timeout
    row = call["json"][0]
    assert row["id"] == "s1"
    assert row["team_name"] is None
    assert row["user_agent"] == "pytest"


def test_duplicate_and_check_violations_count_as_done(adapter, fake_http):
    fake_http.queue(
        FakeResponse(409, {"code": "23505", "message": "duplicate key value"}),
        FakeResponse(400, {"code": "23514", "message": "violates check constraint"}),
    )
    assert adapter.insert("sessions", [{"id": "s1"}]) is None
    assert adapter.insert("sessions", [{"id": "s1"}]) is None


def test_constraint_errors_raise_when_not_allowed(adapter, fake_http):
    fake_http.queue(FakeResponse(409, {"code": "23505", "message": "duplicate key value"}))
    with pytest.raises(RemoteStoreError) as exc:
        adapter.insert("wheel_configurations", [{"slug": "a-b"}], allow_constraint_errors=False)
    assert exc.value.code == "23505"
    assert exc.value.status == 409


def test_server_and_network_errors_raise(adapter, fake_http):
    fake_http.queue(FakeResponse(500, {"message": "boom"}), requests.ConnectionError("down"))
    with pytest.raises(RemoteStoreError) as exc:
        adapter.insert("spin_results", [{}])
    assert exc.value.status == 500
    with pytest.raises(RemoteStoreError):
        adapter.insert("spin_results", [{}])


def test_spin_rows_use_remote_column_names(adapter, fake_http):
    adapter.insert_spin({
        "id": "p1", "session_id": "s1", "config_id": "c1", "winner": "Ann",
        "is_respin": 0, "spin_power": 0.5, "timestamp": "2026-01-01T00:00:00+00:00",
        "final_rotation": 12.0, "acknowledged_at": None, "acknowledge_method": "remove",
    })
    row = fake_http.calls[0]["json"][0]
    assert row["configuration_id"] == "c1"
    assert row["spin_timestamp"] == "2026-01-01T00:00:00+00:00"
    assert row["is_respin"] is False
    assert row["acknowledge_method"] == "button"
    assert "final_rotation" not in row


def test_update_spin_filters_by_id(adapter, fake_http):
    adapter.update_spin("p1", "2026-01-01T00:00:05+00:00", "remove")
    call = fake_http.calls[0]
    assert call["method"] == "PATCH"
    assert call["params"] == {"id": "eq.p1"}
    assert call["json"]["acknowledge_method"] == "button"


def test_select_lowercases_booleans(adapter, fake_http):
    fake_http.queue(FakeResponse(200, [{"slug": "team-ab12"}]))
    rows = adapter.select("wheel_configurations", "*", match={"is_public": True}, limit=1)
    assert rows == [{"slug": "team-ab12"}]
    assert fake_http.calls[0]["params"] == {"select": "*", "is_public": "eq.true", "limit": "1"}


def test_count_reads_content_range(adapter, fake_http):
    fake_http.queue(
        FakeResponse(200, headers={"Content-Range": "0-24/3573"}),
        FakeResponse(200, headers={"Content-Range": "*/0"}),
    )
    assert adapter.count("sessions") == 3573
    assert adapter.count("sessions") == 0
    assert fake_http.calls[0]["headers"]["Prefer"] == "count=exact"


def test_verify_schema_reports_each_table(fake_http):
    def handler(call):
        if call["url"].endswith("/spin_results"):
            return FakeResponse(404, {"message": "relation does not exist"})
        return FakeResponse(200, [])

    adapter = SupabaseAdapter("https://example.supabase.co", "anon-key", http=FakeHTTP(handler))
    assert adapter.verify_schema() == {
        "sessions": True, "wheel_configurations": True, "spin_results": False,
    }
    assert adapter.test_connection()
    assert adapter.get_stats() is None


def test_get_adapter_is_cached():
    assert get_adapter() is get_adapter()


def test_ip_lookup(fake_http):
    fake_http.queue(FakeResponse(200, {"origin": "198.51.100.7"}))
    assert get_ip_address(http=fake_http) == "198.51.100.7"


def test_ip_lookup_failures_return_none(fake_http):
    fake_http.queue(requests.Timeout("slow"), requests.ConnectionError("down"),
                    FakeResponse(503))
    assert get_ip_address(http=fake_http) is None
    assert get_ip_address(http=fake_http) is None
    assert get_ip_address(http=fake_http) is None
