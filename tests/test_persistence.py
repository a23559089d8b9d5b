#!/usr/bin/env python3
"""Tests for persistence adapters."""

import logging

import pytest

from gaadi import DocumentStoreAdapter, MemoryAdapter, YamlFileAdapter
from conftest import FakeDocumentClient

VEHICLE = {
    "id": "v1",
    "userId": "local-user",
    "name": "My Swift",
    "make": "Maruti Suzuki",
    "model": "Swift VXI",
    "year": 2021,
    "registrationNumber": "MH 12 AB 3456",
}

# =============================================================================
# YamlFileAdapter
# =============================================================================


class TestYamlFileAdapter:
    """Tests for the local YAML file adapter."""

    def test_missing_key_returns_default(self, tmp_path):
        adapter = YamlFileAdapter(tmp_path)
        assert adapter.load("vehicles", []) == []
        assert adapter.load("profile") is None

    def test_save_then_load(self, tmp_path):
        adapter = YamlFileAdapter(tmp_path)
        adapter.save("vehicles", [VEHICLE])
        assert adapter.load("vehicles", []) == [VEHICLE]
        assert (tmp_path / "vehicles.yaml").exists()

    def test_date_strings_stay_strings(self, tmp_path):
        adapter = YamlFileAdapter(tmp_path)
        adapter.save("expenses", [{"date": "2025-01-15"}])
        assert adapter.load("expenses") == [{"date": "2025-01-15"}]

    def test_saving_twice_is_idempotent(self, tmp_path):
        adapter = YamlFileAdapter(tmp_path)
        adapter.save("vehicles", [VEHICLE])
        first = (tmp_path / "vehicles.yaml").read_text()
        adapter.save("vehicles", [VEHICLE])
        assert (tmp_path / "vehicles.yaml").read_text() == first
        assert adapter.load("vehicles") == [VEHICLE]

    def test_no_temp_files_left_behind(self, tmp_path):
        adapter = YamlFileAdapter(tmp_path)
        adapter.save("vehicles", [VEHICLE])
        assert [p.name for p in tmp_path.iterdir()] == ["vehicles.yaml"]

    def test_malformed_file_returns_default(self, tmp_path, caplog):
        (tmp_path / "vehicles.yaml").write_text("- [unclosed\n")
        adapter = YamlFileAdapter(tmp_path)
        with caplog.at_level(logging.WARNING):
            assert adapter.load("vehicles", []) == []
        assert "vehicles" in caplog.text

    def test_empty_file_returns_default(self, tmp_path):
        (tmp_path / "theme.yaml").write_text("")
        assert YamlFileAdapter(tmp_path).load("theme", "default") == "default"

    def test_write_failure_is_logged_not_raised(self, tmp_path, caplog):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        adapter = YamlFileAdapter(blocker)
        with caplog.at_level(logging.ERROR):
            adapter.save("vehicles", [VEHICLE])
        assert "Error writing key 'vehicles'" in caplog.text

    def test_remove(self, tmp_path):
        adapter = YamlFileAdapter(tmp_path)
        adapter.save("theme", "forest")
        adapter.remove("theme")
        assert adapter.load("theme", "default") == "default"
        adapter.remove("theme")


# =============================================================================
# MemoryAdapter
# =============================================================================


class TestMemoryAdapter:
    """Tests for the in-memory adapter."""

    def test_values_are_copied(self):
        adapter = MemoryAdapter()
        value = [{"id": "v1"}]
        adapter.save("vehicles", value)
        value.append({"id": "v2"})
        loaded = adapter.load("vehicles")
        loaded.append({"id": "v3"})
        assert adapter.load("vehicles") == [{"id": "v1"}]

    def test_remove_and_keys(self):
        adapter = MemoryAdapter()
        adapter.save("a", 1)
        adapter.save("b", 2)
        adapter.remove("a")
        assert adapter.keys() == ["b"]


# =============================================================================
# DocumentStoreAdapter
# =============================================================================


class TestDocumentStoreAdapter:
    """Tests for the remote document store adapter."""

    @pytest.fixture
    def client(self):
        return FakeDocumentClient()

    @pytest.fixture
    def remote(self, client):
        adapter = DocumentStoreAdapter(client)
        adapter.bind_user("local-user")
        return adapter

    def test_unbound_read_returns_default(self, client):
        adapter = DocumentStoreAdapter(client)
        assert adapter.load("vehicles", []) == []
        assert client.calls == []

    def test_save_puts_new_records(self, remote, client):
        remote.save("vehicles", [VEHICLE])
        assert ("put", "vehicles", "v1") in client.calls
        assert remote.load("vehicles", []) == [VEHICLE]

    def test_identical_save_sends_nothing(self, remote, client):
        remote.save("vehicles", [VEHICLE])
        calls = len(client.calls)
        remote.save("vehicles", [VEHICLE])
        assert len(client.calls) == calls
        assert remote.load("vehicles", []) == [VEHICLE]

    def test_changed_record_sends_partial_update(self, remote, client):
        remote.save("vehicles", [VEHICLE])
        remote.save("vehicles", [{**VEHICLE, "name": "Old Swift"}])
        assert ("update", "vehicles", "v1") in client.calls
        assert client.collections["vehicles"]["v1"]["name"] == "Old Swift"

    def test_missing_record_deleted(self, remote, client):
        second = {**VEHICLE, "id": "v2", "name": "Family Creta"}
        remote.save("vehicles", [VEHICLE, second])
        remote.save("vehicles", [second])
        assert ("delete", "vehicles", "v1") in client.calls
        assert list(client.collections["vehicles"]) == ["v2"]

    def test_singleton_round_trip(self, remote, client):
        remote.save("profile", {"name": "ravi", "avatarUrl": None})
        assert remote.load("profile") == {"name": "ravi", "avatarUrl": None}
        assert client.collections["profile"]["local-user"]["value"]["name"] == "ravi"

    def test_other_users_not_visible(self, client):
        client.collections["vehicles"] = {"vx": {**VEHICLE, "id": "vx", "userId": "someone-else"}}
        adapter = DocumentStoreAdapter(client)
        adapter.bind_user("local-user")
        assert adapter.load("vehicles", []) == []

    def test_read_failure_returns_default(self, remote, client, caplog):
        client.fail = True
        with caplog.at_level(logging.WARNING):
            assert remote.load("vehicles", []) == []
        assert "backend unavailable" in caplog.text

    def test_record_without_id_returns_default(self, remote, client, caplog):
        client.collections["vehicles"] = {"x": {"userId": "local-user", "name": "no id"}}
        with caplog.at_level(logging.WARNING):
            assert remote.load("vehicles", []) == []
        assert "malformed record" in caplog.text

    def test_non_dict_record_returns_default(self, remote, client, monkeypatch):
        monkeypatch.setattr(client, "get", lambda user_id, collection: ["oops"])
        assert remote.load("profile") is None

    def test_malformed_snapshot_fails_write_not_caller(self, remote, client, caplog):
        client.collections["vehicles"] = {"x": {"userId": "local-user"}}
        with caplog.at_level(logging.ERROR):
            remote.save("vehicles", [VEHICLE])
        assert "Error writing key 'vehicles'" in caplog.text

    def test_write_failure_logged(self, remote, client, caplog):
        remote.save("vehicles", [])
        client.fail = True
        with caplog.at_level(logging.ERROR):
            remote.save("vehicles", [VEHICLE])
        assert "Error writing key 'vehicles'" in caplog.text

    def test_remove_deletes_every_record(self, remote, client):
        second = {**VEHICLE, "id": "v2"}
        remote.save("vehicles", [VEHICLE, second])
        remote.remove("vehicles")
        assert client.collections["vehicles"] == {}
        assert remote.load("vehicles", []) == []
