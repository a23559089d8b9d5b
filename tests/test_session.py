#!/usr/bin/env python3
"""Tests for the Session lifecycle."""

from datetime import date, datetime, timedelta

from gaadi import MemoryAdapter, Session, YamlFileAdapter
from gaadi import keys

NOW = datetime(2025, 6, 1)


def login_with_swift(session):
    store = session.login("ravi@example.com")
    swift = store.add_vehicle(
        name="My Swift",
        make="Maruti Suzuki",
        model="Swift VXI",
        year=2021,
        registration_number="MH 12 AB 3456",
    )
    return store, swift


class TestLogin:
    """Tests for login / resume / logout."""

    def test_login_stores_user(self):
        durable = MemoryAdapter()
        session = Session(durable)
        store = session.login("ravi@example.com")
        assert session.is_authenticated
        assert store.user.email == "ravi@example.com"
        assert durable.load(keys.USER) == {"id": "local-user", "email": "ravi@example.com"}

    def test_resume_without_user(self):
        session = Session(MemoryAdapter())
        assert session.resume() is None
        assert not session.is_authenticated

    def test_resume_across_processes(self, tmp_path):
        _, swift = login_with_swift(Session(YamlFileAdapter(tmp_path)))
        store = Session(YamlFileAdapter(tmp_path)).resume()
        assert store.user.email == "ravi@example.com"
        assert [v.id for v in store.vehicles] == [swift.id]

    def test_resume_discards_bad_user(self):
        durable = MemoryAdapter()
        durable.save(keys.USER, {"email": 3})
        assert Session(durable).resume() is None
        assert durable.load(keys.USER) is None

    def test_logout(self):
        durable = MemoryAdapter()
        session = Session(durable)
        login_with_swift(session)
        session.logout()
        assert session.store is None
        assert not session.is_authenticated
        assert durable.load(keys.USER) is None
        assert Session(durable).resume() is None

    def test_logout_when_signed_out(self):
        session = Session(MemoryAdapter())
        session.logout()
        assert session.store is None


class TestSessionAlerts:
    """Tests for alerts and pending notifications."""

    def test_no_alerts_when_signed_out(self):
        session = Session(MemoryAdapter())
        assert session.alerts(NOW) == []
        assert session.pending_notifications(NOW) == []

    def test_insurance_scenario(self):
        session = Session(MemoryAdapter())
        store, swift = login_with_swift(session)
        today = date(2025, 6, 1)
        for offset in (25, 65, 150):
            store.add_insurance_policy(swift.id, "Acko", f"P{offset}", today + timedelta(days=offset))
        alerts = session.alerts(NOW)
        assert [a.date for a in alerts] == ["2025-06-26", "2025-08-05", "2025-10-29"]
        assert session.pending_notifications(NOW) == []
        store.update_settings(reminder_lead_time=30)
        assert [a.date for a in session.pending_notifications(NOW)] == ["2025-06-26"]

    def test_acknowledge_suppresses_repeat(self):
        session = Session(MemoryAdapter())
        store, swift = login_with_swift(session)
        store.add_service_record(swift.id, "Oil", "2025-01-01", 100.0, next_due_date="2025-06-05")
        pending = session.pending_notifications(NOW)
        assert len(pending) == 1
        session.acknowledge(pending)
        assert session.pending_notifications(NOW) == []
        assert len(session.alerts(NOW)) == 1

    def test_notifications_disabled(self):
        session = Session(MemoryAdapter())
        store, swift = login_with_swift(session)
        store.add_service_record(swift.id, "Oil", "2025-01-01", 100.0, next_due_date="2025-06-05")
        store.update_settings(notifications_enabled=False)
        assert session.pending_notifications(NOW) == []

    def test_notified_set_is_per_session(self):
        durable = MemoryAdapter()
        first = Session(durable)
        store, swift = login_with_swift(first)
        store.add_service_record(swift.id, "Oil", "2025-01-01", 100.0, next_due_date="2025-06-05")
        first.acknowledge(first.pending_notifications(NOW))
        second = Session(durable)
        second.resume()
        assert len(second.pending_notifications(NOW)) == 1
        assert durable.load(keys.NOTIFIED_ALERTS) is None
