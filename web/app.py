"""Flask JSON API over a file-backed myGaadi session."""

import os
from datetime import datetime
from pathlib import Path

from flask import Flask, jsonify, request

# Add parent directory to path for package imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from gaadi import (
    EntityNotFound,
    Session,
    UnauthenticatedMutation,
    YamlFileAdapter,
    alert_label,
    alert_urgency,
    expense_summary,
    recent_activity,
)
from gaadi.alerts import alert_days_left
from gaadi.records import to_dict

# Path to data directory (relative to project root)
DATA_DIR = Path(os.environ.get("MYGAADI_DATA_DIR", Path(__file__).parent.parent / "data"))

SETTING_FIELDS = {
    "notificationsEnabled": "notifications_enabled",
    "clearDataOnLogout": "clear_data_on_logout",
    "defaultSortOrder": "default_sort_order",
    "reminderLeadTime": "reminder_lead_time",
}


def alert_to_dict(alert, lead_time, now):
    """Serialize an alert with its presentation fields."""
    d = {
        "id": alert.id,
        "kind": alert.kind.value,
        "title": alert.title,
        "vehicleName": alert.vehicle_name,
        "date": alert.date,
        "daysLeft": alert_days_left(alert, now),
        "label": alert_label(alert, now),
        "urgency": alert_urgency(alert, lead_time, now).name.lower(),
    }
    if alert.provider:
        d["provider"] = alert.provider
    return d


def request_fields(*required):
    """JSON body of the request, checking that required fields are present."""
    data = request.get_json(silent=True) or {}
    missing = [name for name in required if data.get(name) in (None, "")]
    if missing:
        raise ValueError(f"missing fields: {', '.join(missing)}")
    return data


def create_app(data_dir=None) -> Flask:
    """
    Build the app around one Session.

    The process is the session: the notified-set lives in memory and is
    gone when the server stops.
    """
    app = Flask(__name__)
    session = Session(YamlFileAdapter(data_dir or DATA_DIR))

    def current_store():
        if session.store is None and session.resume() is None:
            raise UnauthenticatedMutation("Not logged in")
        return session.store

    @app.errorhandler(UnauthenticatedMutation)
    def unauthenticated(e):
        return jsonify(error=str(e)), 401

    @app.errorhandler(EntityNotFound)
    def not_found(e):
        return jsonify(error=str(e)), 404

    @app.errorhandler(ValueError)
    def bad_request(e):
        return jsonify(error=str(e)), 400

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    @app.route("/login", methods=["POST"])
    def login():
        email = request_fields("email")["email"]
        store = session.login(email)
        return jsonify(user=to_dict(store.user), profile=to_dict(store.profile))

    @app.route("/logout", methods=["POST"])
    def logout():
        current_store()
        session.logout()
        return jsonify(ok=True)

    @app.route("/profile")
    def profile():
        return jsonify(to_dict(current_store().profile))

    # -------------------------------------------------------------------------
    # Vehicles and records
    # -------------------------------------------------------------------------

    @app.route("/vehicles", methods=["GET"])
    def list_vehicles():
        return jsonify([to_dict(v) for v in current_store().vehicles])

    @app.route("/vehicles", methods=["POST"])
    def add_vehicle():
        data = request_fields("name", "make", "model", "year", "registrationNumber")
        vehicle = current_store().add_vehicle(
            name=data.get("name"),
            make=data.get("make"),
            model=data.get("model"),
            year=int(data["year"]),
            registration_number=str(data["registrationNumber"]).upper(),
            image_url=data.get("imageUrl", ""),
            data_ai_hint=data.get("dataAiHint", ""),
        )
        return jsonify(to_dict(vehicle)), 201

    @app.route("/vehicles/<vehicle_id>", methods=["PATCH"])
    def update_vehicle(vehicle_id: str):
        data = request.get_json(silent=True) or {}
        fields = {
            "name": "name",
            "make": "make",
            "model": "model",
            "year": "year",
            "registrationNumber": "registration_number",
            "imageUrl": "image_url",
            "customImageUrl": "custom_image_url",
            "dataAiHint": "data_ai_hint",
        }
        changes = {fields[k]: v for k, v in data.items() if k in fields}
        vehicle = current_store().update_vehicle(vehicle_id, **changes)
        return jsonify(to_dict(vehicle))

    @app.route("/services", methods=["GET"])
    def list_services():
        return jsonify([to_dict(s) for s in current_store().service_records])

    @app.route("/services", methods=["POST"])
    def add_service():
        data = request_fields("vehicleId", "service", "cost")
        record = current_store().add_service_record(
            vehicle_id=data.get("vehicleId"),
            service=data.get("service"),
            date=data.get("date") or datetime.now().isoformat(timespec="seconds"),
            cost=float(data["cost"]),
            notes=data.get("notes", ""),
            next_due_date=data.get("nextDueDate"),
        )
        return jsonify(to_dict(record)), 201

    @app.route("/expenses", methods=["GET"])
    def list_expenses():
        return jsonify([to_dict(e) for e in current_store().expenses])

    @app.route("/expenses", methods=["POST"])
    def add_expense():
        data = request_fields("vehicleId", "category", "amount")
        expense = current_store().add_expense(
            vehicle_id=data.get("vehicleId"),
            category=data.get("category"),
            date=data.get("date") or datetime.now().isoformat(timespec="seconds"),
            amount=float(data["amount"]),
            description=data.get("description", ""),
        )
        return jsonify(to_dict(expense)), 201

    @app.route("/expenses/summary")
    def expenses_summary():
        return jsonify(expense_summary(current_store().expenses))

    @app.route("/insurance", methods=["GET"])
    def list_insurance():
        return jsonify([to_dict(p) for p in current_store().insurance_policies])

    @app.route("/insurance", methods=["POST"])
    def add_insurance():
        data = request_fields("vehicleId", "provider", "policyNumber", "expiryDate")
        policy = current_store().add_insurance_policy(
            vehicle_id=data.get("vehicleId"),
            provider=data.get("provider"),
            policy_number=data.get("policyNumber"),
            expiry_date=data.get("expiryDate"),
        )
        return jsonify(to_dict(policy)), 201

    @app.route("/documents", methods=["GET"])
    def list_documents():
        return jsonify([to_dict(d) for d in current_store().documents])

    @app.route("/documents", methods=["POST"])
    def add_document():
        data = request_fields("vehicleId", "documentType", "fileName", "fileUrl")
        doc = current_store().add_document(
            vehicle_id=data.get("vehicleId"),
            document_type=data.get("documentType"),
            file_name=data.get("fileName"),
            upload_date=data.get("uploadDate") or datetime.now().isoformat(timespec="seconds"),
            file_url=data.get("fileUrl"),
        )
        return jsonify(to_dict(doc)), 201

    @app.route("/documents/<document_id>", methods=["DELETE"])
    def delete_document(document_id: str):
        removed = current_store().delete_document(document_id)
        return jsonify(deleted=removed)

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    @app.route("/alerts")
    def alerts():
        store = current_store()
        now = datetime.now()
        lead_time = store.settings.reminder_lead_time
        return jsonify([alert_to_dict(a, lead_time, now) for a in session.alerts(now)])

    @app.route("/notifications", methods=["GET"])
    def notifications():
        store = current_store()
        now = datetime.now()
        lead_time = store.settings.reminder_lead_time
        pending = session.pending_notifications(now)
        return jsonify([alert_to_dict(a, lead_time, now) for a in pending])

    @app.route("/notifications/ack", methods=["POST"])
    def acknowledge():
        current_store()
        ids = (request.get_json(silent=True) or {}).get("ids") or []
        notified = session.deduplicator.mark_notified(str(i) for i in ids)
        return jsonify(notified=sorted(notified.ids))

    @app.route("/activity")
    def activity():
        store = current_store()
        order = request.args.get("order") or store.settings.default_sort_order
        entries = recent_activity(store.expenses, store.service_records, order)
        return jsonify(
            [{"type": entry.kind, **to_dict(entry.record)} for entry in entries]
        )

    # -------------------------------------------------------------------------
    # Settings and clear
    # -------------------------------------------------------------------------

    @app.route("/settings", methods=["GET"])
    def get_settings():
        return jsonify(current_store().settings.to_dict())

    @app.route("/settings", methods=["PATCH"])
    def update_settings():
        data = request.get_json(silent=True) or {}
        changes = {SETTING_FIELDS[k]: v for k, v in data.items() if k in SETTING_FIELDS}
        settings = current_store().update_settings(**changes)
        return jsonify(settings.to_dict())

    @app.route("/clear", methods=["POST"])
    def clear():
        current_store().clear_all_data()
        return jsonify(ok=True)

    return app


app = create_app()


if __name__ == "__main__":
    app.run(debug=True, port=5000)
