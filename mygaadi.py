#!/usr/bin/env python3
"""
Unified CLI for myGaadi vehicle records.

Commands:
  login            - Sign in and load (or seed) your data
  logout           - Sign out and remove your stored data
  vehicles         - List vehicles
  add-vehicle      - Add a vehicle
  rename-vehicle   - Rename a vehicle
  log-service      - Record a service
  add-expense      - Record an expense
  add-insurance    - Record an insurance policy
  add-document     - Record an uploaded document
  delete-document  - Remove a document
  alerts           - Show upcoming service due dates and insurance renewals
  notify           - Show alerts due within the reminder lead time
  activity         - Show expenses and services together
  expenses         - Show spending by category
  settings         - Show or change settings
  clear            - Remove all vehicles and records, keep your profile
"""

import argparse
import logging
import os
import sys
from datetime import date, datetime
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from gaadi import (
    AlertItem,
    EntityNotFound,
    EntityStore,
    Session,
    UnauthenticatedMutation,
    Urgency,
    YamlFileAdapter,
    alert_label,
    alert_urgency,
    expense_summary,
    recent_activity,
)
from gaadi.activity import ActivityEntry
from gaadi.expense import ExpenseCategory
from gaadi.document import DocumentType
from gaadi.settings import REMINDER_LEAD_TIMES, SORT_ORDERS

DEFAULT_DATA_DIR = "data"

# =============================================================================
# Formatting helpers
# =============================================================================


def format_amount(amount: Optional[float]) -> str:
    """Format rupee amount for display."""
    return f"₹{amount:,.2f}" if amount is not None else "-"


def format_day(value: Optional[str]) -> str:
    """Format an ISO date/datetime string as YYYY-MM-DD."""
    if not value:
        return "-"
    return value[:10]


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if not text:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


URGENCY_LABELS = {
    Urgency.URGENT: "URGENT",
    Urgency.SOON: "SOON",
    Urgency.NORMAL: "",
}


# =============================================================================
# Session helpers
# =============================================================================


def open_session(args) -> Session:
    return Session(YamlFileAdapter(args.data_dir))


def require_store(session: Session) -> EntityStore:
    """Resume the stored session or fail when nobody is logged in."""
    store = session.resume()
    if store is None:
        raise UnauthenticatedMutation("Not logged in. Run 'login EMAIL' first.")
    return store


# =============================================================================
# Login / logout
# =============================================================================


def cmd_login(args):
    """Sign in and load (or seed) your data."""
    session = open_session(args)
    store = session.login(args.email)
    print(f"Logged in as {store.user.email} ({store.profile.name})")
    print(f"Vehicles: {len(store.vehicles)}")
    return 0


def cmd_logout(args):
    """Sign out and remove your stored data."""
    session = open_session(args)
    require_store(session)
    session.logout()
    print("Logged out.")
    return 0


# =============================================================================
# Vehicles
# =============================================================================


def make_vehicle_table(store: EntityStore) -> List[List[str]]:
    """Convert vehicles to table rows."""
    return [
        [v.id, v.name, v.description, v.registration_number]
        for v in store.vehicles
    ]


def cmd_vehicles(args):
    """List vehicles."""
    store = require_store(open_session(args))
    if not store.vehicles:
        print("No vehicles yet.")
        return 0
    headers = ["ID", "Name", "Vehicle", "Registration"]
    print(tabulate(make_vehicle_table(store), headers=headers, tablefmt="simple"))
    return 0


def cmd_add_vehicle(args):
    """Add a vehicle."""
    store = require_store(open_session(args))
    vehicle = store.add_vehicle(
        name=args.name,
        make=args.make,
        model=args.model,
        year=args.year,
        registration_number=args.registration.upper(),
    )
    print(f"Added vehicle {vehicle.name} ({vehicle.id})")
    return 0


def cmd_rename_vehicle(args):
    """Rename a vehicle."""
    store = require_store(open_session(args))
    vehicle = store.update_vehicle(args.vehicle_id, name=args.name)
    print(f"Renamed {vehicle.id} to {vehicle.name}")
    return 0


# =============================================================================
# Records
# =============================================================================


def check_vehicle(store: EntityStore, vehicle_id: str) -> bool:
    if store.get_vehicle(vehicle_id) is None:
        print(f"Warning: unknown vehicle '{vehicle_id}', recording as Unknown")
        return False
    return True


def cmd_log_service(args):
    """Record a service."""
    store = require_store(open_session(args))
    check_vehicle(store, args.vehicle_id)

    entry_date = args.date or date.today().isoformat()
    print("Adding service entry:")
    print(f"  Service: {args.service}")
    print(f"  Date:    {entry_date}")
    print(f"  Cost:    {format_amount(args.cost)}")
    if args.next_due:
        print(f"  Next due: {args.next_due}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    record = store.add_service_record(
        vehicle_id=args.vehicle_id,
        service=args.service,
        date=entry_date,
        cost=args.cost,
        notes=args.notes or "",
        next_due_date=args.next_due,
    )
    print(f"Entry saved for {record.vehicle_name}.")
    return 0


def cmd_add_expense(args):
    """Record an expense."""
    store = require_store(open_session(args))
    check_vehicle(store, args.vehicle_id)
    expense = store.add_expense(
        vehicle_id=args.vehicle_id,
        category=ExpenseCategory(args.category),
        date=args.date or date.today().isoformat(),
        amount=args.amount,
        description=args.description or "",
    )
    print(f"Expense of {format_amount(expense.amount)} saved for {expense.vehicle_name}.")
    return 0


def cmd_add_insurance(args):
    """Record an insurance policy."""
    store = require_store(open_session(args))
    check_vehicle(store, args.vehicle_id)
    policy = store.add_insurance_policy(
        vehicle_id=args.vehicle_id,
        provider=args.provider,
        policy_number=args.policy_number,
        expiry_date=args.expiry,
    )
    print(f"Policy {policy.policy_number} saved for {policy.vehicle_name}.")
    return 0


def cmd_add_document(args):
    """Record an uploaded document."""
    store = require_store(open_session(args))
    check_vehicle(store, args.vehicle_id)
    doc = store.add_document(
        vehicle_id=args.vehicle_id,
        document_type=DocumentType(args.type),
        file_name=args.file_name,
        upload_date=datetime.now().isoformat(timespec="seconds"),
        file_url=args.url or args.file_name,
    )
    print(f"Document {doc.file_name} saved ({doc.id}).")
    return 0


def cmd_delete_document(args):
    """Remove a document."""
    store = require_store(open_session(args))
    if store.delete_document(args.document_id):
        print("Document deleted.")
    else:
        print(f"No document with id '{args.document_id}'.")
    return 0


# =============================================================================
# Alerts
# =============================================================================


def make_alert_table(
    alerts: List[AlertItem], lead_time: int, now: datetime
) -> List[List[str]]:
    """Convert alerts to table rows."""
    rows = []
    for alert in alerts:
        rows.append(
            [
                alert.title,
                alert.subtitle,
                format_day(alert.date),
                alert_label(alert, now),
                URGENCY_LABELS[alert_urgency(alert, lead_time, now)],
            ]
        )
    return rows


def cmd_alerts(args):
    """Show upcoming service due dates and insurance renewals."""
    session = open_session(args)
    store = require_store(session)
    now = datetime.now()
    alerts = session.alerts(now)

    print(f"Reminder lead time: {store.settings.reminder_lead_time} days")
    print()
    if not alerts:
        print("No upcoming alerts. You're all caught up!")
        return 0

    headers = ["Event", "Vehicle", "Date", "When", "Urgency"]
    print(
        tabulate(
            make_alert_table(alerts, store.settings.reminder_lead_time, now),
            headers=headers,
            tablefmt="simple",
        )
    )
    return 0


def cmd_notify(args):
    """
    Show alerts due within the reminder lead time.

    Each run is its own session, so alerts shown here are shown again next run.
    """
    session = open_session(args)
    require_store(session)
    pending = session.pending_notifications()
    if not pending:
        print("Nothing new.")
        return 0
    now = datetime.now()
    for alert in pending:
        print(f"{alert.title}: {alert.subtitle} - {alert_label(alert, now)}")
    return 0


# =============================================================================
# Activity and expenses
# =============================================================================


def make_activity_table(entries: List[ActivityEntry]) -> List[List[str]]:
    """Convert activity entries to table rows."""
    return [
        [
            format_day(entry.date),
            entry.kind,
            truncate(entry.title),
            entry.record.vehicle_name,
            format_amount(entry.amount),
        ]
        for entry in entries
    ]


def cmd_activity(args):
    """Show expenses and services together."""
    store = require_store(open_session(args))
    order = args.order or store.settings.default_sort_order
    entries = recent_activity(store.expenses, store.service_records, order)
    if args.limit:
        entries = entries[: args.limit]

    if not entries:
        print("No activity recorded yet.")
        return 0

    headers = ["Date", "Type", "Description", "Vehicle", "Amount"]
    print(tabulate(make_activity_table(entries), headers=headers, tablefmt="simple"))
    return 0


def cmd_expenses(args):
    """Show spending by category."""
    store = require_store(open_session(args))
    summary = expense_summary(store.expenses)
    total = summary.pop("Total")
    rows = [[name, format_amount(amount)] for name, amount in summary.items()]
    print(tabulate(rows, headers=["Category", "Spent"], tablefmt="simple"))
    print()
    print(f"Total spending: {format_amount(total)}")
    return 0


# =============================================================================
# Settings and clear
# =============================================================================


def cmd_settings(args):
    """Show or change settings."""
    store = require_store(open_session(args))
    changes = {}
    if args.notifications is not None:
        changes["notifications_enabled"] = args.notifications == "on"
    if args.clear_on_logout is not None:
        changes["clear_data_on_logout"] = args.clear_on_logout == "on"
    if args.sort_order:
        changes["default_sort_order"] = args.sort_order
    if args.lead_time:
        changes["reminder_lead_time"] = args.lead_time
    settings = store.update_settings(**changes) if changes else store.settings

    rows = [[key, value] for key, value in settings.to_dict().items()]
    print(tabulate(rows, headers=["Setting", "Value"], tablefmt="simple"))
    return 0


def cmd_clear(args):
    """Remove all vehicles and records, keep your profile."""
    store = require_store(open_session(args))
    if not args.yes:
        print("Refusing to clear data without --yes")
        return 1
    store.clear_all_data()
    print("All vehicle data cleared.")
    return 0


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="myGaadi vehicle records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s login me@example.com
  %(prog)s add-vehicle "My Swift" "Maruti Suzuki" "Swift VXI" 2021 "MH 12 AB 3456"
  %(prog)s log-service v1 "General Service" 4500 --next-due 2025-12-01
  %(prog)s add-insurance v1 "Go Digit" GDI-1 2026-03-01
  %(prog)s alerts
  %(prog)s activity --limit 10
  %(prog)s settings --lead-time 30
""",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path(os.environ.get("MYGAADI_DATA_DIR", DEFAULT_DATA_DIR)),
        help="Directory holding stored data (default: $MYGAADI_DATA_DIR or ./data)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    login_parser = subparsers.add_parser("login", help="Sign in")
    login_parser.add_argument("email", type=str)
    subparsers.add_parser("logout", help="Sign out and remove stored data")

    subparsers.add_parser("vehicles", help="List vehicles")

    add_vehicle_parser = subparsers.add_parser("add-vehicle", help="Add a vehicle")
    add_vehicle_parser.add_argument("name", type=str)
    add_vehicle_parser.add_argument("make", type=str)
    add_vehicle_parser.add_argument("model", type=str)
    add_vehicle_parser.add_argument("year", type=int)
    add_vehicle_parser.add_argument("registration", type=str)

    rename_parser = subparsers.add_parser("rename-vehicle", help="Rename a vehicle")
    rename_parser.add_argument("vehicle_id", type=str)
    rename_parser.add_argument("name", type=str)

    service_parser = subparsers.add_parser("log-service", help="Record a service")
    service_parser.add_argument("vehicle_id", type=str)
    service_parser.add_argument("service", type=str)
    service_parser.add_argument("cost", type=float)
    service_parser.add_argument(
        "--date", type=str, help="Service date in YYYY-MM-DD format (default: today)"
    )
    service_parser.add_argument("--next-due", type=str, help="Next due date (YYYY-MM-DD)")
    service_parser.add_argument("--notes", type=str)
    service_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be added without saving",
    )

    expense_parser = subparsers.add_parser("add-expense", help="Record an expense")
    expense_parser.add_argument("vehicle_id", type=str)
    expense_parser.add_argument(
        "category", choices=[c.value for c in ExpenseCategory]
    )
    expense_parser.add_argument("amount", type=float)
    expense_parser.add_argument("--date", type=str)
    expense_parser.add_argument("--description", type=str)

    insurance_parser = subparsers.add_parser(
        "add-insurance", help="Record an insurance policy"
    )
    insurance_parser.add_argument("vehicle_id", type=str)
    insurance_parser.add_argument("provider", type=str)
    insurance_parser.add_argument("policy_number", type=str)
    insurance_parser.add_argument("expiry", type=str, help="Expiry date (YYYY-MM-DD)")

    document_parser = subparsers.add_parser("add-document", help="Record a document")
    document_parser.add_argument("vehicle_id", type=str)
    document_parser.add_argument("type", choices=[t.value for t in DocumentType])
    document_parser.add_argument("file_name", type=str)
    document_parser.add_argument("--url", type=str, help="Where the file is stored")

    delete_document_parser = subparsers.add_parser(
        "delete-document", help="Remove a document"
    )
    delete_document_parser.add_argument("document_id", type=str)

    subparsers.add_parser("alerts", help="Show upcoming alerts")
    subparsers.add_parser("notify", help="Show alerts due within the lead time")

    activity_parser = subparsers.add_parser("activity", help="Show activity log")
    activity_parser.add_argument("--order", choices=SORT_ORDERS)
    activity_parser.add_argument("--limit", type=int)

    subparsers.add_parser("expenses", help="Show spending by category")

    settings_parser = subparsers.add_parser("settings", help="Show or change settings")
    settings_parser.add_argument("--notifications", choices=["on", "off"])
    settings_parser.add_argument("--clear-on-logout", choices=["on", "off"])
    settings_parser.add_argument("--sort-order", choices=SORT_ORDERS)
    settings_parser.add_argument("--lead-time", type=int, choices=REMINDER_LEAD_TIMES)

    clear_parser = subparsers.add_parser("clear", help="Remove all vehicle data")
    clear_parser.add_argument("--yes", action="store_true", help="Confirm")

    return parser


COMMANDS = {
    "login": cmd_login,
    "logout": cmd_logout,
    "vehicles": cmd_vehicles,
    "add-vehicle": cmd_add_vehicle,
    "rename-vehicle": cmd_rename_vehicle,
    "log-service": cmd_log_service,
    "add-expense": cmd_add_expense,
    "add-insurance": cmd_add_insurance,
    "add-document": cmd_add_document,
    "delete-document": cmd_delete_document,
    "alerts": cmd_alerts,
    "notify": cmd_notify,
    "activity": cmd_activity,
    "expenses": cmd_expenses,
    "settings": cmd_settings,
    "clear": cmd_clear,
}


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return COMMANDS[args.command](args)
    except UnauthenticatedMutation as e:
        print(f"Error: {e}")
        return 1
    except EntityNotFound as e:
        print(f"Error: {e}")
        return 1
    except ValueError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
