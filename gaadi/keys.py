"""Logical keys of the persisted state layout."""

USER = "user"
PROFILE = "profile"
VEHICLES = "vehicles"
SERVICE_RECORDS = "serviceRecords"
EXPENSES = "expenses"
INSURANCE_POLICIES = "insurancePolicies"
DOCUMENTS = "documents"
SETTINGS = "settings"
THEME = "theme"

# Session-only; lives in session storage, never in a durable adapter.
NOTIFIED_ALERTS = "notifiedAlerts"

COLLECTIONS = (VEHICLES, SERVICE_RECORDS, EXPENSES, INSURANCE_POLICIES, DOCUMENTS)
SINGLETONS = (USER, PROFILE, SETTINGS, THEME)
DURABLE = (USER, PROFILE) + COLLECTIONS + (SETTINGS, THEME)
