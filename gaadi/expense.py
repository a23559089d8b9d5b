"""Expense class and its category enum."""

from dataclasses import dataclass
from enum import Enum


class ExpenseCategory(Enum):
    FUEL = "Fuel"
    REPAIR = "Repair"
    INSURANCE = "Insurance"
    OTHER = "Other"


@dataclass
class Expense:
    """Money spent on a vehicle."""

    id: str
    user_id: str
    vehicle_id: str
    vehicle_name: str
    category: ExpenseCategory
    date: str
    amount: float
    description: str = ""

    def __post_init__(self):
        self.category = ExpenseCategory(self.category)
        if self.amount < 0:
            raise ValueError(f"Expense amount must be non-negative, got {self.amount}")
