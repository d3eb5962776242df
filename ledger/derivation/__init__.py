"""Derivation engine package."""

from ledger.derivation.engine import (
    balance,
    build_expense_report,
    build_statement,
    expense_list_total,
    filtered_expenses,
    ledger_totals,
    member_total,
    monthly_totals,
    toggle_month,
    total_expense,
    total_income,
)

__all__ = [
    "balance",
    "build_expense_report",
    "build_statement",
    "expense_list_total",
    "filtered_expenses",
    "ledger_totals",
    "member_total",
    "monthly_totals",
    "toggle_month",
    "total_expense",
    "total_income",
]
