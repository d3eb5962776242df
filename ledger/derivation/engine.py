"""
Derivation Engine

DESIGN DECISION: Every aggregate is a pure function of the AppState.
Nothing is cached or stored; totals are recomputed on every render.
Data volume is a few hundred records, so recomputation is cheap and
there is no second copy of the truth to drift out of sync.

GUARANTEES:
- balance == total_income - total_expense, never clamped
- monthly incomes sum to total_income, monthly expenses to total_expense
  (undated expenditures and non-month contribution keys still count toward
  the overall totals but fall in no month bucket)
- non-finite amounts count as zero, they never poison a total

Month buckets ignore the year. A bill dated March 2023 and one dated
March 2024 both land in "Mar". This is a known limitation, kept on purpose.
"""

import math
from typing import Iterable, Optional, Union

from ledger.models.ledger import (
    ALL_MONTHS_FILTER,
    AppState,
    Expenditure,
    Member,
    Month,
)
from ledger.models.results import (
    ExpenseReport,
    LedgerTotals,
    MonthlyTotal,
    StatementRow,
    StatementSnapshot,
)


def _safe_amount(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def _as_months(months: Optional[Iterable[Union[Month, str]]]) -> list[Month]:
    """Normalize a month selection to canonical order; None means all months."""
    if months is None:
        return list(Month)
    wanted = {Month(m) for m in months}
    return [m for m in Month if m in wanted]


# =============================================================================
# TOTALS
# =============================================================================

def total_income(state: AppState) -> float:
    """Sum of every contribution of every member."""
    return sum(
        _safe_amount(contribution.amount)
        for member in state.members
        for contribution in member.contributions.values()
    )


def total_expense(state: AppState) -> float:
    """Sum of every expenditure."""
    return sum(_safe_amount(expenditure.amount) for expenditure in state.expenditures)


def balance(state: AppState) -> float:
    """Income minus expense. May be negative."""
    return total_income(state) - total_expense(state)


def ledger_totals(state: AppState) -> LedgerTotals:
    """Income, expense and balance in one value."""
    income = total_income(state)
    expense = total_expense(state)
    return LedgerTotals(income=income, expense=expense, balance=income - expense)


def monthly_totals(state: AppState) -> dict[Month, MonthlyTotal]:
    """
    Income and expense per canonical month, all twelve in calendar order.

    Income for a month sums every member's contribution under that key.
    Expense sums expenditures dated in that month of any year.
    """
    income = {month: 0.0 for month in Month}
    expense = {month: 0.0 for month in Month}

    for member in state.members:
        for key, contribution in member.contributions.items():
            try:
                month = Month(key)
            except ValueError:
                # Not a canonical month key, carries no meaning
                continue
            income[month] += _safe_amount(contribution.amount)

    for expenditure in state.expenditures:
        month = expenditure.month
        if month is not None:
            expense[month] += _safe_amount(expenditure.amount)

    return {
        month: MonthlyTotal(income=income[month], expense=expense[month])
        for month in Month
    }


def member_total(
    member: Member,
    months: Optional[Iterable[Union[Month, str]]] = None,
) -> float:
    """One member's contributions over the given months (all by default)."""
    total = 0.0
    for month in _as_months(months):
        contribution = member.contributions.get(month.value)
        if contribution is not None:
            total += _safe_amount(contribution.amount)
    return total


def expense_list_total(expenditures: Iterable[Expenditure]) -> float:
    """Footer total of an expenditure list."""
    return sum(_safe_amount(expenditure.amount) for expenditure in expenditures)


# =============================================================================
# VIEWS
# =============================================================================

def filtered_expenses(
    state: AppState,
    month_filter: str = ALL_MONTHS_FILTER,
) -> list[Expenditure]:
    """
    Expenditures sorted by date, most recent first.

    Equal dates keep their stored order (the sort is stable). Undated
    expenditures go last and never match a specific month.
    """
    ordered = sorted(
        state.expenditures,
        key=lambda ex: (ex.parsed_date is not None, ex.parsed_date or ""),
        reverse=True,
    )
    if month_filter == ALL_MONTHS_FILTER:
        return ordered

    month = Month(month_filter)
    return [ex for ex in ordered if ex.month == month]


def toggle_month(
    selected: Iterable[Union[Month, str]],
    month: Union[Month, str],
) -> list[Month]:
    """Add or remove one month from a column selection, keeping calendar order."""
    current = set(_as_months(selected))
    target = Month(month)
    if target in current:
        current.discard(target)
    else:
        current.add(target)
    return [m for m in Month if m in current]


def build_statement(
    state: AppState,
    months: Optional[Iterable[Union[Month, str]]] = None,
) -> StatementSnapshot:
    """Read-only snapshot of the ledger matrix for renderers and share cards."""
    selected = _as_months(months)
    monthly = monthly_totals(state)

    rows = []
    for member in state.members:
        amounts = {}
        for month in selected:
            contribution = member.contributions.get(month.value)
            amounts[month] = (
                _safe_amount(contribution.amount) if contribution is not None else None
            )
        rows.append(StatementRow(
            name=member.name,
            amounts=amounts,
            total=member_total(member, selected),
        ))

    return StatementSnapshot(
        main_title=state.main_title,
        sub_title=state.sub_title,
        logo=state.logo,
        months=selected,
        rows=rows,
        monthly={month: monthly[month] for month in selected},
        totals=ledger_totals(state),
    )


def build_expense_report(
    state: AppState,
    month_filter: str = ALL_MONTHS_FILTER,
) -> ExpenseReport:
    """Filtered expenditure list plus its total, for the shared expense list."""
    expenditures = filtered_expenses(state, month_filter)
    return ExpenseReport(
        month_filter=month_filter,
        expenditures=expenditures,
        total=expense_list_total(expenditures),
    )
