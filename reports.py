"""Spending aggregation over an in-memory snapshot of transactions.

Everything here is a pure function of its arguments: the reference month is
always passed in, never derived from the clock, and results are fresh
immutable tuples on every call.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Protocol, Sequence

from periods import month_start, same_month, trailing_months

ZERO = Decimal("0")


class TransactionLike(Protocol):
    category: str
    amount: Decimal
    date: date
    is_income: bool


class BudgetLike(Protocol):
    category: str
    amount: Decimal
    month: date


@dataclass(frozen=True)
class TransactionRecord:
    id: str
    category: str
    amount: Decimal
    date: date
    is_income: bool = False
    notes: Optional[str] = None


@dataclass(frozen=True)
class BudgetRecord:
    id: str
    category: str
    amount: Decimal
    month: date


@dataclass(frozen=True)
class CategorySpending:
    category: str
    amount: Decimal


@dataclass(frozen=True)
class MonthlySpending:
    month: date
    amount: Decimal

    @property
    def label(self) -> str:
        return self.month.strftime("%b")


@dataclass(frozen=True)
class SpendingReport:
    reference_month: date
    categories: tuple[CategorySpending, ...]
    months: tuple[MonthlySpending, ...]


def is_expense_in_month(txn: TransactionLike, month: date) -> bool:
    return not txn.is_income and same_month(txn.date, month)


def spend_for(
    transactions: Iterable[TransactionLike], category: str, month: date
) -> Decimal:
    """Total expenses booked on `category` in the calendar month of `month`."""
    return sum(
        (
            Decimal(txn.amount)
            for txn in transactions
            if txn.category == category and is_expense_in_month(txn, month)
        ),
        ZERO,
    )


def budget_categories(
    budgets: Iterable[BudgetLike], month: Optional[date] = None
) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for budget in budgets:
        if month is not None and not same_month(budget.month, month):
            continue
        seen.setdefault(budget.category, None)
    return tuple(seen)


def category_totals(
    transactions: Sequence[TransactionLike],
    reference_month: date,
    categories: Iterable[str],
) -> tuple[CategorySpending, ...]:
    totals: dict[str, Decimal] = {}
    for txn in transactions:
        if is_expense_in_month(txn, reference_month):
            totals[txn.category] = totals.get(txn.category, ZERO) + Decimal(txn.amount)

    ordered = dict.fromkeys(categories)
    return tuple(
        CategorySpending(category=category, amount=totals.get(category, ZERO))
        for category in ordered
    )


def monthly_totals(
    transactions: Sequence[TransactionLike],
    reference_month: date,
    months_back: int,
) -> tuple[MonthlySpending, ...]:
    if months_back <= 0:
        return ()
    months = trailing_months(reference_month, months_back)
    totals: dict[tuple[int, int], Decimal] = {
        (m.year, m.month): ZERO for m in months
    }
    for txn in transactions:
        if txn.is_income:
            continue
        key = (txn.date.year, txn.date.month)
        if key in totals:
            totals[key] += Decimal(txn.amount)
    return tuple(
        MonthlySpending(month=m, amount=totals[(m.year, m.month)]) for m in months
    )


def aggregate(
    transactions: Sequence[TransactionLike],
    reference_month: date,
    categories: Iterable[str],
    months_back: int,
) -> SpendingReport:
    """Category totals for `reference_month` plus the trailing monthly series.

    Every requested category appears in the result, at zero when nothing was
    spent. Income never counts towards either total.
    """
    return SpendingReport(
        reference_month=month_start(reference_month),
        categories=category_totals(transactions, reference_month, categories),
        months=monthly_totals(transactions, reference_month, months_back),
    )
