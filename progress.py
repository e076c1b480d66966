from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence

from colors import Color, SeverityBand, band_color, severity_band
from periods import month_start, same_month
from reports import ZERO, BudgetLike, CategorySpending, budget_categories

MAX_RATIO = Decimal("100")


@dataclass(frozen=True)
class BudgetProgress:
    category: str
    month: date
    budget_amount: Decimal
    spent: Decimal
    ratio: Decimal
    band: SeverityBand

    @property
    def color(self) -> Color:
        return band_color(self.ratio)


def find_budget(
    budgets: Iterable[BudgetLike], category: str, reference_month: date
) -> Optional[BudgetLike]:
    # Duplicates per (category, month) are tolerated; the first one wins.
    for budget in budgets:
        if budget.category == category and same_month(budget.month, reference_month):
            return budget
    return None


def progress_ratio(budget_amount: Decimal, spent: Decimal) -> Decimal:
    amount = Decimal(budget_amount)
    if amount == ZERO:
        return ZERO
    return min(MAX_RATIO, (Decimal(spent) / amount) * 100)


def budget_progress(
    budgets: Sequence[BudgetLike],
    category: str,
    reference_month: date,
    spent: Decimal,
) -> Decimal:
    """Share of the month's budget already spent, as a percentage capped at 100.

    A missing budget and a zero budget both report 0.
    """
    budget = find_budget(budgets, category, reference_month)
    if budget is None:
        return ZERO
    return progress_ratio(budget.amount, spent)


def progress_for_month(
    budgets: Sequence[BudgetLike],
    spending: Iterable[CategorySpending] | Mapping[str, Decimal],
    reference_month: date,
) -> tuple[BudgetProgress, ...]:
    if isinstance(spending, Mapping):
        spent_by_category = dict(spending)
    else:
        spent_by_category = {row.category: row.amount for row in spending}

    rows: list[BudgetProgress] = []
    for category in budget_categories(budgets, reference_month):
        budget = find_budget(budgets, category, reference_month)
        spent = Decimal(spent_by_category.get(category, ZERO))
        ratio = progress_ratio(budget.amount, spent)
        rows.append(
            BudgetProgress(
                category=category,
                month=month_start(reference_month),
                budget_amount=Decimal(budget.amount),
                spent=spent,
                ratio=ratio,
                band=severity_band(ratio),
            )
        )
    return tuple(rows)
