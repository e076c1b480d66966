from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from charts import (
    BarGeometry,
    LineLayout,
    category_bar_values,
    layout_bars,
    layout_line,
    monthly_line_values,
)
from config import get_settings
from models import Budget, Transaction
from periods import month_end, month_start
from progress import BudgetProgress, budget_progress, progress_for_month
from reports import (
    BudgetRecord,
    SpendingReport,
    TransactionRecord,
    aggregate,
    budget_categories,
    spend_for,
)
from schemas import BudgetIn, TransactionIn

logger = logging.getLogger(__name__)


class TransactionService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_all(self) -> list[Transaction]:
        stmt = select(Transaction).order_by(
            Transaction.date.desc(), Transaction.created_at.desc()
        )
        return list(self.session.scalars(stmt).all())

    def snapshot(self) -> tuple[TransactionRecord, ...]:
        return tuple(txn.to_record() for txn in self.list_all())

    def get(self, transaction_id: str) -> Transaction:
        txn = self.session.get(Transaction, transaction_id)
        if not txn:
            raise ValueError("Transaction not found")
        return txn

    def create(self, data: TransactionIn) -> Transaction:
        txn = Transaction(
            category=data.category,
            amount=data.amount,
            date=data.date,
            is_income=data.is_income,
            notes=data.notes,
        )
        self.session.add(txn)
        self.session.commit()
        self.session.refresh(txn)
        logger.info(
            f"transaction_created: id={txn.id} category={txn.category} "
            f"is_income={txn.is_income}"
        )
        return txn

    def update(self, transaction_id: str, data: TransactionIn) -> Transaction:
        txn = self.get(transaction_id)
        txn.category = data.category
        txn.amount = data.amount
        txn.date = data.date
        txn.is_income = data.is_income
        txn.notes = data.notes
        self.session.commit()
        self.session.refresh(txn)
        logger.info(f"transaction_updated: id={txn.id}")
        return txn

    def delete(self, transaction_id: str) -> None:
        txn = self.get(transaction_id)
        self.session.delete(txn)
        self.session.commit()
        logger.info(f"transaction_deleted: id={transaction_id}")


class BudgetService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_all(self, month: Optional[date] = None) -> list[Budget]:
        stmt = select(Budget).order_by(Budget.seq.asc())
        if month is not None:
            stmt = stmt.where(Budget.month == month_start(month))
        return list(self.session.scalars(stmt).all())

    def snapshot(self, month: Optional[date] = None) -> tuple[BudgetRecord, ...]:
        return tuple(budget.to_record() for budget in self.list_all(month))

    def get(self, budget_id: str) -> Budget:
        budget = self.session.scalar(select(Budget).where(Budget.id == budget_id))
        if not budget:
            raise ValueError("Budget not found")
        return budget

    def create(self, data: BudgetIn) -> Budget:
        budget = Budget(
            category=data.category,
            amount=data.amount,
            month=month_start(data.month),
        )
        self.session.add(budget)
        self.session.commit()
        self.session.refresh(budget)
        logger.info(
            f"budget_created: id={budget.id} category={budget.category} "
            f"month={budget.month.isoformat()}"
        )
        return budget

    def delete(self, budget_id: str) -> None:
        budget = self.get(budget_id)
        self.session.delete(budget)
        self.session.commit()
        logger.info(f"budget_deleted: id={budget_id}")

    def spend_for(self, category: str, month: date) -> Decimal:
        """Expenses on `category` in the calendar month of `month`.

        SQL only narrows the candidate rows; the sum itself goes through
        ``reports.spend_for`` so progress bars and reports agree.
        """
        stmt = select(Transaction).where(
            Transaction.category == category,
            Transaction.date >= month_start(month),
            Transaction.date <= month_end(month),
        )
        rows = [txn.to_record() for txn in self.session.scalars(stmt).all()]
        return spend_for(rows, category, month)

    def progress_for(self, category: str, month: date) -> Decimal:
        budgets = self.snapshot(month)
        return budget_progress(budgets, category, month, self.spend_for(category, month))


@dataclass(frozen=True)
class ReportView:
    report: SpendingReport
    progress: tuple[BudgetProgress, ...]
    bars: tuple[BarGeometry, ...]
    line: LineLayout
    canvas_width: float
    canvas_height: float


class ReportService:
    """Loads one consistent snapshot and runs the whole reporting pipeline on it."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.settings = get_settings()

    def build(
        self,
        reference_month: date,
        *,
        months_back: Optional[int] = None,
        canvas_width: Optional[float] = None,
        canvas_height: Optional[float] = None,
    ) -> ReportView:
        months_back = (
            self.settings.report_months_back if months_back is None else months_back
        )
        width = self.settings.chart_width if canvas_width is None else canvas_width
        height = self.settings.chart_height if canvas_height is None else canvas_height

        transactions = TransactionService(self.session).snapshot()
        budgets = BudgetService(self.session).snapshot()

        report = aggregate(
            transactions,
            reference_month,
            # Every budgeted category is reported, whichever month its budget
            # belongs to; progress below stays scoped to the reference month.
            budget_categories(budgets),
            months_back,
        )
        progress = progress_for_month(budgets, report.categories, reference_month)
        bars = layout_bars(category_bar_values(report.categories), width, height)
        line = layout_line(monthly_line_values(report.months), width, height)
        logger.info(
            f"report_built: month={report.reference_month.isoformat()} "
            f"categories={len(report.categories)} months={len(report.months)}"
        )
        return ReportView(
            report=report,
            progress=progress,
            bars=bars,
            line=line,
            canvas_width=width,
            canvas_height=height,
        )

    def progress(self, reference_month: date) -> tuple[BudgetProgress, ...]:
        transactions = TransactionService(self.session).snapshot()
        budgets = BudgetService(self.session).snapshot(reference_month)
        report = aggregate(
            transactions,
            reference_month,
            budget_categories(budgets, reference_month),
            0,
        )
        return progress_for_month(budgets, report.categories, reference_month)
