from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from database import Base
from models import Budget
from schemas import BudgetIn, TransactionIn
from services import BudgetService, ReportService, TransactionService


def _session() -> Session:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    return Session(engine)


def test_transaction_crud_round() -> None:
    with _session() as session:
        txns = TransactionService(session)
        created = txns.create(
            TransactionIn(category=" Groceries ", amount=Decimal("12.50"), date=date(2025, 1, 3))
        )
        assert created.category == "Groceries"
        assert created.is_income is False
        assert len(created.id) == 36

        updated = txns.update(
            created.id,
            TransactionIn(
                category="Groceries",
                amount=Decimal("15"),
                date=date(2025, 1, 4),
                notes="Market",
            ),
        )
        assert updated.amount == Decimal("15")
        assert txns.get(created.id).notes == "Market"

        txns.delete(created.id)
        with pytest.raises(ValueError, match="Transaction not found"):
            txns.get(created.id)
        with pytest.raises(ValueError):
            txns.delete(created.id)


def test_transactions_listed_newest_first() -> None:
    with _session() as session:
        txns = TransactionService(session)
        for day in (3, 20, 11):
            txns.create(
                TransactionIn(category="Fun", amount=Decimal("1"), date=date(2025, 1, day))
            )
        assert [t.date.day for t in txns.list_all()] == [20, 11, 3]


def test_budget_month_is_normalized_and_deletable() -> None:
    with _session() as session:
        budgets = BudgetService(session)
        budget = budgets.create(
            BudgetIn(category="Groceries", amount=Decimal("400"), month=date(2025, 1, 17))
        )
        assert budget.month == date(2025, 1, 1)
        assert [b.id for b in budgets.list_all(date(2025, 1, 31))] == [budget.id]
        assert budgets.list_all(date(2025, 2, 1)) == []

        budgets.delete(budget.id)
        with pytest.raises(ValueError, match="Budget not found"):
            budgets.delete(budget.id)


def test_spend_for_only_counts_expenses_of_the_month() -> None:
    with _session() as session:
        txns = TransactionService(session)
        txns.create(TransactionIn(category="Groceries", amount=Decimal("150"), date=date(2025, 1, 31)))
        txns.create(TransactionIn(category="Groceries", amount=Decimal("25"), date=date(2025, 1, 1)))
        txns.create(
            TransactionIn(
                category="Groceries", amount=Decimal("500"), date=date(2025, 1, 10), is_income=True
            )
        )
        txns.create(TransactionIn(category="Groceries", amount=Decimal("70"), date=date(2025, 2, 1)))
        txns.create(TransactionIn(category="Rent", amount=Decimal("900"), date=date(2025, 1, 1)))

        budgets = BudgetService(session)
        assert budgets.spend_for("Groceries", date(2025, 1, 1)) == Decimal("175")
        assert budgets.spend_for("Travel", date(2025, 1, 1)) == Decimal("0")

        budgets.create(BudgetIn(category="Groceries", amount=Decimal("350"), month=date(2025, 1, 1)))
        assert budgets.progress_for("Groceries", date(2025, 1, 9)) == Decimal("50")
        assert budgets.progress_for("Rent", date(2025, 1, 9)) == 0


def test_report_service_builds_full_view() -> None:
    with _session() as session:
        txns = TransactionService(session)
        budgets = BudgetService(session)
        budgets.create(BudgetIn(category="Groceries", amount=Decimal("400"), month=date(2025, 6, 1)))
        budgets.create(BudgetIn(category="Rent", amount=Decimal("1000"), month=date(2025, 6, 1)))
        budgets.create(BudgetIn(category="Old", amount=Decimal("10"), month=date(2025, 5, 1)))
        txns.create(TransactionIn(category="Groceries", amount=Decimal("150"), date=date(2025, 6, 2)))
        txns.create(TransactionIn(category="Fun", amount=Decimal("60"), date=date(2025, 4, 2)))

        view = ReportService(session).build(
            date(2025, 6, 1), months_back=6, canvas_width=600, canvas_height=400
        )

        assert [row.category for row in view.report.categories] == ["Groceries", "Rent", "Old"]
        assert [row.amount for row in view.report.categories] == [
            Decimal("150"),
            Decimal("0"),
            Decimal("0"),
        ]
        assert len(view.report.months) == 6
        assert view.report.months[3].amount == Decimal("60")
        assert [row.category for row in view.progress] == ["Groceries", "Rent"]
        assert [row.ratio for row in view.progress] == [Decimal("37.5"), Decimal("0")]
        assert [bar.height for bar in view.bars] == [pytest.approx(330.0), 5.0, 5.0]
        assert len(view.line.points) == 6


def test_report_lists_categories_budgeted_in_other_months() -> None:
    with _session() as session:
        budgets = BudgetService(session)
        budgets.create(BudgetIn(category="Groceries", amount=Decimal("400"), month=date(2025, 5, 1)))
        budgets.create(BudgetIn(category="Rent", amount=Decimal("900"), month=date(2025, 6, 1)))
        TransactionService(session).create(
            TransactionIn(category="Groceries", amount=Decimal("35"), date=date(2025, 6, 8))
        )

        view = ReportService(session).build(
            date(2025, 6, 1), months_back=6, canvas_width=600, canvas_height=400
        )

        amounts = {row.category: row.amount for row in view.report.categories}
        assert [row.category for row in view.report.categories] == ["Groceries", "Rent"]
        assert amounts == {"Groceries": Decimal("35"), "Rent": Decimal("0")}
        assert [row.category for row in view.progress] == ["Rent"]
        assert [row.category for row in ReportService(session).progress(date(2025, 6, 1))] == [
            "Rent"
        ]


def test_duplicate_budgets_resolve_in_insertion_order() -> None:
    created = datetime(2025, 1, 1, 12, 0)
    with _session() as session:
        # Same timestamp, and the later id sorts first alphabetically.
        session.add(
            Budget(
                id="ffffffff-0000-0000-0000-000000000000",
                category="Groceries",
                amount=Decimal("200"),
                month=date(2025, 1, 1),
                created_at=created,
                updated_at=created,
            )
        )
        session.commit()
        session.add(
            Budget(
                id="00000000-0000-0000-0000-000000000000",
                category="Groceries",
                amount=Decimal("400"),
                month=date(2025, 1, 1),
                created_at=created,
                updated_at=created,
            )
        )
        session.commit()
        TransactionService(session).create(
            TransactionIn(category="Groceries", amount=Decimal("100"), date=date(2025, 1, 5))
        )

        budgets = BudgetService(session)
        assert [b.amount for b in budgets.list_all()] == [Decimal("200"), Decimal("400")]
        assert budgets.progress_for("Groceries", date(2025, 1, 1)) == Decimal("50")
        assert budgets.get("00000000-0000-0000-0000-000000000000").amount == Decimal("400")
