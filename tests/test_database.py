from datetime import date
from decimal import Decimal
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect
from sqlalchemy.orm import Session

from database import create_db_engine
from schemas import BudgetIn, TransactionIn
from services import BudgetService, TransactionService

ROOT = Path(__file__).resolve().parents[1]


def _alembic_config(url: str) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", url)
    return cfg


def test_engine_sets_sqlite_pragmas(tmp_path) -> None:
    engine = create_db_engine(f"sqlite:///{tmp_path / 'budget.db'}", busy_timeout_ms=1234)
    with engine.connect() as conn:
        assert conn.exec_driver_sql("PRAGMA busy_timeout").scalar() == 1234
        assert conn.exec_driver_sql("PRAGMA journal_mode").scalar() == "wal"


def test_migrations_own_the_schema(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'budget.db'}"
    cfg = _alembic_config(url)
    command.upgrade(cfg, "head")
    # A second run is a no-op once the version table is stamped.
    command.upgrade(cfg, "head")

    engine = create_db_engine(url)
    inspector = inspect(engine)
    assert {"transactions", "budgets", "alembic_version"} <= set(inspector.get_table_names())
    assert "seq" in {col["name"] for col in inspector.get_columns("budgets")}

    with Session(engine) as session:
        BudgetService(session).create(
            BudgetIn(category="Groceries", amount=Decimal("400"), month=date(2025, 1, 1))
        )
        TransactionService(session).create(
            TransactionIn(category="Groceries", amount=Decimal("100"), date=date(2025, 1, 2))
        )
        assert BudgetService(session).progress_for("Groceries", date(2025, 1, 1)) == Decimal("25")


def test_sequence_migration_keeps_previous_order(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'budget.db'}"
    cfg = _alembic_config(url)
    command.upgrade(cfg, "202501081500")

    engine = create_db_engine(url)
    with engine.begin() as conn:
        for budget_id, created in [
            ("b", "2025-01-01 09:00:00"),
            ("a", "2025-01-01 10:00:00"),
            ("c", "2025-01-01 09:00:00"),
        ]:
            conn.exec_driver_sql(
                "INSERT INTO budgets (id, category, amount, month, created_at, updated_at) "
                "VALUES (?, 'Groceries', 100, '2025-01-01', ?, ?)",
                (budget_id, created, created),
            )
    engine.dispose()

    command.upgrade(cfg, "head")
    engine = create_db_engine(url)
    with engine.connect() as conn:
        ids = [row[0] for row in conn.exec_driver_sql("SELECT id FROM budgets ORDER BY seq")]
    assert ids == ["b", "c", "a"]
