import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from database import Base
from reports import BudgetRecord, TransactionRecord


def _new_id() -> str:
    return str(uuid.uuid4())


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )


class Transaction(Base, TimestampMixin):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_transactions_amount_nonnegative"),
        Index("ix_transactions_date", "date"),
        Index("ix_transactions_category_date", "category", "date"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    is_income: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    def to_record(self) -> TransactionRecord:
        return TransactionRecord(
            id=self.id,
            category=self.category,
            amount=Decimal(self.amount),
            date=self.date,
            is_income=bool(self.is_income),
            notes=self.notes,
        )


class Budget(Base, TimestampMixin):
    __tablename__ = "budgets"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_budgets_amount_nonnegative"),
        Index("ix_budgets_month_category", "month", "category"),
    )

    # Creation order; duplicate (category, month) budgets resolve to the
    # lowest seq.
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(
        String(36), nullable=False, unique=True, default=_new_id
    )
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    # Always the first day of the month.
    month: Mapped[date] = mapped_column(Date, nullable=False)

    def to_record(self) -> BudgetRecord:
        return BudgetRecord(
            id=self.id,
            category=self.category,
            amount=Decimal(self.amount),
            month=self.month,
        )
