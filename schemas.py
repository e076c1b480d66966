from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from periods import month_start


class TransactionIn(BaseModel):
    category: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    date: date
    is_income: bool = False
    notes: Optional[str] = Field(default=None, max_length=500)

    @field_validator("category")
    @classmethod
    def _strip_category(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Category is required")
        return value


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    category: str
    amount: Decimal
    date: date
    is_income: bool
    notes: Optional[str]
    color: str


class BudgetIn(BaseModel):
    category: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    month: date

    @field_validator("category")
    @classmethod
    def _strip_category(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Category is required")
        return value

    @field_validator("month")
    @classmethod
    def _normalize_month(cls, value: date) -> date:
        return month_start(value)


class BudgetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    category: str
    amount: Decimal
    month: date


class BudgetProgressOut(BaseModel):
    category: str
    month: date
    budget_amount: Decimal
    spent: Decimal
    ratio: Decimal
    band: str
    color: str
