import logging
from datetime import date
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Response
from sqlalchemy.orm import Session

from colors import LABEL_COLOR, LINE_COLOR, band_color, income_color, palette_color
from config import get_settings
from database import SessionLocal
from fx_rates import FxRateService, format_rate
from models import Budget, Transaction
from periods import month_key, parse_month
from progress import BudgetProgress
from scheduler import SchedulerManager
from schemas import (
    BudgetIn,
    BudgetOut,
    BudgetProgressOut,
    TransactionIn,
    TransactionOut,
)
from services import BudgetService, ReportService, TransactionService

settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Budget Reports")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


scheduler_manager = SchedulerManager()


@app.on_event("startup")
def startup_event():
    scheduler_manager.start()


@app.on_event("shutdown")
def shutdown_event():
    scheduler_manager.stop()


def month_from_query(value: Optional[str]) -> date:
    try:
        return parse_month(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def transaction_out(txn: Transaction) -> TransactionOut:
    return TransactionOut(
        id=txn.id,
        category=txn.category,
        amount=txn.amount,
        date=txn.date,
        is_income=txn.is_income,
        notes=txn.notes,
        color=income_color(txn.is_income).value,
    )


def budget_out(budget: Budget) -> BudgetOut:
    return BudgetOut.model_validate(budget)


def progress_out(row: BudgetProgress) -> BudgetProgressOut:
    return BudgetProgressOut(
        category=row.category,
        month=row.month,
        budget_amount=row.budget_amount,
        spent=row.spent,
        ratio=row.ratio,
        band=row.band.value,
        color=band_color(row.ratio).value,
    )


@app.get("/api/transactions")
def api_transactions(db: Session = Depends(get_db)):
    items = TransactionService(db).list_all()
    return {"items": [transaction_out(txn) for txn in items]}


@app.post("/api/transactions", status_code=201)
def api_create_transaction(data: TransactionIn, db: Session = Depends(get_db)):
    txn = TransactionService(db).create(data)
    return transaction_out(txn)


@app.get("/api/transactions/{transaction_id}")
def api_transaction_detail(transaction_id: str, db: Session = Depends(get_db)):
    try:
        txn = TransactionService(db).get(transaction_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return transaction_out(txn)


@app.put("/api/transactions/{transaction_id}")
def api_update_transaction(
    transaction_id: str, data: TransactionIn, db: Session = Depends(get_db)
):
    try:
        txn = TransactionService(db).update(transaction_id, data)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return transaction_out(txn)


@app.delete("/api/transactions/{transaction_id}", status_code=204)
def api_delete_transaction(transaction_id: str, db: Session = Depends(get_db)):
    try:
        TransactionService(db).delete(transaction_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=204)


@app.get("/api/budgets")
def api_budgets(month: Optional[str] = None, db: Session = Depends(get_db)):
    reference = month_from_query(month) if month else None
    items = BudgetService(db).list_all(reference)
    return {"items": [budget_out(budget) for budget in items]}


@app.post("/api/budgets", status_code=201)
def api_create_budget(data: BudgetIn, db: Session = Depends(get_db)):
    budget = BudgetService(db).create(data)
    return budget_out(budget)


@app.get("/api/budgets/progress")
def api_budget_progress(month: Optional[str] = None, db: Session = Depends(get_db)):
    reference = month_from_query(month)
    rows = ReportService(db).progress(reference)
    return {
        "month": month_key(reference),
        "items": [progress_out(row) for row in rows],
    }


@app.delete("/api/budgets/{budget_id}", status_code=204)
def api_delete_budget(budget_id: str, db: Session = Depends(get_db)):
    try:
        BudgetService(db).delete(budget_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=204)


@app.get("/api/reports")
def api_reports(
    month: Optional[str] = None,
    months_back: Optional[int] = Query(default=None, ge=0, le=120),
    width: Optional[float] = Query(default=None, gt=0),
    height: Optional[float] = Query(default=None, gt=0),
    db: Session = Depends(get_db),
):
    reference = month_from_query(month)
    view = ReportService(db).build(
        reference,
        months_back=months_back,
        canvas_width=width,
        canvas_height=height,
    )
    return {
        "month": month_key(view.report.reference_month),
        "canvas": {"width": view.canvas_width, "height": view.canvas_height},
        "categories": [
            {"category": row.category, "amount": str(row.amount)}
            for row in view.report.categories
        ],
        "monthly": [
            {"month": month_key(row.month), "label": row.label, "amount": str(row.amount)}
            for row in view.report.months
        ],
        "progress": [progress_out(row) for row in view.progress],
        "bars": [
            {
                "x": bar.x,
                "y": bar.y,
                "width": bar.width,
                "height": bar.height,
                "label": bar.label,
                "color_index": bar.color_index,
                "color": palette_color(bar.color_index).value,
                "label_x": bar.label_x,
                "label_y": bar.label_y,
            }
            for bar in view.bars
        ],
        "line": {
            "step": view.line.step,
            "color": LINE_COLOR.value,
            "label_color": LABEL_COLOR.value,
            "points": [{"x": p.x, "y": p.y} for p in view.line.points],
            "labels": [
                {
                    "text": label.text,
                    "x": label.x,
                    "y": label.y,
                    "rotation": label.rotation,
                }
                for label in view.line.labels
            ],
        },
    }


@app.get("/api/fx-rate")
def api_fx_rate(base: Optional[str] = None, quote: Optional[str] = None):
    try:
        fx = FxRateService().latest_quote(base, quote)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RuntimeError as exc:
        logger.warning(f"fx_rate_failed: base={base} quote={quote} error={exc}")
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {
        "base": fx.base,
        "quote": fx.quote,
        "rate": str(fx.rate),
        "rate_date": fx.rate_date.isoformat(),
        "display": format_rate(fx),
    }
