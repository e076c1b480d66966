"""Chart geometry for the spending reports.

Coordinates use a top-left origin: y grows downwards and bars stand on the
bottom edge of the canvas. A fixed strip at the bottom is reserved for axis
labels, so the tallest bar (or the highest line point) reaches
``canvas_height - label_reserve``.

Zero data is handled differently by the two layouts: an all-zero bar chart
still yields one flat bar per value, while an all-zero line chart yields no
points at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence, Union

from colors import CHART_PALETTE
from reports import CategorySpending, MonthlySpending

LABEL_RESERVE = 70.0
LABEL_OFFSET = 20.0
MIN_BAR_HEIGHT = 5.0
LABEL_ROTATION = -45.0

Amount = Union[Decimal, int, float]


@dataclass(frozen=True)
class BarGeometry:
    x: float
    y: float
    width: float
    height: float
    label: str
    color_index: int
    label_x: float
    label_y: float


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class AxisLabel:
    text: str
    x: float
    y: float
    rotation: float = LABEL_ROTATION


@dataclass(frozen=True)
class LineLayout:
    points: tuple[Point, ...]
    labels: tuple[AxisLabel, ...]
    step: float

    @property
    def segments(self) -> tuple[tuple[Point, Point], ...]:
        return tuple(zip(self.points, self.points[1:]))


def _max_amount(values: Sequence[tuple[str, Amount]]) -> Decimal:
    return max(Decimal(amount) for _, amount in values)


def _scaled(amount: Amount, max_amount: Decimal, span: float) -> float:
    return float(Decimal(amount) / max_amount) * span


def layout_bars(
    values: Sequence[tuple[str, Amount]],
    canvas_width: float,
    canvas_height: float,
    *,
    label_reserve: float = LABEL_RESERVE,
    palette_size: int = len(CHART_PALETTE),
) -> tuple[BarGeometry, ...]:
    if not values:
        return ()

    count = len(values)
    max_amount = _max_amount(values)
    bar_width = canvas_width / (count * 2)
    span = canvas_height - label_reserve

    bars: list[BarGeometry] = []
    for i, (label, amount) in enumerate(values):
        if max_amount == 0:
            height = 0.0
        else:
            height = max(MIN_BAR_HEIGHT, _scaled(amount, max_amount, span))
        x = i * bar_width * 2
        bars.append(
            BarGeometry(
                x=x,
                y=canvas_height - height,
                width=bar_width,
                height=height,
                label=label,
                color_index=i % palette_size,
                label_x=x + bar_width / 2,
                label_y=canvas_height - LABEL_OFFSET,
            )
        )
    return tuple(bars)


def layout_line(
    values: Sequence[tuple[str, Amount]],
    canvas_width: float,
    canvas_height: float,
    *,
    label_reserve: float = LABEL_RESERVE,
) -> LineLayout:
    count = len(values)
    step = canvas_width / (count - 1) if count > 1 else canvas_width
    if not values:
        return LineLayout(points=(), labels=(), step=step)

    max_amount = _max_amount(values)
    if max_amount == 0:
        return LineLayout(points=(), labels=(), step=step)

    span = canvas_height - label_reserve
    points = tuple(
        Point(x=i * step, y=canvas_height - _scaled(amount, max_amount, span))
        for i, (_, amount) in enumerate(values)
    )
    labels = tuple(
        AxisLabel(text=label, x=i * step, y=canvas_height - LABEL_OFFSET)
        for i, (label, _) in enumerate(values)
    )
    return LineLayout(points=points, labels=labels, step=step)


def category_bar_values(
    rows: Iterable[CategorySpending],
) -> list[tuple[str, Decimal]]:
    return [(row.category, row.amount) for row in rows]


def monthly_line_values(rows: Iterable[MonthlySpending]) -> list[tuple[str, Decimal]]:
    return [(row.label, row.amount) for row in rows]
