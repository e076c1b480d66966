from decimal import Decimal
from enum import Enum
from typing import Union

Ratio = Union[Decimal, int, float]

WARNING_THRESHOLD = Decimal("80")
OVER_BUDGET_THRESHOLD = Decimal("100")


class Color(str, Enum):
    red = "red"
    yellow = "yellow"
    green = "green"
    blue = "blue"
    purple = "purple"
    black = "black"


class SeverityBand(str, Enum):
    healthy = "healthy"
    warning = "warning"
    over_budget = "over_budget"


# Bars cycle through this by position, not by category.
CHART_PALETTE: tuple[Color, ...] = (Color.blue, Color.green, Color.red, Color.purple)
LINE_COLOR = Color.blue
LABEL_COLOR = Color.black

_BAND_COLORS = {
    SeverityBand.healthy: Color.green,
    SeverityBand.warning: Color.yellow,
    SeverityBand.over_budget: Color.red,
}


def severity_band(ratio: Ratio) -> SeverityBand:
    value = Decimal(str(ratio))
    if value >= OVER_BUDGET_THRESHOLD:
        return SeverityBand.over_budget
    if value >= WARNING_THRESHOLD:
        return SeverityBand.warning
    return SeverityBand.healthy


def band_color(ratio: Ratio) -> Color:
    return _BAND_COLORS[severity_band(ratio)]


def income_color(is_income: bool) -> Color:
    return Color.green if is_income else Color.red


def palette_color(color_index: int) -> Color:
    return CHART_PALETTE[color_index % len(CHART_PALETTE)]
