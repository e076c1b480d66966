from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Optional
from urllib.error import URLError
from urllib.request import Request, urlopen

from config import get_settings

FRANKFURTER_URL = "https://api.frankfurter.app"
CURRENCY_CODE_RE = re.compile(r"[A-Z]{3}")


@dataclass(frozen=True)
class FxQuote:
    provider: str
    base: str
    quote: str
    rate: Decimal  # quote per 1 base
    rate_date: date
    fetched_at: datetime


class FxRateService:
    """Exchange rates for display only; stored amounts are never converted."""

    def __init__(self) -> None:
        self.settings = get_settings()

    def _check_provider(self) -> None:
        provider = (self.settings.fx_provider or "frankfurter").lower()
        if provider != "frankfurter":
            raise ValueError(f"Unsupported FX provider: {provider}")

    def latest_quote(
        self, base: Optional[str] = None, quote: Optional[str] = None
    ) -> FxQuote:
        self._check_provider()
        base = _currency_code(base or self.settings.fx_base)
        quote = _currency_code(quote or self.settings.fx_quote)
        # Not cached: "latest" moves during the day.
        return _fetch_frankfurter_quote(
            "latest", base, quote, timeout=self.settings.fx_timeout_secs
        )

    def quote_for_date(
        self, on_date: date, base: Optional[str] = None, quote: Optional[str] = None
    ) -> FxQuote:
        self._check_provider()
        base = _currency_code(base or self.settings.fx_base)
        quote = _currency_code(quote or self.settings.fx_quote)
        return _fetch_frankfurter_quote_cached(
            on_date.isoformat(), base, quote, timeout=self.settings.fx_timeout_secs
        )


def _currency_code(value: str) -> str:
    code = value.strip().upper()
    if not CURRENCY_CODE_RE.fullmatch(code):
        raise ValueError(f"Invalid currency code: {value!r}")
    return code


def format_rate(quote: FxQuote) -> str:
    return f"1 {quote.base} = {quote.rate:.2f} {quote.quote}"


def _fetch_frankfurter_quote(
    on: str, base: str, quote: str, *, timeout: float
) -> FxQuote:
    if base == quote:
        return FxQuote(
            provider="frankfurter",
            base=base,
            quote=quote,
            rate=Decimal("1"),
            rate_date=date.today() if on == "latest" else date.fromisoformat(on),
            fetched_at=datetime.now(timezone.utc),
        )

    url = f"{FRANKFURTER_URL}/{on}?from={base}&to={quote}"
    req = Request(url, headers={"Accept": "application/json"})
    fetched_at = datetime.now(timezone.utc)
    try:
        with urlopen(req, timeout=timeout) as resp:
            payload = json.loads(resp.read().decode("utf-8"))
    except (URLError, TimeoutError, json.JSONDecodeError) as exc:
        raise RuntimeError(
            f"Failed to fetch FX rate {base}/{quote} from Frankfurter for {on}"
        ) from exc

    try:
        rate_value = payload["rates"][quote]
        effective_date = date.fromisoformat(payload["date"])
        rate = Decimal(str(rate_value))
    except (KeyError, TypeError, ValueError, InvalidOperation) as exc:
        raise RuntimeError("Unexpected FX provider response") from exc

    return FxQuote(
        provider="frankfurter",
        base=base,
        quote=quote,
        rate=rate,
        rate_date=effective_date,
        fetched_at=fetched_at,
    )


@lru_cache(maxsize=2048)
def _fetch_frankfurter_quote_cached(
    on: str, base: str, quote: str, *, timeout: float
) -> FxQuote:
    return _fetch_frankfurter_quote(on, base, quote, timeout=timeout)
