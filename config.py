import os
from functools import lru_cache
from pathlib import Path


class Settings:
    def __init__(
        self,
        database_url: str,
        timezone: str,
        log_level: str,
        report_months_back: int,
        chart_width: float,
        chart_height: float,
        fx_provider: str,
        fx_base: str,
        fx_quote: str,
        fx_timeout_secs: float,
        progress_refresh_secs: int,
        sqlite_busy_timeout_ms: int,
    ) -> None:
        self.database_url = database_url
        self.timezone = timezone
        self.log_level = log_level
        self.report_months_back = report_months_back
        self.chart_width = chart_width
        self.chart_height = chart_height
        self.fx_provider = fx_provider
        self.fx_base = fx_base
        self.fx_quote = fx_quote
        self.fx_timeout_secs = fx_timeout_secs
        self.progress_refresh_secs = progress_refresh_secs
        self.sqlite_busy_timeout_ms = sqlite_busy_timeout_ms


def _ensure_data_dir() -> Path:
    root = Path(os.getenv("BUDGET_DATA_DIR", "./data")).resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_dir = _ensure_data_dir()
    default_db = data_dir / "budget.db"
    database_url = os.getenv("BUDGET_DATABASE_URL", f"sqlite:///{default_db}")
    timezone = os.getenv("BUDGET_TIMEZONE", "Europe/Berlin")
    log_level = os.getenv("BUDGET_LOG_LEVEL", "INFO").upper()
    report_months_back = int(os.getenv("BUDGET_REPORT_MONTHS_BACK", "6"))
    chart_width = float(os.getenv("BUDGET_CHART_WIDTH", "600"))
    chart_height = float(os.getenv("BUDGET_CHART_HEIGHT", "400"))
    fx_provider = os.getenv("BUDGET_FX_PROVIDER", "frankfurter")
    fx_base = os.getenv("BUDGET_FX_BASE", "USD").upper()
    fx_quote = os.getenv("BUDGET_FX_QUOTE", "JPY").upper()
    fx_timeout_secs = float(os.getenv("BUDGET_FX_TIMEOUT_SECS", "5"))
    progress_refresh_secs = int(os.getenv("BUDGET_PROGRESS_REFRESH_SECS", "10"))
    sqlite_busy_timeout_ms = int(os.getenv("BUDGET_SQLITE_BUSY_TIMEOUT_MS", "5000"))
    return Settings(
        database_url=database_url,
        timezone=timezone,
        log_level=log_level,
        report_months_back=report_months_back,
        chart_width=chart_width,
        chart_height=chart_height,
        fx_provider=fx_provider,
        fx_base=fx_base,
        fx_quote=fx_quote,
        fx_timeout_secs=fx_timeout_secs,
        progress_refresh_secs=progress_refresh_secs,
        sqlite_busy_timeout_ms=sqlite_busy_timeout_ms,
    )
