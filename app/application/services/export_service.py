"""Export service — report data sets rendered as JSON payloads or CSV files.

CSV layout:
- header row taken from the keys of the first record
- string fields double-quoted, embedded quotes doubled
- numbers and booleans written bare, list values joined with "; "
"""

import csv
from datetime import date, datetime
from typing import Any, Dict, List, Tuple

import pandas as pd
import pytz

from app.config import get_settings
from app.domain.repositories.product_repository import ProductRepository
from app.domain.schemas.product import ProductRead

settings = get_settings()

REPORT_FILENAMES = {
    "all": "full-inventory-report",
    "inventory": "inventory-report",
    "low-stock": "low-stock-report",
    "categories": "category-report",
}


def get_current_date() -> date:
    """Get current date in the configured timezone."""
    return datetime.now(pytz.timezone(settings.TIMEZONE)).date()


def _products(products) -> List[Dict[str, Any]]:
    return [ProductRead.model_validate(p).model_dump(mode="json") for p in products]


def build_export_data(repo: ProductRepository, report_type: str) -> Tuple[List[Dict[str, Any]], str]:
    """Return the rows for a report type and its filename stem."""
    if report_type == "low-stock":
        data = _products(repo.get_low_stock())
    elif report_type == "categories":
        data = repo.get_category_counts()
    else:
        data = _products(repo.get_all())
    return data, REPORT_FILENAMES.get(report_type, REPORT_FILENAMES["all"])


def export_filename(stem: str, extension: str = "csv") -> str:
    return f"{stem}-{get_current_date().isoformat()}.{extension}"


class _CsvBool(int):
    """Numeric to the csv writer, so it stays unquoted, but printed as true/false."""

    def __str__(self) -> str:
        return "true" if self else "false"


def _flatten(value: Any) -> Any:
    if isinstance(value, bool):
        return _CsvBool(value)
    if isinstance(value, (list, tuple, set)):
        return "; ".join(str(v) for v in value)
    return value


def render_csv(data: List[Dict[str, Any]]) -> str:
    if not data:
        return ""

    headers = list(data[0].keys())
    rows = [{key: _flatten(record.get(key)) for key in headers} for record in data]
    frame = pd.DataFrame(rows, columns=headers, dtype=object)
    body = frame.to_csv(
        index=False,
        header=False,
        quoting=csv.QUOTE_NONNUMERIC,
        lineterminator="\n",
    )
    return ",".join(headers) + "\n" + body.rstrip("\n")


def render_json(report_type: str, data: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "type": report_type,
        "timestamp": datetime.now(pytz.utc).isoformat(),
        "count": len(data),
        "data": data,
    }
