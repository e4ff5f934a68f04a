"""Sales collection: append-only recording and per-day reporting."""
import logging
import re
from typing import List, Optional

from pydantic import ValidationError

from .core import current_timestamp, generate_unique_id
from .database import JsonFileStore, Record
from .models import DailyReport, LineItem, Sale

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


class SalesStore:
    def __init__(self, files: JsonFileStore, timezone: str = "Asia/Colombo"):
        self.files = files
        self.timezone = timezone

    def get_all(self) -> List[Sale]:
        sales = []
        for record in self.files.read_all():
            try:
                sales.append(Sale.model_validate(record))
            except ValidationError as exc:
                logger.warning("skipping malformed sale record: %s", exc)
        return sales

    def record_sale(self, items: List[LineItem], total_lkr: float) -> Optional[Sale]:
        if not items:
            return None
        sale = Sale(
            sale_id=generate_unique_id("sale_"),
            timestamp=current_timestamp(self.timezone),
            items=items,
            total_lkr=total_lkr,
        )

        def _append(records: List[Record]) -> bool:
            records.append(sale.model_dump())
            return True

        if not self.files.update(_append):
            return None
        logger.info("recorded sale %s (%d items, total %.2f)", sale.sale_id, len(items), total_lkr)
        return sale

    def get_sales_by_date(self, date: str) -> List[Sale]:
        if not _DATE_RE.fullmatch(date):
            return []
        return [s for s in self.get_all() if s.sale_date == date]

    def daily_report(self, date: str) -> DailyReport:
        return summarize(date, self.get_sales_by_date(date))


def summarize(date: str, sales: List[Sale]) -> DailyReport:
    return DailyReport(
        date=date,
        number_of_sales=len(sales),
        total_revenue=sum(s.total_lkr for s in sales),
    )
