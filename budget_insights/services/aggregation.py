"""Transaction aggregation across manual expenses and bank imports"""

from datetime import date
from typing import Any, Dict, List, Optional

from budget_insights.config import settings
from budget_insights.domain.models import AggregatedSpend, SpendRecord, SpendSource
from budget_insights.infrastructure.database.repositories import RecordStore, as_date
from budget_insights.services.reads import ReadTracker


def _date_filter(start: Optional[date], end: Optional[date]) -> Dict[str, date]:
    bounds = {}
    if start is not None:
        bounds["gte"] = start
    if end is not None:
        bounds["lte"] = end
    return bounds


def _in_window(day: Optional[date], start: Optional[date], end: Optional[date]) -> bool:
    if day is None:
        return False
    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True


def _to_spend(row: Dict[str, Any], date_field: str, source: SpendSource) -> SpendRecord:
    return SpendRecord(
        record_id=str(row["id"]),
        occurred_on=as_date(row[date_field]),
        amount=abs(float(row["amount"] or 0)),
        category_id=row.get("category_id"),
        source=source,
    )


class TransactionAggregator:
    """
    Merges manual expenses and bank expense transactions into SpendRecords.

    Each source is fetched on its own; a failing source contributes nothing
    and is listed in `failed_sources`. The store's range filter is re-applied
    in memory so the window is exact at both boundaries.
    """

    def __init__(self, store: RecordStore, page_limit: Optional[int] = None):
        self.store = store
        self.page_limit = page_limit or settings.store_page_limit

    def _fetch_manual(self, user_id: str, start, end, category_id) -> List[SpendRecord]:
        filters: Dict[str, Any] = {"user_id": user_id}
        window = _date_filter(start, end)
        if window:
            filters["date"] = window
        if category_id:
            filters["category_id"] = category_id
        rows = self.store.query("expense", filters, limit=self.page_limit)
        return [_to_spend(row, "date", "manual") for row in rows]

    def _fetch_bank(self, user_id: str, start, end, category_id) -> List[SpendRecord]:
        # Income and transfers are classified upstream; only expenses count as spend
        filters: Dict[str, Any] = {"user_id": user_id, "transaction_type": "expense"}
        window = _date_filter(start, end)
        if window:
            filters["booking_date"] = window
        if category_id:
            filters["category_id"] = category_id
        rows = self.store.query("bank_transaction", filters, limit=self.page_limit)
        return [
            _to_spend(row, "booking_date", "bank")
            for row in rows
            if (row.get("transaction_type") or "expense") == "expense"
        ]

    def fetch(
        self,
        user_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
        category_id: Optional[str] = None,
        tracker: Optional[ReadTracker] = None,
    ) -> AggregatedSpend:
        """Spend records in [start, end] (either bound optional) from both sources"""
        tracker = tracker or ReadTracker(user_id)
        failed_before = len(tracker.failures)

        manual = tracker.read("manual", lambda: self._fetch_manual(user_id, start, end, category_id), [])
        bank = tracker.read("bank", lambda: self._fetch_bank(user_id, start, end, category_id), [])

        records = [r for r in manual + bank if _in_window(r.occurred_on, start, end)]
        if category_id:
            records = [r for r in records if r.category_id == category_id]

        return AggregatedSpend(
            records=records,
            failed_sources=tracker.failed_sources[failed_before:],
        )

    def total(self, user_id: str, start=None, end=None, category_id=None, tracker=None) -> float:
        return self.fetch(user_id, start, end, category_id, tracker).total

    def has_spend_on(self, user_id: str, day: date, tracker: Optional[ReadTracker] = None) -> bool:
        """Whether any expense from either source is dated `day`"""
        return bool(self.fetch(user_id, day, day, tracker=tracker).records)
