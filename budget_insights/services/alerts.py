"""Alert synthesis: model-written alerts with a deterministic fallback"""

import asyncio
import logging
import time
import weakref
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from budget_insights.config import settings
from budget_insights.domain.alerts import generate_fallback_alerts, prioritize, summarize_severities
from budget_insights.domain.budgets import active_categories
from budget_insights.domain.drafts import parse_alert_drafts, resolve_draft
from budget_insights.domain.exceptions import AlertNotFoundError, GenerativeCallFailure
from budget_insights.domain.models import Alert, CategoryBudgetView, FinancialSummary
from budget_insights.domain.prompts import ALERTS_SYSTEM_PROMPT, build_alerts_prompt
from budget_insights.infrastructure.clients.completion import CompletionClient
from budget_insights.infrastructure.database.repositories import RecordStore
from budget_insights.infrastructure.observability.logging import log_alert_batch
from budget_insights.infrastructure.observability.metrics import completion_failure_counter, record_alert_batch
from budget_insights.services.budget import BudgetService
from budget_insights.utils.money import round2

logger = logging.getLogger(__name__)

# One generation at a time per user.
# Entries live only while some caller holds or waits on the lock.
_generation_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


def generation_lock(user_id: str) -> asyncio.Lock:
    lock = _generation_locks.get(user_id)
    if lock is None:
        lock = asyncio.Lock()
        _generation_locks[user_id] = lock
    return lock


@dataclass
class AlertBatch:
    """Result of one generation run"""

    alerts: List[Alert]
    source: str  # model | fallback
    summary: Dict[str, int]
    prediction: Dict[str, Any]
    stats: Dict[str, Any] = field(default_factory=dict)


class AlertSynthesizer:
    """
    Produces at most `max_alerts` alerts for a month summary.

    The model is asked first; any GenerativeCallFailure (timeout, HTTP error,
    non-JSON, empty or schema-invalid drafts) switches to the rule-based
    generator. Both paths return the same Alert shape, prioritized
    critical > warning > info.
    """

    def __init__(self, completion: CompletionClient, max_alerts: Optional[int] = None, timeout: Optional[float] = None):
        self.completion = completion
        self.max_alerts = max_alerts or settings.max_alerts
        self.timeout = timeout or settings.llm_timeout_seconds

    async def _model_alerts(self, summary: FinancialSummary, views: List[CategoryBudgetView]) -> List[Alert]:
        prompt = build_alerts_prompt(summary, active_categories(views), self.max_alerts)
        try:
            raw = await asyncio.wait_for(
                self.completion.complete(
                    ALERTS_SYSTEM_PROMPT,
                    prompt,
                    model=settings.llm_model,
                    max_tokens=settings.llm_max_tokens,
                    temperature=settings.llm_temperature,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise GenerativeCallFailure("timeout", f"Completion exceeded {self.timeout}s") from e

        drafts = parse_alert_drafts(raw)
        return [resolve_draft(draft, views) for draft in drafts]

    async def synthesize(self, summary: FinancialSummary, views: List[CategoryBudgetView]) -> Tuple[List[Alert], str]:
        """Return (alerts, source) where source is "model" or "fallback" """
        try:
            alerts = await self._model_alerts(summary, views)
            return prioritize(alerts, self.max_alerts), "model"
        except GenerativeCallFailure as e:
            completion_failure_counter.labels(reason=e.reason).inc()
            logger.warning(f"Falling back to rule-based alerts: {e}", extra={"reason": e.reason})
            return generate_fallback_alerts(summary, views, self.max_alerts), "fallback"


def _to_alert(row: Dict[str, Any]) -> Alert:
    return Alert(
        alert_id=str(row["id"]),
        alert_type=row["alert_type"],
        title=row["title"],
        message=row.get("message") or "",
        severity=row["severity"],
        category_name=row.get("category_name"),
        amount_involved=row.get("amount_involved"),
        recommended_action=row.get("recommended_action") or "",
        low_confidence=bool(row.get("low_confidence")),
        dismissed=bool(row.get("is_dismissed")),
        generated_at=row.get("generated_at"),
    )


class AlertService:
    """Generates, lists and dismisses a user's alerts"""

    def __init__(
        self,
        store: RecordStore,
        synthesizer: AlertSynthesizer,
        budget: Optional[BudgetService] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.store = store
        self.synthesizer = synthesizer
        self.budget = budget or BudgetService(store)
        self.now = now

    def _save(self, user_id: str, alerts: List[Alert], source: str) -> List[Alert]:
        """
        Insert the batch in one transaction.

        A failed insert rolls back the rows already flushed, so the error is
        propagated and the whole batch is abandoned.
        """
        generated_at = self.now()
        saved = []
        for alert in alerts:
            row = self.store.create(
                "smart_alert",
                {
                    "user_id": user_id,
                    "alert_type": alert.alert_type,
                    "title": alert.title,
                    "message": alert.message,
                    "severity": alert.severity,
                    "category_name": alert.category_name,
                    "amount_involved": alert.amount_involved,
                    "recommended_action": alert.recommended_action,
                    "low_confidence": alert.low_confidence,
                    "is_dismissed": False,
                    "source": source,
                    "generated_at": generated_at,
                },
            )
            saved.append(_to_alert(row))
        return saved

    async def generate(self, user_id: str, request_id: Optional[str] = None) -> AlertBatch:
        """Run one generation for the user's current month and persist the alerts"""
        async with generation_lock(user_id):
            start_time = time.time()
            snapshot = self.budget.snapshot(user_id)

            alerts, source = await self.synthesizer.synthesize(snapshot.summary, snapshot.views)
            saved = self._save(user_id, alerts, source)
            self.store.commit()

            projection = snapshot.projection
            summary = snapshot.summary
            batch = AlertBatch(
                alerts=saved,
                source=source,
                summary=summarize_severities(saved),
                prediction={
                    "end_of_month_balance": round2(projection.projected_month_end_balance),
                    "risk_level": projection.risk_level,
                    "days_until_danger": projection.days_until_danger,
                    "safety_margin": round2(projection.budget_remaining),
                },
                stats={
                    "total_budget": summary.total_budget,
                    "total_spent": summary.total_spent,
                    "percentage_used": summary.percentage_used,
                    "previous_month_spent": summary.trend.previous_month_spent if summary.trend else 0.0,
                    "trend_message": summary.trend.message if summary.trend else None,
                },
            )

            duration_ms = (time.time() - start_time) * 1000
            record_alert_batch(source, [a.severity for a in saved])
            log_alert_batch(user_id, source, len(saved), projection.risk_level, duration_ms, request_id)
            return batch

    def list_active(self, user_id: str, limit: int = 50) -> Tuple[List[Alert], Dict[str, int]]:
        """Non-dismissed alerts, newest first, with a severity summary"""
        rows = self.store.query(
            "smart_alert",
            {"user_id": user_id, "is_dismissed": False},
            sort=[("generated_at", "desc")],
            limit=limit,
        )
        alerts = [_to_alert(row) for row in rows]
        return alerts, summarize_severities(alerts)

    def dismiss(self, user_id: str, alert_id: str) -> Alert:
        rows = self.store.query("smart_alert", {"id": alert_id, "user_id": user_id}, limit=1)
        if not rows:
            raise AlertNotFoundError(f"Alert {alert_id} not found")
        row = self.store.update_by_id("smart_alert", alert_id, {"is_dismissed": True})
        self.store.commit()
        return _to_alert(row)

    def dismiss_all(self, user_id: str) -> int:
        rows = self.store.query("smart_alert", {"user_id": user_id, "is_dismissed": False})
        for row in rows:
            self.store.update_by_id("smart_alert", row["id"], {"is_dismissed": True})
        self.store.commit()
        return len(rows)
