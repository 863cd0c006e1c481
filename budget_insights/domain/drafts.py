"""Strict decoding of model-written alert drafts"""

import json
import re
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from budget_insights.domain.exceptions import GenerativeCallFailure
from budget_insights.domain.models import Alert, AlertType, CategoryBudgetView, Severity

_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


class AlertDraft(BaseModel):
    """Alert as the model is instructed to write it"""

    model_config = ConfigDict(extra="ignore")

    alert_type: AlertType
    title: str = Field(..., min_length=1)
    message: str = ""
    severity: Severity
    category_name: Optional[str] = None
    category_id: Optional[str] = None
    amount_involved: Optional[float] = None
    recommended_action: str = ""


_DRAFT_LIST = TypeAdapter(List[AlertDraft])


def strip_code_fences(text: str) -> str:
    return _FENCE.sub("", text).strip()


def parse_alert_drafts(raw: Optional[str]) -> List[AlertDraft]:
    """
    Decode model text into drafts, or raise GenerativeCallFailure.

    The whole payload is rejected on any mismatch (non-JSON, not an array,
    empty array, unknown alert type or severity); partially valid output is
    never trusted.
    """
    if not raw or not raw.strip():
        raise GenerativeCallFailure("empty_body", "Completion returned no content")

    try:
        payload = json.loads(strip_code_fences(raw))
    except json.JSONDecodeError as e:
        raise GenerativeCallFailure("invalid_json", f"Completion is not JSON: {e}") from e

    if not isinstance(payload, list):
        raise GenerativeCallFailure("invalid_shape", "Completion is not a JSON array")
    if not payload:
        raise GenerativeCallFailure("empty_array", "Completion returned no alerts")

    try:
        return _DRAFT_LIST.validate_python(payload)
    except ValidationError as e:
        raise GenerativeCallFailure("schema_mismatch", f"Alert draft rejected: {e.error_count()} errors") from e


def resolve_draft(draft: AlertDraft, categories: Iterable[CategoryBudgetView]) -> Alert:
    """
    Turn a draft into an Alert, resolving its category reference.

    Exact name match first, then id lookup. A reference that matches nothing
    is kept but flagged low confidence; no reference at all is a general alert.
    """
    categories = list(categories)
    by_name = {c.name: c for c in categories}
    by_id = {c.category_id: c for c in categories}

    name = (draft.category_name or "").strip() or None
    category_id = (draft.category_id or "").strip() or None

    low_confidence = False
    if name is None and category_id is None:
        resolved = None
    elif name in by_name:
        resolved = name
    elif category_id in by_id:
        resolved = by_id[category_id].name
    elif name is not None and name in by_id:
        # model put an id in the name field
        resolved = by_id[name].name
    else:
        resolved = name or category_id
        low_confidence = True

    return Alert(
        alert_type=draft.alert_type,
        title=draft.title,
        message=draft.message,
        severity=draft.severity,
        category_name=resolved,
        amount_involved=draft.amount_involved,
        recommended_action=draft.recommended_action,
        low_confidence=low_confidence,
    )
