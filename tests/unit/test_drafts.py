"""Unit tests for decoding model alert drafts"""

import json
import pytest
from budget_insights.domain.drafts import AlertDraft, parse_alert_drafts, resolve_draft, strip_code_fences
from budget_insights.domain.exceptions import GenerativeCallFailure
from budget_insights.domain.models import CategoryBudgetView

GROCERIES = CategoryBudgetView("cat-1", "Groceries", 300, 320, 106.7, True, 10, 180)

VALID = [
    {
        "alert_type": "presupuesto_excedido",
        "title": "Groceries over budget",
        "message": "You are 20 over.",
        "severity": "critical",
        "category_name": "Groceries",
        "amount_involved": 20,
        "recommended_action": "Pause eating out.",
    }
]


def test_parse_plain_json_array():
    drafts = parse_alert_drafts(json.dumps(VALID))

    assert len(drafts) == 1
    assert drafts[0].alert_type == "presupuesto_excedido"
    assert drafts[0].amount_involved == 20


def test_parse_strips_markdown_fences():
    raw = "```json\n" + json.dumps(VALID) + "\n```"

    drafts = parse_alert_drafts(raw)

    assert drafts[0].severity == "critical"
    assert strip_code_fences("```\n[]\n```") == "[]"


@pytest.mark.parametrize(
    "raw, reason",
    [
        ("", "empty_body"),
        ("Here are your alerts!", "invalid_json"),
        ('{"alert_type": "colchon_peligro"}', "invalid_shape"),
        ("[]", "empty_array"),
    ],
)
def test_parse_rejects_malformed_payloads(raw, reason):
    with pytest.raises(GenerativeCallFailure) as exc_info:
        parse_alert_drafts(raw)

    assert exc_info.value.reason == reason


def test_unknown_enum_value_rejects_whole_payload():
    """One bad draft invalidates the batch, even if the others are fine"""
    payload = VALID + [{**VALID[0], "severity": "urgent"}]

    with pytest.raises(GenerativeCallFailure) as exc_info:
        parse_alert_drafts(json.dumps(payload))

    assert exc_info.value.reason == "schema_mismatch"


def test_unknown_alert_type_is_rejected():
    payload = [{**VALID[0], "alert_type": "budget_blown"}]

    with pytest.raises(GenerativeCallFailure):
        parse_alert_drafts(json.dumps(payload))


def test_resolve_by_name_and_by_id():
    by_name = resolve_draft(AlertDraft(**VALID[0]), [GROCERIES])
    by_id = resolve_draft(AlertDraft(**{**VALID[0], "category_name": None, "category_id": "cat-1"}), [GROCERIES])
    id_in_name = resolve_draft(AlertDraft(**{**VALID[0], "category_name": "cat-1"}), [GROCERIES])

    assert by_name.category_name == "Groceries"
    assert by_id.category_name == "Groceries"
    assert id_in_name.category_name == "Groceries"
    assert not by_name.low_confidence and not by_id.low_confidence


def test_unresolved_category_is_kept_with_low_confidence():
    alert = resolve_draft(AlertDraft(**{**VALID[0], "category_name": "Gym"}), [GROCERIES])

    assert alert.category_name == "Gym"
    assert alert.low_confidence is True


def test_missing_category_is_general_alert():
    alert = resolve_draft(AlertDraft(**{**VALID[0], "category_name": None}), [GROCERIES])

    assert alert.category_name is None
    assert alert.low_confidence is False
