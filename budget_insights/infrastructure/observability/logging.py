"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from budget_insights.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def log_alert_batch(
    user_id: str,
    source: str,
    alert_count: int,
    risk_level: str,
    duration_ms: float,
    request_id: Optional[str] = None,
) -> None:
    """Log structured alert generation outcome"""
    logging.info(
        "Alert batch generated",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "alerts_generated",
            "source": source,
            "alert_count": alert_count,
            "risk_level": risk_level,
            "duration_ms": duration_ms,
        },
    )


def log_streak_check_in(user_id: str, outcome: str, current_streak: int, best_streak: int) -> None:
    """Log the result of a daily no-spend check-in"""
    logging.info(
        "Streak check-in",
        extra={
            "user_id": user_id,
            "step": "streak_check_in",
            "outcome": outcome,
            "current_streak": current_streak,
            "best_streak": best_streak,
        },
    )
