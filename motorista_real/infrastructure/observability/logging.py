"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from motorista_real.domain.models import DailyFinancialSnapshot, DynamicGoal

SERVICE_NAME = "motorista-real"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = SERVICE_NAME


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_snapshot(
    request_id: str,
    user_id: str,
    vehicle_id: str,
    snapshot: DailyFinancialSnapshot,
    goal: DynamicGoal,
    duration_ms: float,
) -> None:
    """Log structured dashboard computation for analysis"""
    logging.getLogger(__name__).info(
        "Snapshot computed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "vehicle_id": vehicle_id,
            "step": "snapshot_complete",
            "profit": round(snapshot.profit, 2),
            "amortized_cost": round(snapshot.amortized_cost, 2),
            "distance_is_estimate": snapshot.distance_is_estimate,
            "dynamic_goal": round(goal.dynamic_goal, 2),
            "goal_diluted": goal.is_diluted,
            "duration_ms": duration_ms,
        },
    )
