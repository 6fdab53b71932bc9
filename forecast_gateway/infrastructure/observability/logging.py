"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from forecast_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, level and service name"""

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
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    logger.addHandler(handler)


def log_forecast(
    request_id: str,
    bank_account_id: int,
    forecast,
    duration_ms: float,
) -> None:
    """Log structured forecast outcome"""
    logging.info(
        "Forecast computed",
        extra={
            "request_id": request_id,
            "bank_account_id": bank_account_id,
            "user_id": forecast.user_id,
            "step": "forecast_complete",
            "start": forecast.start.isoformat(),
            "stop": forecast.stop.isoformat(),
            "lowest_balance": forecast.lowest_balance,
            "recurring_count": len(forecast.recurring),
            "pending_count": len(forecast.pending),
            "duration_ms": duration_ms,
        },
    )
