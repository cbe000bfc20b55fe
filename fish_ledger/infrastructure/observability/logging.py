"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from fish_ledger.config import settings


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

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_bill_created(
    request_id: str,
    transaction_id: int,
    customer_name: str,
    total_paise: int,
    item_count: int,
) -> None:
    """Log a newly persisted bill"""
    logging.info(
        "Bill created",
        extra={
            "request_id": request_id,
            "transaction_id": transaction_id,
            "customer_name": customer_name,
            "step": "bill_created",
            "total_paise": total_paise,
            "item_count": item_count,
        },
    )


def log_payment(
    request_id: str,
    transaction_id: int,
    amount_paise: int,
    outcome: str,
    remaining_paise: int | None = None,
) -> None:
    """Log structured payment outcome; rejected payments log at warning"""
    level = logging.INFO if outcome == "accepted" else logging.WARNING
    logging.log(
        level,
        "Payment %s",
        outcome,
        extra={
            "request_id": request_id,
            "transaction_id": transaction_id,
            "step": "payment",
            "payment_outcome": outcome,
            "amount_paise": amount_paise,
            "remaining_paise": remaining_paise,
        },
    )
