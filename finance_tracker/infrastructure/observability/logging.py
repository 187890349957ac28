"""Structured JSON logging for production observability"""

import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger.json import JsonFormatter
from finance_tracker.config import settings

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def bind_request_id(request_id: Optional[str]):
    """Tag log records emitted by the current request; returns a reset token"""
    return _request_id.set(request_id)


def reset_request_id(token) -> None:
    _request_id.reset(token)


class RequestIDFilter(logging.Filter):
    """Copy the bound request id onto every record"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()
        return True


class CustomJsonFormatter(JsonFormatter):
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
    handler.addFilter(RequestIDFilter())
    logger.addHandler(handler)


def log_settlement(
    payment_id: str,
    credit_id: str,
    transaction_id: str,
    amount_cents: int,
    remaining_cents: int,
    credit_status: str,
) -> None:
    """Log structured settlement outcome for audit"""
    logging.info(
        "Payment settled",
        extra={
            "payment_id": payment_id,
            "credit_id": credit_id,
            "transaction_id": transaction_id,
            "step": "settlement_complete",
            "amount_cents": amount_cents,
            "remaining_cents": remaining_cents,
            "credit_status": credit_status,
        },
    )


def log_rejection(operation: str, reason: str, **context: Any) -> None:
    """Log a guard or validation rejection"""
    logging.warning(
        f"{operation} rejected: {reason}",
        extra={"step": f"{operation}_rejected", **context},
    )
