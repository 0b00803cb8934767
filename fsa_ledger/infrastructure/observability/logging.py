"""Structured JSON logging for production observability"""

import logging
import sys
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from fsa_ledger.config import settings
from fsa_ledger.utils.date_utils import utcnow


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = utcnow().isoformat()
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


def log_allocation(
    account_id: str,
    amount: Decimal,
    new_balance: Decimal,
    annual_limit: Decimal,
    attempts: int,
    duration_ms: float,
) -> None:
    """Log structured allocation outcome for analysis"""
    logging.getLogger("fsa_ledger.allocation").info(
        "Allocation committed",
        extra={
            "account_id": account_id,
            "step": "allocation_complete",
            "amount": str(amount),
            "new_balance": str(new_balance),
            "annual_limit": str(annual_limit),
            "attempts": attempts,
            "duration_ms": duration_ms,
        },
    )
