"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from armada_ledger.config import settings


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


def log_dashboard(
    request_id: str,
    investor_id: str | None,
    linked: bool,
    duration_ms: float,
) -> None:
    """Log investor dashboard lookup outcome"""
    logging.info(
        "Investor dashboard computed" if linked else "Investor dashboard not linked",
        extra={
            "request_id": request_id,
            "investor_id": investor_id,
            "step": "investor_dashboard",
            "linked": linked,
            "duration_ms": duration_ms,
        },
    )


def log_sale_completed(
    request_id: str,
    transaction_id: str,
    profit_status: str,
    net_margin: float,
    investor_profit_amount: float,
) -> None:
    """Log structured sale/profit-sharing outcome for analysis"""
    logging.info(
        "Transaction finalized",
        extra={
            "request_id": request_id,
            "transaction_id": transaction_id,
            "step": "sale_complete",
            "profit_status": profit_status,
            "net_margin": net_margin,
            "investor_profit_amount": investor_profit_amount,
        },
    )


def log_request(
    request_id: str | None,
    method: str,
    endpoint: str,
    status: int,
    duration_ms: float,
    user_id: str | None,
) -> None:
    """Access log line keyed by route template rather than raw path"""
    logging.info(
        f"{method} {endpoint} {status}",
        extra={
            "request_id": request_id,
            "method": method,
            "endpoint": endpoint,
            "status": status,
            "duration_ms": duration_ms,
            "user_id": user_id,
        },
    )
