"""JSON logging configuration for the TLS provisioning scripts."""

import logging
import os

from pythonjsonlogger import jsonlogger

LOG_LEVEL_ENV_VAR = "KAFKA_TLS_LOG_LEVEL"


class ProvisioningJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with a focused field set.

    Keeps timestamp, level, message, exc_info, funcName, lineno and the
    pipeline step name when a record carries one (passed via extra={"step": ...}).
    """

    allowed_fields = frozenset(
        {"timestamp", "level", "message", "exc_info", "funcName", "lineno", "step"}
    )

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        if "levelname" in log_record:
            log_record["level"] = log_record.pop("levelname")

        for key in [key for key in log_record if key not in self.allowed_fields]:
            log_record.pop(key)


def _setup_logger() -> logging.Logger:
    """Initialize and configure singleton logger.

    Level defaults to INFO and can be changed with KAFKA_TLS_LOG_LEVEL.

    Returns:
        Configured logger with ProvisioningJsonFormatter
    """
    logger = logging.getLogger("kafka_tls")

    # Module reloads must not stack handlers
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(
        ProvisioningJsonFormatter(
            fmt="%(timestamp)s %(levelname)s %(funcName)s %(lineno)d %(message)s",
            timestamp=True,
        )
    )

    logger.setLevel(os.environ.get(LOG_LEVEL_ENV_VAR, "INFO").upper())
    logger.addHandler(handler)
    logger.propagate = False

    return logger


LOGGER = _setup_logger()
