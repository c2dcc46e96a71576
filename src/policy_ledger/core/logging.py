"""Logging configuration with identity masking."""

from __future__ import annotations

import logging
import re

from policy_ledger.core.crypto import mask_identity

LOGGER_NAME = "policy_ledger"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

HEX_IDENTITY_PATTERN = re.compile(r"0x[0-9a-fA-F]{40}")


class MaskingFormatter(logging.Formatter):
    """Formatter that masks hex principal identities in rendered records."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        return HEX_IDENTITY_PATTERN.sub(lambda match: mask_identity(match.group(0)), message)


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure the package logger once and return it."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(isinstance(handler.formatter, MaskingFormatter) for handler in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(MaskingFormatter(LOG_FORMAT))
        logger.addHandler(console_handler)

    return logger
