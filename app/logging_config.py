"""Logging configuration."""

import logging
import sys

from app.config import get_settings


def setup_logging():
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
