import logging
import os
import sys
from datetime import datetime

import pytz
import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from provisioner.ansi_colors import (
    BRIGHT_YELLOW,
    GRAY,
    GREEN,
    RED,
    RESET,
    WHITE,
    YELLOW,
    supports_color,
)
from provisioner.config import ENVIRONMENT, LOG_FILE, LOG_TIMEZONE, SENTRY_DSN

logger = logging.getLogger(__name__)

COLOR_FORMAT = f"[%(levelname)5.5s] {GREEN}[%(asctime)s]{RESET} {YELLOW}%(pathname)22s:%(lineno)-4d{RESET} %(message)s"
PLAIN_FORMAT = "[%(levelname)5.5s] [%(asctime)s] %(pathname)22s:%(lineno)-4d %(message)s"
DATE_FORMAT = "%-m-%-d-%y %H:%M:%S %Z"


class CustomFilter(logging.Filter):
    """Filter out DEBUG messages from external libraries."""

    def filter(self, record):
        # Our own modules live in site-packages too once installed
        if record.name.startswith("provisioner"):
            return True
        if record.levelno == logging.DEBUG and "site-packages" in record.pathname:
            return False
        return True


class RelativePathFormatter(logging.Formatter):
    """Format the pathname to be relative to the project root, in a fixed timezone."""

    max_path_length = 22

    def __init__(self, *args, timezone=LOG_TIMEZONE, colorize=True, **kwargs):
        super().__init__(*args, **kwargs)
        self.tz = pytz.timezone(timezone)
        self.colorize = colorize

        self.level_colors = {
            logging.DEBUG: GRAY,
            logging.INFO: WHITE,
            logging.WARNING: BRIGHT_YELLOW,
            logging.ERROR: RED,
            logging.CRITICAL: RED,
        }

    def formatTime(self, record, datefmt=None):
        """Override formatTime to use the configured timezone"""
        ct = datetime.fromtimestamp(record.created, tz=pytz.UTC).astimezone(self.tz)
        return ct.strftime(datefmt or DATE_FORMAT)

    def _shorten_path(self, pathname: str) -> str:
        project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        if pathname.startswith(project_root):
            pathname = os.path.relpath(pathname, project_root)

        if len(pathname) <= self.max_path_length:
            return pathname

        # Keep the filename, truncate directories from the left
        return "..." + pathname[-(self.max_path_length - 3) :]

    def format(self, record):
        record.pathname = self._shorten_path(record.pathname)
        formatted = super().format(record)

        level_color = self.level_colors.get(record.levelno, "")
        if not self.colorize or not level_color or level_color == WHITE:
            return formatted

        level_pattern = f"[{record.levelname:5.5s}]"
        formatted = formatted.replace(level_pattern, f"{level_color}{level_pattern}{RESET}", 1)

        # Color the message itself unless it already carries escape codes
        message = record.getMessage()
        if message and "\033[" not in message and formatted.endswith(message):
            formatted = formatted[: -len(message)] + level_color + message + RESET
        return formatted


def setup_logger(log_file: str = LOG_FILE, console_level=logging.INFO):
    """Configure the root logger with a console handler and a truncated debug log file."""
    os.makedirs(os.path.dirname(log_file), exist_ok=True)

    # Clear the log file
    with open(log_file, "w") as f:
        f.truncate(0)

    use_color = supports_color(sys.stdout)
    console_formatter = RelativePathFormatter(
        COLOR_FORMAT if use_color else PLAIN_FORMAT, datefmt=DATE_FORMAT, colorize=use_color
    )
    file_formatter = RelativePathFormatter(PLAIN_FORMAT, datefmt=DATE_FORMAT, colorize=False)
    custom_filter = CustomFilter()

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Remove any existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(console_formatter)
    console_handler.addFilter(custom_filter)
    root_logger.addHandler(console_handler)

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(file_formatter)
    file_handler.addFilter(custom_filter)
    root_logger.addHandler(file_handler)

    return root_logger


def setup_sentry(dsn: str = SENTRY_DSN) -> bool:
    """Send ERROR logs to Sentry when a DSN is configured.

    Returns:
        bool: True if Sentry was initialized
    """
    if not dsn:
        logger.debug("SENTRY_DSN not set - Sentry not initialized")
        return False

    sentry_sdk.init(
        dsn=dsn,
        integrations=[
            LoggingIntegration(
                level=logging.INFO,  # Capture info and above as breadcrumbs
                event_level=logging.ERROR,  # Send errors as events
            ),
        ],
        environment=ENVIRONMENT.lower(),
        send_default_pii=False,
    )
    logger.info(f"Sentry initialized for {ENVIRONMENT} environment")
    return True
