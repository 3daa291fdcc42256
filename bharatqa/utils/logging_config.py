import logging
import sys
import os
from datetime import datetime

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVEL_COLORS = {
    logging.DEBUG: "\x1b[36m",
    logging.INFO: "\x1b[32m",
    logging.WARNING: "\x1b[33m",
    logging.ERROR: "\x1b[31m",
    logging.CRITICAL: "\x1b[31;1m",
}
_RESET = "\x1b[0m"


class ColoredFormatter(logging.Formatter):
    """Colors the whole line by level; plain text when use_color is off."""

    def __init__(self, use_color: bool = True):
        super().__init__(LOG_FORMAT, datefmt=DATE_FORMAT)
        self.use_color = use_color

    def format(self, record):
        line = super().format(record)
        color = _LEVEL_COLORS.get(record.levelno)
        if not self.use_color or color is None:
            return line
        return f"{color}{line}{_RESET}"


def setup_logging(level=logging.INFO, log_dir: str = "logs"):
    """Setup centralized logging configuration (console + daily file)."""
    root_logger = logging.getLogger()

    # Clear existing handlers to prevent duplicate logs
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(level)

    # stderr keeps uvicorn's own output readable; hosted log collectors get no escape codes
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ColoredFormatter(use_color=sys.stderr.isatty()))
    root_logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(
            os.path.join(log_dir, f"bharatqa_{datetime.now().strftime('%Y%m%d')}.log"),
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    for logger_name in ["bharatqa", "uvicorn", "uvicorn.error", "uvicorn.access", "main"]:
        logging.getLogger(logger_name).setLevel(level)

    root_logger.info("Logging initialized (console%s).", " + file" if log_dir else "")
