"""
Logging configuration shared by the HTTP app and the CLI
"""
import logging
import sys
from recipe_inbox.core.config import get_settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Third-party loggers that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "openai", "google.generativeai")


def setup_logging():
    """Configure root logging once; later calls only refresh the level"""
    settings = get_settings()
    level = logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if not any(getattr(h, "_recipe_inbox", False) for h in root_logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        console_handler._recipe_inbox = True
        root_logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
