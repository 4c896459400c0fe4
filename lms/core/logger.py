import logging

from lms.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging() -> None:
    """Attach a single stream handler to the root logger and align the server loggers."""
    level = getattr(logging, get_settings().log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Avoid duplicate handlers when the app is reloaded
    if not any(getattr(h, "_lms_handler", False) for h in root_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._lms_handler = True
        root_logger.addHandler(handler)

    for logger_name in ["uvicorn", "uvicorn.access", "uvicorn.error", "fastapi", "lms"]:
        logging.getLogger(logger_name).setLevel(level)
