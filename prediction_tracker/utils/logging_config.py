import logging
import sys


def setup_logging(level: int | str = logging.INFO):
    """Configures logging for the application."""
    logger = logging.getLogger()  # Root logger
    logger.setLevel(level)

    # Clear existing handlers before adding a new one
    while logger.hasHandlers():
        logger.removeHandler(logger.handlers[0])

    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname).1s | %(name)-30.30s | %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # requests/urllib3 connection chatter is noise at INFO
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return logger
