"""
Logging setup. Called once from the application factory.
"""
import logging
import sys

LOG_FORMAT = "[%(asctime)s] %(levelname)s in %(module)s: %(message)s"


def init_logging(level_name: str = "INFO") -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)

    root = logging.getLogger("jobboard")
    root.setLevel(level)

    # Avoid duplicate handlers when the app is created more than once (tests, reload)
    if not any(getattr(h, "_jobboard", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._jobboard = True
        root.addHandler(handler)

    # SQL echo is noisy; only surface warnings unless debugging
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if level <= logging.DEBUG else logging.WARNING
    )
