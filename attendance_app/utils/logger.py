import logging
import os


def init_logging(app):
    """Configure global logging for the whole Flask app."""
    handlers = [logging.StreamHandler()]
    log_dir = app.config.get("LOG_DIR")
    if log_dir is None:
        log_dir = os.path.join(os.path.dirname(__file__), "..", "..", "logs")
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(log_dir, "app.log"), encoding="utf-8"))

    log_level = app.config.get("LOG_LEVEL", "INFO").upper()
    numeric_level = getattr(logging, log_level, logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] [%(name)s:%(lineno)d] - %(message)s",
        handlers=handlers,
    )

    app.logger.setLevel(numeric_level)
    logging.getLogger("attendance_app").setLevel(numeric_level)
    app.logger.info("Logging initialized at %s level", log_level)
