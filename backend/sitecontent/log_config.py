import logging

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def configure_logging(app):
    """Attach a single stream handler to the package logger at LOG_LEVEL."""
    level = app.config.get("LOG_LEVEL", "INFO")
    logger = logging.getLogger("sitecontent")
    logger.setLevel(level)

    if not any(getattr(h, "_sitecontent", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._sitecontent = True
        logger.addHandler(handler)

    app.logger.setLevel(level)
