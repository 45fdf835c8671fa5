import logging

from pythonjsonlogger import jsonlogger


def configure_logging(level: str = "info") -> None:
    """Send every record through a single JSON handler on the root logger."""
    logger = logging.getLogger()
    handler = logging.StreamHandler()
    handler.setFormatter(
        jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    )
    logger.handlers = [handler]
    logger.setLevel(level.upper())
