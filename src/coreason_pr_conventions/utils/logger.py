import sys

from loguru import logger

__all__ = ["logger", "configure_logging"]

LOG_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO") -> None:
    """
    Routes loguru output to stderr at the given level.

    Contributor-facing rule output goes to stdout through the reporters, so the
    log stream is kept on stderr.
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
