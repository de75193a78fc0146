"""Logging setup for renders run as scripts.

Library modules only create ``logging.getLogger(__name__)`` loggers; scripts
call setup_logging() once to attach handlers to the package logger.
"""

import logging

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    name: str = "pathtracer",
    level: int | str = logging.INFO,
    log_format: str = DEFAULT_LOG_FORMAT,
    log_file: str | None = None,
) -> logging.Logger:
    """Configure a logger with a stderr handler and an optional file handler.

    Existing handlers on the logger are replaced, so calling this twice does
    not duplicate output.

    Args:
        name: Logger name. The default covers every module in the package.
        level: Logging level, as a number or a name such as "DEBUG".
        log_format: Format string for all handlers.
        log_file: Optional path of a file to log to as well.

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    formatter = logging.Formatter(log_format)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False

    return logger
