import logging
import os
from pathlib import Path

LOG_DIR_ENV = "AUTHZPATHS_LOG_DIR"


def get_logger(name: str, level=logging.INFO) -> logging.Logger:
    """Get a named logger with the package's standard formatting.

    Example:
        logger = get_logger(__name__, logging.DEBUG)
        logger.debug("skipping non-hdfs path %s", raw)

    Records go to stderr and, when the log directory can be created, to
    ``<log dir>/<name>.log``. The directory comes from ``AUTHZPATHS_LOG_DIR``
    and defaults to ``log``.

    Returns:
        logging.Logger: Configured logger instance.
    """
    logger = logging.getLogger(name)

    # avoid adding duplicate handlers if called repeatedly (common in tests)
    if logger.handlers:
        logger.setLevel(level)
        return logger

    logs_dir = Path(os.environ.get(LOG_DIR_ENV, "log"))
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        # read-only filesystem or similar: stream only
        logs_dir = None

    formatter = logging.Formatter(
        "%(asctime)s     || %(name)s \n%(levelname)s   || %(message)s \n",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    if logs_dir is not None:
        filehandler = logging.FileHandler(str(logs_dir / f"{name}.log"), encoding="utf-8")
        filehandler.setFormatter(formatter)
        logger.addHandler(filehandler)

    logger.setLevel(level)
    # stop passing records to the root logger (avoid duplicated messages)
    logger.propagate = False
    logger.debug("'%s' initialized with level %s", name, logging.getLevelName(level))
    return logger
