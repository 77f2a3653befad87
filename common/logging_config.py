"""
Logging Configuration.

All modules obtain their logger through `get_logger` so that grid builds,
cache activity and solver fallbacks are reported with one consistent
format. The core never configures the root logger; applications that
embed the library can attach their own handlers to the ``grids`` or
``geospatial`` namespaces.
"""

import logging
import sys


LOG_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Get a logger configured for the grid addressing library.

    Parameters
    ----------
    name : str
        Logger name (typically __name__).
    level : int
        Logging level.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    # Only a logger seen for the first time gets the level; later calls
    # keep whatever set_level chose
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(level)

    return logger


def set_level(level: int, *names: str) -> None:
    """Change the level of already-created library loggers.

    Parameters
    ----------
    level : int
        New logging level.
    *names : str
        Logger names. With no names, every logger whose name starts with
        one of the library packages is updated.
    """
    if not names:
        prefixes = ("common", "geospatial", "grids", "interpolation", "validation")
        names = tuple(
            n for n in logging.Logger.manager.loggerDict
            if n.split(".")[0] in prefixes
        )
    for name in names:
        logging.getLogger(name).setLevel(level)
