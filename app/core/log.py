import logging
import sys

_root_logger = logging.getLogger()

LOG_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s.%(funcName)s:%(lineno)d %(message)s"


def setup_logging(level: int | str = logging.INFO, *, logger: logging.Logger = _root_logger) -> None:
    """Attach a single stream handler to `logger`; safe to call more than once."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger.setLevel(level)
    for handler in logger.handlers:
        if getattr(handler, "_nebula_handler", False):
            handler.setLevel(level)
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.setLevel(level)
    handler._nebula_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
