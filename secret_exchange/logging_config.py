import logging
import sys


def setup_logging(level="INFO") -> logging.Logger:
    logger = logging.getLogger("secret_exchange")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)
    if logger.handlers:
        return logger  # already configured
    handler = logging.StreamHandler(sys.stdout)
    fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    handler.setFormatter(fmt)
    logger.addHandler(handler)
    # passlib is chatty about backend detection
    logging.getLogger("passlib").setLevel(logging.ERROR)
    return logger
